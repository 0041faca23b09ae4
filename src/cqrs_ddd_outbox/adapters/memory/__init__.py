from .outbox import InMemoryOutboxStore
from .unit_of_work import InMemoryUnitOfWork, in_memory_unit_of_work_factory

__all__ = [
    "InMemoryOutboxStore",
    "InMemoryUnitOfWork",
    "in_memory_unit_of_work_factory",
]
