from .processor import FailurePolicy, OutboxProcessor, ProcessingResult
from .worker import OutboxWorker, OutboxWorkerConfig

__all__ = [
    "FailurePolicy",
    "OutboxProcessor",
    "OutboxWorker",
    "OutboxWorkerConfig",
    "ProcessingResult",
]
