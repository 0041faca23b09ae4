from .background_worker import IBackgroundWorker
from .notifier import EventHandler, INotifier
from .outbox import IOutboxStore
from .unit_of_work import UnitOfWork

__all__ = [
    "EventHandler",
    "IBackgroundWorker",
    "INotifier",
    "IOutboxStore",
    "UnitOfWork",
]
