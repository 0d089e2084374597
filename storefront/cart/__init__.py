"""Cart package: models, totals, storage, notifications, and the store."""
from .models import CartSnapshot, CartTotals, LineItem
from .notifications import (
    LoggingNotifier,
    NotificationKind,
    NotificationSink,
    NullNotifier,
    RecordingNotifier,
)
from .service import CartResult, CartStore, create_cart_store
from .storage import CartPersistence, FileSlot, MemorySlot, RedisSlot
from .totals import compute_totals

__all__ = [
    "CartPersistence",
    "CartResult",
    "CartSnapshot",
    "CartStore",
    "CartTotals",
    "FileSlot",
    "LineItem",
    "LoggingNotifier",
    "MemorySlot",
    "NotificationKind",
    "NotificationSink",
    "NullNotifier",
    "RecordingNotifier",
    "RedisSlot",
    "compute_totals",
    "create_cart_store",
]
