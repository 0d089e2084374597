"""
Cart notification sinks.

CartStore reports every outcome through a sink with a single method,
notify(kind, message). Sinks are purely observational: the store guards
every call, so a sink that raises cannot change cart state.
"""

from enum import Enum
from typing import List, Protocol, Tuple

from storefront.logging import get_logger, sanitize_string_for_logging


class NotificationKind(str, Enum):
    """Outcome categories reported by CartStore."""
    ITEM_ADDED = "item_added"
    ITEM_REMOVED = "item_removed"
    QUANTITY_INCREASED = "quantity_increased"
    QUANTITY_DECREASED = "quantity_decreased"
    CART_CLEARED = "cart_cleared"
    PERSISTENCE_FAILED = "persistence_failed"

    @property
    def is_warning(self) -> bool:
        return self is NotificationKind.PERSISTENCE_FAILED


def item_added_message(title: str) -> str:
    return f"{title or 'Item'} added to Cart"


def item_removed_message(title: str) -> str:
    return f"{title or 'Item'} Removed From Cart"


MSG_QUANTITY_INCREASED = "Item QTY Increased"
MSG_QUANTITY_DECREASED = "Item QTY Decreased"
MSG_CART_CLEARED = "Cart Cleared"
MSG_PERSISTENCE_FAILED = "Cart could not be saved; changes are kept for this session"


class NotificationSink(Protocol):
    """Port for human-readable cart outcomes."""

    def notify(self, kind: NotificationKind, message: str) -> None:
        ...


class NullNotifier:
    """Drops every notification (headless use)."""

    def notify(self, kind: NotificationKind, message: str) -> None:
        return None


class LoggingNotifier:
    """Writes notifications to the application log."""

    def __init__(self, logger_name: str = "storefront.cart.events"):
        self._logger = get_logger(logger_name)

    def notify(self, kind: NotificationKind, message: str) -> None:
        text = sanitize_string_for_logging(message, max_length=120)
        if kind.is_warning:
            self._logger.warning(f"[{kind.value}] {text}")
        else:
            self._logger.info(f"[{kind.value}] {text}")


class RecordingNotifier:
    """Keeps every notification in memory, oldest first."""

    def __init__(self):
        self.events: List[Tuple[NotificationKind, str]] = []

    def notify(self, kind: NotificationKind, message: str) -> None:
        self.events.append((kind, message))

    @property
    def kinds(self) -> List[NotificationKind]:
        return [kind for kind, _ in self.events]

    @property
    def messages(self) -> List[str]:
        return [message for _, message in self.events]

    def clear(self) -> None:
        self.events.clear()


def build_notifier(name: str) -> NotificationSink:
    """Map a CART_NOTIFIER setting to a sink."""
    if name == "log":
        return LoggingNotifier()
    if name == "none":
        return NullNotifier()
    raise ValueError(f"Unknown notifier: {name}")
