"""CartStore: in-memory cart with write-through snapshot persistence."""
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from pydantic import ValidationError

from storefront.config import CartSettings, load_settings
from storefront.errors import ERROR_INVALID_ITEM
from storefront.logging import get_logger
from storefront.models import CartItemSummary, CartSummary, LineItemCandidate
from storefront.services.money import format_money

from .models import CartSnapshot, CartTotals, LineItem
from .notifications import (
    MSG_CART_CLEARED,
    MSG_PERSISTENCE_FAILED,
    MSG_QUANTITY_DECREASED,
    MSG_QUANTITY_INCREASED,
    NotificationKind,
    NotificationSink,
    NullNotifier,
    build_notifier,
    item_added_message,
    item_removed_message,
)
from .storage import CartPersistence, SnapshotReadError, build_persistence
from .totals import compute_totals

logger = get_logger(__name__)

Subscriber = Callable[[CartSnapshot], Any]


@dataclass(frozen=True)
class CartResult:
    """Outcome of a CartStore operation.

    ok is False only for rejected input. changed tells whether the item
    collection (or the open flag) differs from before the call. persisted
    is False only when the snapshot write failed.
    """
    ok: bool
    changed: bool
    snapshot: CartSnapshot
    persisted: bool = True
    error: Optional[str] = None


def _describe_validation_error(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "item"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def _normalize_id(item_id: Any) -> Optional[str]:
    if isinstance(item_id, bool):
        return None
    if isinstance(item_id, int):
        return str(item_id)
    if isinstance(item_id, str):
        return item_id.strip()
    return None


class CartStore:
    """
    Shopping cart state container.

    Every item mutation runs to completion in one call:
    validate -> mutate -> refresh totals -> save snapshot -> notify ->
    broadcast to subscribers. Lines are unique by product id; the
    variant is not part of the identity, so re-adding the same id with
    a different size or color bumps the existing line and keeps the
    first variant.

    Unknown ids are no-ops, never errors. A failed snapshot write keeps
    the in-memory change and is reported as a warning notification.
    """

    def __init__(
        self,
        persistence: Optional[CartPersistence] = None,
        notifier: Optional[NotificationSink] = None,
    ):
        self._persistence = persistence if persistence is not None else CartPersistence()
        self._notifier = notifier if notifier is not None else NullNotifier()
        self._subscribers: List[Subscriber] = []
        self._is_open = False
        self._items: List[LineItem] = self._persistence.load()
        self._totals = compute_totals(self._items)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def items(self) -> Tuple[LineItem, ...]:
        return tuple(item.copy() for item in self._items)

    @property
    def totals(self) -> CartTotals:
        return self._totals

    @property
    def is_open(self) -> bool:
        return self._is_open

    def snapshot(self) -> CartSnapshot:
        return CartSnapshot(items=self.items, totals=self._totals, is_open=self._is_open)

    def get_item(self, item_id: Any) -> Optional[LineItem]:
        item = self._find(_normalize_id(item_id))
        return item.copy() if item is not None else None

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: Any) -> bool:
        return self._find(_normalize_id(item_id)) is not None

    def summary(self, currency: str = "USD") -> CartSummary:
        """Cart contents for the checkout collaborator."""
        return CartSummary(
            is_empty=not self._items,
            total_items=self._totals.quantity,
            total=self._totals.amount,
            total_display=format_money(self._totals.amount, currency),
            items=[
                CartItemSummary(
                    id=item.id,
                    title=item.title,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    line_total=item.line_total,
                    variant=item.variant,
                )
                for item in self._items
            ],
        )

    # ------------------------------------------------------------------
    # Item mutations
    # ------------------------------------------------------------------

    def add_item(self, candidate: Any) -> CartResult:
        """Add one unit of a product, merging by id."""
        try:
            line = self._to_line_item(candidate)
        except ValidationError as e:
            return self._reject(f"{ERROR_INVALID_ITEM}: {_describe_validation_error(e)}")
        except ValueError as e:
            return self._reject(f"{ERROR_INVALID_ITEM}: {e}")

        existing = self._find(line.id)
        if existing is not None:
            existing.quantity += 1
            return self._commit(NotificationKind.QUANTITY_INCREASED, MSG_QUANTITY_INCREASED)

        self._items.append(line)
        return self._commit(NotificationKind.ITEM_ADDED, item_added_message(line.title))

    def remove_item(self, item_id: Any) -> CartResult:
        """Delete the line with this id, if any."""
        item = self._find(_normalize_id(item_id))
        if item is None:
            return self._unchanged()

        self._items = [line for line in self._items if line.id != item.id]
        return self._commit(NotificationKind.ITEM_REMOVED, item_removed_message(item.title))

    def increase_quantity(self, item_id: Any) -> CartResult:
        item = self._find(_normalize_id(item_id))
        if item is None:
            return self._unchanged()

        item.quantity += 1
        return self._commit(NotificationKind.QUANTITY_INCREASED, MSG_QUANTITY_INCREASED)

    def decrease_quantity(self, item_id: Any) -> CartResult:
        """Take one unit off a line. A line never drops below 1 this way."""
        item = self._find(_normalize_id(item_id))
        if item is None or item.quantity <= 1:
            return self._unchanged()

        item.quantity -= 1
        return self._commit(NotificationKind.QUANTITY_DECREASED, MSG_QUANTITY_DECREASED)

    def clear(self) -> CartResult:
        """Empty the cart and persist an empty snapshot. Safe to repeat."""
        had_items = bool(self._items)
        self._items = []
        return self._commit(NotificationKind.CART_CLEARED, MSG_CART_CLEARED, changed=had_items)

    def refresh_totals(self) -> CartTotals:
        """Recompute totals from the current lines."""
        self._totals = compute_totals(self._items)
        return self._totals

    def reload(self) -> CartResult:
        """
        Replace the in-memory lines with the stored snapshot.

        Used when another process or tab wrote the same slot. The stored
        snapshot wins outright; nothing is merged and nothing is written.
        If the slot cannot be read, the in-memory lines are kept.
        """
        try:
            loaded = self._persistence.load(strict=True)
        except SnapshotReadError as e:
            logger.warning(f"Cart reload skipped, keeping in-memory lines: {e}")
            return self._unchanged()

        previous = list(self._items)
        self._items = loaded
        self.refresh_totals()
        changed = previous != self._items
        snapshot = self.snapshot()
        if changed:
            self._broadcast(snapshot)
        return CartResult(ok=True, changed=changed, snapshot=snapshot)

    # ------------------------------------------------------------------
    # Visibility flag
    # ------------------------------------------------------------------

    def open(self) -> CartResult:
        return self._set_open(True)

    def close(self) -> CartResult:
        return self._set_open(False)

    def _set_open(self, value: bool) -> CartResult:
        changed = self._is_open != value
        self._is_open = value
        snapshot = self.snapshot()
        if changed:
            self._broadcast(snapshot)
        return CartResult(ok=True, changed=changed, snapshot=snapshot)

    # ------------------------------------------------------------------
    # Subscribers
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register an observer; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _find(self, item_id: Optional[str]) -> Optional[LineItem]:
        if not item_id:
            return None
        return next((item for item in self._items if item.id == item_id), None)

    @staticmethod
    def _to_line_item(candidate: Any) -> LineItem:
        if isinstance(candidate, LineItemCandidate):
            return candidate.to_line_item()
        if isinstance(candidate, LineItem):
            candidate = candidate.to_dict()
        if isinstance(candidate, Mapping):
            candidate = dict(candidate)
        return LineItemCandidate.model_validate(candidate).to_line_item()

    def _commit(self, kind: NotificationKind, message: str, changed: bool = True) -> CartResult:
        self.refresh_totals()
        persisted = self._persistence.save(self._items)
        self._notify(kind, message)
        if not persisted:
            self._notify(NotificationKind.PERSISTENCE_FAILED, MSG_PERSISTENCE_FAILED)

        snapshot = self.snapshot()
        self._broadcast(snapshot)
        return CartResult(ok=True, changed=changed, snapshot=snapshot, persisted=persisted)

    def _unchanged(self) -> CartResult:
        return CartResult(ok=True, changed=False, snapshot=self.snapshot())

    def _reject(self, error: str) -> CartResult:
        logger.warning(f"Rejected cart item: {error}")
        return CartResult(ok=False, changed=False, snapshot=self.snapshot(), error=error)

    def _notify(self, kind: NotificationKind, message: str) -> None:
        try:
            self._notifier.notify(kind, message)
        except Exception as e:
            logger.warning(f"Notification sink failed for {kind.value}: {e}")

    def _broadcast(self, snapshot: CartSnapshot) -> None:
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Cart subscriber failed")


def create_cart_store(settings: Optional[CartSettings] = None, notifier: Optional[NotificationSink] = None) -> CartStore:
    """
    Build a CartStore wired from configuration.

    Args:
        settings: CartSettings; read from the environment when omitted
        notifier: overrides the configured notification sink
    """
    if settings is None:
        settings = load_settings()

    persistence = build_persistence(settings)
    if notifier is None:
        notifier = build_notifier(settings.notifier)
    return CartStore(persistence=persistence, notifier=notifier)
