"""Cart models with Decimal-based pricing."""
import copy
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Tuple

from storefront.services.money import multiply

# Keys with a dedicated LineItem attribute; everything else lands in `extra`.
# "price", "cartQuantity" and "name" are accepted from snapshots written
# by the older client.
_PRICE_KEYS = ("unitPrice", "unit_price", "price")
_QUANTITY_KEYS = ("quantity", "cartQuantity")
_TITLE_KEYS = ("title", "name")
SNAPSHOT_KEYS = frozenset(("id", "variant") + _PRICE_KEYS + _QUANTITY_KEYS + _TITLE_KEYS)


def _first_present(data: dict, keys: Tuple[str, ...], default: Any = None) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return default


def _parse_price(raw: Any) -> Decimal:
    if raw is None or isinstance(raw, bool):
        raise ValueError("unit price is missing")
    try:
        return Decimal(str(raw))
    except InvalidOperation:
        raise ValueError(f"unit price is not a number: {raw!r}")


@dataclass
class LineItem:
    """One distinct product entry in the cart."""
    id: str
    title: str
    unit_price: Decimal
    quantity: int = 1
    variant: Optional[dict] = None
    extra: dict = field(default_factory=dict)

    def __post_init__(self):
        self.unit_price = _parse_price(self.unit_price)
        if not isinstance(self.id, str) or not self.id:
            raise ValueError("id must be a non-empty string")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValueError("quantity must be a positive integer")
        if not self.unit_price.is_finite() or self.unit_price < 0:
            raise ValueError("unit_price must be a non-negative number")

    @property
    def line_total(self) -> Decimal:
        """unit_price x quantity, unrounded."""
        return multiply(self.unit_price, self.quantity)

    def copy(self) -> "LineItem":
        """Detached copy safe to hand to the UI layer."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        """Convert to the snapshot representation."""
        data = copy.deepcopy(self.extra)
        data.update({
            "id": self.id,
            "title": self.title,
            "unitPrice": str(self.unit_price),
            "quantity": self.quantity,
        })
        if self.variant is not None:
            data["variant"] = copy.deepcopy(self.variant)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        """Create from a snapshot entry.

        Raises:
            KeyError: no id
            ValueError/TypeError: id, quantity or price out of range
        """
        raw_id = data["id"]
        if isinstance(raw_id, int) and not isinstance(raw_id, bool):
            raw_id = str(raw_id)
        elif isinstance(raw_id, str):
            raw_id = raw_id.strip()

        quantity = _first_present(data, _QUANTITY_KEYS, 1)
        if isinstance(quantity, float) and quantity.is_integer():
            quantity = int(quantity)

        variant = data.get("variant")
        if variant is not None and not isinstance(variant, dict):
            raise TypeError("variant must be an object")

        return cls(
            id=raw_id,
            title=str(_first_present(data, _TITLE_KEYS, "")),
            unit_price=_parse_price(_first_present(data, _PRICE_KEYS)),
            quantity=quantity,
            variant=copy.deepcopy(variant),
            extra={k: copy.deepcopy(v) for k, v in data.items() if k not in SNAPSHOT_KEYS},
        )


@dataclass(frozen=True)
class CartTotals:
    """Aggregate amount and unit count over all lines."""
    amount: Decimal = Decimal("0")
    quantity: int = 0

    def to_dict(self) -> dict:
        return {"amount": str(self.amount), "quantity": self.quantity}


@dataclass(frozen=True)
class CartSnapshot:
    """Read-only view of the store handed to subscribers and the UI."""
    items: Tuple[LineItem, ...]
    totals: CartTotals
    is_open: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.items

    def to_dict(self) -> dict:
        return {
            "items": [item.to_dict() for item in self.items],
            "totals": self.totals.to_dict(),
            "isOpen": self.is_open,
        }
