"""Totals derived from cart lines."""
from decimal import Decimal
from typing import Iterable

from .models import CartTotals, LineItem


def compute_totals(items: Iterable[LineItem]) -> CartTotals:
    """
    Sum amount and quantity over the given lines.

    Uses each line's stored unit price; no rounding is applied, so the
    amount keeps full Decimal precision. An empty collection yields zero
    totals.
    """
    amount = Decimal("0")
    quantity = 0
    for item in items:
        amount += item.line_total
        quantity += item.quantity
    return CartTotals(amount=amount, quantity=quantity)
