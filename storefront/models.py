"""
Pydantic Models - Schemas at the cart engine boundary

- LineItemCandidate: what the UI layer hands to CartStore.add_item
- CartSummary: what the checkout collaborator reads back
"""

import json
from decimal import Decimal
from typing import Any, Optional, List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

# Attributes the older client sent at the top level instead of under "variant"
VARIANT_FIELDS = ("size", "color")

# Quantity hints are ignored: a candidate always contributes exactly one unit
QUANTITY_FIELDS = ("quantity", "cartQuantity")


class LineItemCandidate(BaseModel):
    """Product line data supplied by the UI when adding to the cart."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(min_length=1, description="Product id, the merge key")
    title: str = Field(
        default="",
        validation_alias=AliasChoices("title", "name"),
        description="Display name",
    )
    unit_price: Decimal = Field(
        ge=0,
        validation_alias=AliasChoices("unitPrice", "unit_price", "price"),
        description="Price per unit at the moment of adding",
    )
    variant: Optional[dict] = Field(default=None, description="Size/color and similar attributes")

    @model_validator(mode="before")
    @classmethod
    def lift_variant_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in QUANTITY_FIELDS:
            data.pop(key, None)
        if data.get("variant") is None:
            lifted = {key: data.pop(key) for key in VARIANT_FIELDS if data.get(key) is not None}
            if lifted:
                data["variant"] = lifted
        return data

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("unit_price", mode="before")
    @classmethod
    def convert_price(cls, v):
        if isinstance(v, bool):
            raise ValueError("unit price must be a number")
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    @model_validator(mode="after")
    def check_storable(self) -> "LineItemCandidate":
        # Extras and variant go into the JSON snapshot verbatim
        try:
            json.dumps(self.model_extra or {})
            json.dumps(self.variant)
        except (TypeError, ValueError) as e:
            raise ValueError(f"attributes must be JSON-serializable: {e}")
        return self

    def to_line_item(self):
        """Build a fresh line with a single unit."""
        # Local import: storefront.cart imports this module
        from storefront.cart.models import SNAPSHOT_KEYS, LineItem

        return LineItem(
            id=self.id,
            title=self.title,
            unit_price=self.unit_price,
            quantity=1,
            variant=dict(self.variant) if self.variant else None,
            extra={k: v for k, v in (self.model_extra or {}).items() if k not in SNAPSHOT_KEYS},
        )


class CartItemSummary(BaseModel):
    """One cart line as seen by checkout."""
    id: str
    title: str
    quantity: int = Field(ge=1)
    unit_price: Decimal
    line_total: Decimal
    variant: Optional[dict] = None


class CartSummary(BaseModel):
    """Cart contents and totals for building an order request."""
    is_empty: bool
    total_items: int = Field(ge=0)
    total: Decimal
    total_display: str
    items: List[CartItemSummary] = Field(default_factory=list)
