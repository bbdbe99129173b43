"""Inbound event schemas — Pub/Sub push envelope and the order message it carries.

The push endpoint receives:

    {"message": {"data": "<base64>", "messageId": "...", ...}, "subscription": "..."}

and ``data`` decodes to a commerce platform message, e.g.

    {"type": "OrderCreated", "order": {"customerId": "...", "lineItems": [...]}}

Only the fields the assignment rules read are modelled; everything else is ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

ORDER_CREATED = "OrderCreated"


class ProductTypeReference(BaseModel):
    """Reference to a product type (``{"typeId": "product-type", "id": "..."}``)."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None


class LineItem(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    product_type: ProductTypeReference | None = Field(default=None, alias="productType")

    @property
    def product_type_id(self) -> str | None:
        return self.product_type.id if self.product_type else None


class Order(BaseModel):
    """The subset of an order needed to pick a customer group."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    customer_id: str | None = Field(default=None, alias="customerId")
    line_items: list[LineItem] | None = Field(default=None, alias="lineItems")


class OrderMessage(BaseModel):
    """Decoded message payload. ``order`` is present for order messages only."""

    model_config = ConfigDict(extra="ignore")

    type: str | None = None
    order: Order | None = None


# ── Decode outcomes ──────────────────────────────────────────────────


@dataclass(frozen=True)
class DecodedOrder:
    """An OrderCreated event with a customer and at least one line item."""

    order: Order


@dataclass(frozen=True)
class IgnoredEvent:
    """Well-formed event with nothing to act on (answered with 204)."""

    reason: str


@dataclass(frozen=True)
class InvalidEvent:
    """Malformed envelope or payload (answered with 400)."""

    reason: str


DecodedOutcome = Union[DecodedOrder, IgnoredEvent, InvalidEvent]
