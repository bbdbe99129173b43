"""Customer group matching — first configured group whose product types appear in the order.

Pure function. No I/O, no state: the same order and mapping always give the
same answer.
"""

from __future__ import annotations

from src.assignment.mapping import CustomerGroupMapping
from src.schemas.events import Order


def match_customer_group(order: Order, mapping: CustomerGroupMapping) -> str | None:
    """Return the customer group id selected by the order, or None.

    Rules are tried in mapping order; the first rule covering the product
    type of any line item wins. Line items without a product type never match.
    """
    product_type_ids = [item.product_type_id for item in order.line_items or []]
    for rule in mapping:
        if any(rule.covers(pt) for pt in product_type_ids):
            return rule.customer_group_id
    return None
