"""Customer group → product type mapping loader.

The mapping arrives as a JSON object in an environment variable:

    {"cg-vip": ["pt-electronics", "pt-premium"], "cg-garden": ["pt-outdoor"]}

Key order is the match priority. Some deployment pipelines double-encode the
value (every quote arrives as ``\\"``), so a failed first parse is retried once
with the escaped quotes restored before giving up.

Loading never raises: anything unusable degrades to the empty mapping, which
simply matches nothing.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupRule:
    """One mapping entry: a customer group and the product types that select it."""

    customer_group_id: str
    product_type_ids: tuple[str, ...]
    _lookup: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_lookup", frozenset(self.product_type_ids))

    def covers(self, product_type_id: str | None) -> bool:
        """Return True if the product type selects this group."""
        return product_type_id is not None and product_type_id in self._lookup


@dataclass(frozen=True)
class CustomerGroupMapping:
    """Immutable, ordered sequence of group rules (earlier rules win)."""

    rules: tuple[GroupRule, ...] = ()

    def __iter__(self) -> Iterator[GroupRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __bool__(self) -> bool:
        return bool(self.rules)

    @property
    def group_ids(self) -> list[str]:
        return [rule.customer_group_id for rule in self.rules]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CustomerGroupMapping:
        """Build a mapping from a decoded JSON object, preserving key order.

        Entries with an empty group id or a value that is not a list of
        non-empty strings are dropped with a warning; valid entries survive.
        """
        rules: list[GroupRule] = []
        for group_id, product_type_ids in data.items():
            if not isinstance(group_id, str) or not group_id:
                logger.warning("Skipping mapping entry with empty customer group id")
                continue
            if not isinstance(product_type_ids, list) or not all(
                isinstance(pt, str) and pt for pt in product_type_ids
            ):
                logger.warning(
                    "Skipping mapping entry for customer group %s: expected a list of product type ids",
                    group_id,
                )
                continue
            rules.append(GroupRule(group_id, tuple(product_type_ids)))
        return cls(rules=tuple(rules))


EMPTY_MAPPING = CustomerGroupMapping()


def _parse(raw: str) -> Any:
    try:
        return json.loads(raw)
    except (ValueError, RecursionError):
        # Double-encoded source: {\"cg\":[\"pt\"]}
        return json.loads(raw.replace('\\"', '"'))


def load_customer_group_mapping(raw: str | None) -> CustomerGroupMapping:
    """Parse the raw mapping string into a CustomerGroupMapping.

    Absent or blank input is treated as ``{}``. Returns the empty mapping
    (and logs an error) when the value cannot be parsed even after
    un-escaping, or when it is not a JSON object.
    """
    if raw is None or not raw.strip():
        raw = "{}"

    try:
        data = _parse(raw)
    except (ValueError, RecursionError):
        logger.error("Failed to parse CGROUP_TO_PRODUCT_TYPE_MAP")
        return EMPTY_MAPPING

    if not isinstance(data, dict):
        logger.error(
            "CGROUP_TO_PRODUCT_TYPE_MAP must be a JSON object, got %s",
            type(data).__name__,
        )
        return EMPTY_MAPPING

    mapping = CustomerGroupMapping.from_dict(data)
    logger.info(
        "Successfully parsed product type to customer group mapping (%d groups)",
        len(mapping),
    )
    return mapping
