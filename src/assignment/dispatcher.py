"""Order event dispatcher — decode → match → assign → HTTP status.

Outcomes map onto two observable responses:

    invalid envelope / payload          → 400 + message
    ignored, no match, no-op, updated   → 204
    assignment failed / unexpected error → 400 + message
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from src.assignment.mapping import CustomerGroupMapping
from src.assignment.matcher import match_customer_group
from src.assignment.service import AssignmentFailed, AssignmentNoOp, GroupAssigner
from src.decoders.pubsub import decode_envelope
from src.schemas.events import IgnoredEvent, InvalidEvent

logger = logging.getLogger(__name__)


class DispatchOutcome(str, Enum):
    """Internal outcome kind — logged, never exposed to the caller."""

    INVALID = "invalid"
    IGNORED = "ignored"
    NO_MATCH = "no_match"
    NO_OP = "no_op"
    UPDATED = "updated"
    FAILED = "failed"


@dataclass(frozen=True)
class DispatchResult:
    outcome: DispatchOutcome
    status_code: int
    message: str | None = None

    @classmethod
    def empty(cls, outcome: DispatchOutcome) -> DispatchResult:
        return cls(outcome=outcome, status_code=204)

    @classmethod
    def bad_request(cls, outcome: DispatchOutcome, message: str) -> DispatchResult:
        return cls(outcome=outcome, status_code=400, message=message)


class OrderEventDispatcher:
    """Processes one Pub/Sub push body start to finish.

    The mapping is fixed at construction; the dispatcher holds no other state
    and can serve concurrent requests.
    """

    def __init__(self, mapping: CustomerGroupMapping, assigner: GroupAssigner) -> None:
        self._mapping = mapping
        self._assigner = assigner

    @property
    def mapping(self) -> CustomerGroupMapping:
        return self._mapping

    async def dispatch(self, envelope: Any) -> DispatchResult:
        try:
            return await self._dispatch(envelope)
        except Exception as exc:
            logger.exception("Unexpected error while processing order event")
            return DispatchResult.bad_request(DispatchOutcome.FAILED, f"Bad request: {exc}")

    async def _dispatch(self, envelope: Any) -> DispatchResult:
        decoded = decode_envelope(envelope)
        if isinstance(decoded, InvalidEvent):
            return DispatchResult.bad_request(DispatchOutcome.INVALID, decoded.reason)
        if isinstance(decoded, IgnoredEvent):
            return DispatchResult.empty(DispatchOutcome.IGNORED)

        order = decoded.order
        customer_group_id = match_customer_group(order, self._mapping)
        if customer_group_id is None:
            logger.info("No matching product found in order for any configured customer group, skipping")
            return DispatchResult.empty(DispatchOutcome.NO_MATCH)

        # decode_envelope only yields orders with a customer id
        outcome = await self._assigner.assign(order.customer_id, customer_group_id)  # type: ignore[arg-type]
        if isinstance(outcome, AssignmentFailed):
            return DispatchResult.bad_request(DispatchOutcome.FAILED, f"Bad request: {outcome.reason}")
        if isinstance(outcome, AssignmentNoOp):
            return DispatchResult.empty(DispatchOutcome.NO_OP)
        return DispatchResult.empty(DispatchOutcome.UPDATED)
