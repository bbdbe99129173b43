"""Customer group assignment — read the customer, update only when the group differs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, Union

from src.integrations.commercetools.client import CommercetoolsError
from src.integrations.commercetools.schemas import (
    Customer,
    SetCustomerGroupAction,
    set_customer_group_action,
)

logger = logging.getLogger(__name__)


class CustomerDirectory(Protocol):
    """Read/write access to customers (implemented by CommercetoolsClient)."""

    async def get_customer(self, customer_id: str) -> Customer: ...

    async def update_customer(
        self,
        customer_id: str,
        version: int,
        actions: list[SetCustomerGroupAction],
    ) -> Customer: ...


@dataclass(frozen=True)
class AssignmentNoOp:
    """Customer already in the target group; nothing was written."""

    customer_id: str
    customer_group_id: str


@dataclass(frozen=True)
class AssignmentUpdated:
    customer_id: str
    customer_group_id: str
    previous_group_id: str | None
    version: int


@dataclass(frozen=True)
class AssignmentFailed:
    """Read or update rejected by the customer directory (incl. version conflicts)."""

    customer_id: str
    reason: str
    status_code: int | None = None


AssignmentOutcome = Union[AssignmentNoOp, AssignmentUpdated, AssignmentFailed]


class GroupAssigner:
    """Moves a customer into a customer group, at most one write per call.

    No retries: a failed or conflicting update is reported as
    AssignmentFailed and the whole event is redelivered upstream. Redelivery
    is safe because a customer already in the group is left untouched.
    """

    def __init__(self, directory: CustomerDirectory) -> None:
        self._directory = directory

    async def assign(self, customer_id: str, customer_group_id: str) -> AssignmentOutcome:
        try:
            customer = await self._directory.get_customer(customer_id)
        except CommercetoolsError as exc:
            logger.warning("Could not fetch customer %s: %s", customer_id, exc)
            return AssignmentFailed(customer_id, str(exc), exc.status_code)

        if customer.customer_group_id == customer_group_id:
            logger.info("Customer already belongs to the target group, skipping")
            return AssignmentNoOp(customer_id, customer_group_id)

        try:
            updated = await self._directory.update_customer(
                customer_id,
                customer.version,
                [set_customer_group_action(customer_group_id)],
            )
        except CommercetoolsError as exc:
            if exc.is_conflict:
                logger.warning(
                    "Customer %s was modified concurrently (version %s), not updated",
                    customer_id,
                    customer.version,
                )
            else:
                logger.warning("Could not update customer %s: %s", customer_id, exc)
            return AssignmentFailed(customer_id, str(exc), exc.status_code)

        logger.info("Added customer %s to customer group %s", customer_id, customer_group_id)
        return AssignmentUpdated(
            customer_id=customer_id,
            customer_group_id=customer_group_id,
            previous_group_id=customer.customer_group_id,
            version=updated.version,
        )
