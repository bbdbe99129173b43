"""Tests for GroupAssigner.

Covers:
- Customer in another group (or none): one update with the read version
- Customer already in the target group: no write (idempotent)
- Read failure, update failure, version conflict → AssignmentFailed, no retry
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from src.assignment.service import (
    AssignmentFailed,
    AssignmentNoOp,
    AssignmentUpdated,
    GroupAssigner,
)
from src.integrations.commercetools.client import CommercetoolsError
from src.integrations.commercetools.schemas import Customer

# ── Helpers ──────────────────────────────────────────────────────────


def _customer(group_id: str | None = "cg2", version: int = 7) -> Customer:
    payload: dict = {"id": "cust-1", "version": version, "email": "a@example.com"}
    if group_id is not None:
        payload["customerGroup"] = {"typeId": "customer-group", "id": group_id}
    return Customer.model_validate(payload)


def _make_directory(customer: Customer | None = None) -> AsyncMock:
    directory = AsyncMock()
    current = customer or _customer()
    directory.get_customer = AsyncMock(return_value=current)
    directory.update_customer = AsyncMock(
        return_value=Customer(id=current.id, version=current.version + 1)
    )
    return directory


class TestAssignUpdates:
    @pytest.mark.asyncio()
    async def test_moves_customer_to_new_group(self):
        directory = _make_directory(_customer(group_id="cg2", version=7))

        outcome = await GroupAssigner(directory).assign("cust-1", "cg1")

        assert outcome == AssignmentUpdated(
            customer_id="cust-1", customer_group_id="cg1", previous_group_id="cg2", version=8
        )
        directory.get_customer.assert_awaited_once_with("cust-1")
        directory.update_customer.assert_awaited_once()
        customer_id, version, actions = directory.update_customer.await_args.args
        assert customer_id == "cust-1"
        assert version == 7
        assert [a.model_dump(by_alias=True) for a in actions] == [
            {"action": "setCustomerGroup", "customerGroup": {"typeId": "customer-group", "id": "cg1"}}
        ]

    @pytest.mark.asyncio()
    async def test_customer_without_group(self):
        directory = _make_directory(_customer(group_id=None))

        outcome = await GroupAssigner(directory).assign("cust-1", "cg1")

        assert isinstance(outcome, AssignmentUpdated)
        assert outcome.previous_group_id is None


class TestAssignNoOp:
    @pytest.mark.asyncio()
    async def test_already_in_group_no_write(self):
        directory = _make_directory(_customer(group_id="cg1"))

        outcome = await GroupAssigner(directory).assign("cust-1", "cg1")

        assert outcome == AssignmentNoOp("cust-1", "cg1")
        directory.update_customer.assert_not_awaited()


class TestAssignFailures:
    @pytest.mark.asyncio()
    async def test_read_failure(self):
        directory = _make_directory()
        directory.get_customer.side_effect = CommercetoolsError("The Resource was not found.", status_code=404)

        outcome = await GroupAssigner(directory).assign("cust-1", "cg1")

        assert outcome == AssignmentFailed("cust-1", "The Resource was not found.", 404)
        directory.update_customer.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_version_conflict_not_retried(self):
        directory = _make_directory()
        directory.update_customer.side_effect = CommercetoolsError(
            "Object has a different version than expected.", status_code=409
        )

        outcome = await GroupAssigner(directory).assign("cust-1", "cg1")

        assert isinstance(outcome, AssignmentFailed)
        assert outcome.status_code == 409
        assert directory.get_customer.await_count == 1
        assert directory.update_customer.await_count == 1

    @pytest.mark.asyncio()
    async def test_transport_failure(self):
        directory = _make_directory()
        directory.update_customer.side_effect = CommercetoolsError("POST /customers/cust-1 failed: timeout")

        outcome = await GroupAssigner(directory).assign("cust-1", "cg1")

        assert isinstance(outcome, AssignmentFailed)
        assert outcome.status_code is None
        assert "timeout" in outcome.reason
