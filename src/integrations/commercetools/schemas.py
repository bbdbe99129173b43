"""Pydantic schemas for the commerce platform customer endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

CUSTOMER_GROUP_TYPE_ID = "customer-group"


class CustomerGroupReference(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type_id: Literal["customer-group"] = Field(default=CUSTOMER_GROUP_TYPE_ID, alias="typeId")
    id: str


class Customer(BaseModel):
    """Customer record — only the fields needed for group assignment."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    version: int
    customer_group: CustomerGroupReference | None = Field(default=None, alias="customerGroup")

    @property
    def customer_group_id(self) -> str | None:
        return self.customer_group.id if self.customer_group else None


class SetCustomerGroupAction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: Literal["setCustomerGroup"] = "setCustomerGroup"
    customer_group: CustomerGroupReference = Field(alias="customerGroup")


class CustomerUpdate(BaseModel):
    """Body of ``POST /{projectKey}/customers/{id}``.

    ``version`` must be the version last read; the platform rejects the
    update with 409 if the customer changed in between.
    """

    version: int
    actions: list[SetCustomerGroupAction]

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


def set_customer_group_action(customer_group_id: str) -> SetCustomerGroupAction:
    """Build a ``setCustomerGroup`` action referencing the group by id."""
    return SetCustomerGroupAction(customer_group=CustomerGroupReference(id=customer_group_id))
