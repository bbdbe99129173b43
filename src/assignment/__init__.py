"""Customer group assignment — product-type rules applied to created orders."""

from src.assignment.dispatcher import DispatchOutcome, DispatchResult, OrderEventDispatcher
from src.assignment.mapping import CustomerGroupMapping, GroupRule, load_customer_group_mapping
from src.assignment.matcher import match_customer_group
from src.assignment.service import (
    AssignmentFailed,
    AssignmentNoOp,
    AssignmentUpdated,
    GroupAssigner,
)

__all__ = [
    "load_customer_group_mapping",
    "match_customer_group",
    "CustomerGroupMapping",
    "GroupRule",
    "GroupAssigner",
    "AssignmentNoOp",
    "AssignmentUpdated",
    "AssignmentFailed",
    "OrderEventDispatcher",
    "DispatchOutcome",
    "DispatchResult",
]
