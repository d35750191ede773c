# crudsuite/models/workflow.py
"""
Closed status sets and their transition tables.

Every member of a status enum must appear as a key of its table; a missing
key is caught at import time by ``_check_exhaustive``.
"""
from enum import Enum
from typing import Dict, FrozenSet, Type


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

APPLICATION_TRANSITIONS: Dict[ApplicationStatus, FrozenSet[ApplicationStatus]] = {
    ApplicationStatus.PENDING: frozenset({ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED}),
    ApplicationStatus.ACCEPTED: frozenset(),
    ApplicationStatus.REJECTED: frozenset(),
}


class InvalidTransition(Exception):
    def __init__(self, current: Enum, target: Enum):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change status from {current.value} to {target.value}")


def _check_exhaustive(enum_cls: Type[Enum], table: Dict) -> None:
    missing = set(enum_cls) - set(table)
    if missing:
        raise RuntimeError(f"{enum_cls.__name__} transitions missing for {sorted(m.value for m in missing)}")


_check_exhaustive(OrderStatus, ORDER_TRANSITIONS)
_check_exhaustive(ApplicationStatus, APPLICATION_TRANSITIONS)


def is_terminal(status: Enum) -> bool:
    if isinstance(status, OrderStatus):
        return not ORDER_TRANSITIONS[status]
    if isinstance(status, ApplicationStatus):
        return not APPLICATION_TRANSITIONS[status]
    raise TypeError(f"unknown status type {type(status).__name__}")


def check_order_transition(current: OrderStatus, target: OrderStatus) -> None:
    if target not in ORDER_TRANSITIONS[current]:
        raise InvalidTransition(current, target)


def check_application_transition(current: ApplicationStatus, target: ApplicationStatus) -> None:
    if target not in APPLICATION_TRANSITIONS[current]:
        raise InvalidTransition(current, target)
