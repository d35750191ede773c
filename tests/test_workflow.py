# tests/test_workflow.py
import pytest

from crudsuite.models.workflow import (
    APPLICATION_TRANSITIONS,
    ORDER_TRANSITIONS,
    ApplicationStatus,
    InvalidTransition,
    OrderStatus,
    check_application_transition,
    check_order_transition,
    is_terminal,
)


def test_tables_cover_every_status():
    assert set(ORDER_TRANSITIONS) == set(OrderStatus)
    assert set(APPLICATION_TRANSITIONS) == set(ApplicationStatus)


@pytest.mark.parametrize("current,target", [
    (OrderStatus.PENDING, OrderStatus.PROCESSING),
    (OrderStatus.PENDING, OrderStatus.CANCELLED),
    (OrderStatus.PROCESSING, OrderStatus.SHIPPED),
    (OrderStatus.PROCESSING, OrderStatus.CANCELLED),
    (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
])
def test_allowed_order_moves(current, target):
    check_order_transition(current, target)


@pytest.mark.parametrize("current,target", [
    (OrderStatus.PENDING, OrderStatus.SHIPPED),
    (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
    (OrderStatus.DELIVERED, OrderStatus.PENDING),
    (OrderStatus.CANCELLED, OrderStatus.PROCESSING),
    (OrderStatus.PENDING, OrderStatus.PENDING),
])
def test_rejected_order_moves(current, target):
    with pytest.raises(InvalidTransition) as exc:
        check_order_transition(current, target)
    assert str(exc.value) == f"Cannot change status from {current.value} to {target.value}"


def test_application_decisions_are_final():
    check_application_transition(ApplicationStatus.PENDING, ApplicationStatus.ACCEPTED)
    check_application_transition(ApplicationStatus.PENDING, ApplicationStatus.REJECTED)
    for done in (ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED):
        assert is_terminal(done)
        for target in ApplicationStatus:
            with pytest.raises(InvalidTransition):
                check_application_transition(done, target)


def test_terminal_order_states():
    assert {s for s in OrderStatus if is_terminal(s)} == {OrderStatus.DELIVERED, OrderStatus.CANCELLED}
