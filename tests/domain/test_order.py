"""Unit tests for the Order aggregate and its business rules."""

from datetime import datetime, timedelta, timezone

import pytest

from storefront.domain.exceptions import (
    AlreadyTerminal,
    InvalidTransition,
    PreconditionFailed,
    ValidationError,
)
from storefront.domain.model.notification import ADMIN_RECIPIENT, NotificationTemplate
from storefront.domain.model.order import (
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentSummary,
    ShippingInfo,
)
from storefront.domain.model.payment import PaymentStatus
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.service import shipping_calculator

T0 = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _make_item(name: str = "Frock", qty: int = 1, price: str = "1000") -> OrderLineItem:
    """Helper to build a valid line item."""
    return OrderLineItem(
        item_id=name.lower(),
        item_name=name,
        quantity=Quantity(qty),
        unit_price=Money.of(price),
    )


def _order(subtotal: str = "4000", discount: str | None = None) -> Order:
    return Order.create(
        customer_id="cust-1",
        customer_name="Ayesha",
        items=[_make_item(price=subtotal)],
        at=T0,
        discount=Money.of(discount) if discount is not None else None,
    )


def _confirmed(subtotal: str = "4000") -> Order:
    order = _order(subtotal)
    order.submit_advance("adv-proof", T0)
    order.approve_advance(T0)
    return order


def _awaiting_final(weight_grams: int = 2300) -> Order:
    order = _confirmed()
    order.assign_shipping(shipping_calculator.cost_for(weight_grams), T0)
    order.request_final_payment(T0)
    return order


def _fully_paid() -> Order:
    order = _awaiting_final()
    order.submit_final("final-proof", T0)
    order.approve_final(T0)
    return order


def _assert_total_invariant(order: Order) -> None:
    assert order.total == order.subtotal - order.discount + order.shipping_cost


class TestOrderCreation:

    def test_happy_path(self):
        order = _order()
        assert order.id is None  # assigned by repository
        assert order.status is OrderStatus.PENDING
        assert order.advance.status is PaymentStatus.PENDING
        assert order.final.status is PaymentStatus.PENDING
        assert order.subtotal == Money.of(4000)
        assert order.shipping_cost.is_zero

    def test_advance_is_half_the_subtotal(self):
        order = _order("4000")
        assert order.advance.amount == Money.of(2000)
        assert order.final.amount == Money.of(2000)

    def test_odd_subtotal_rounds_advance_up(self):
        order = _order("1001")
        assert order.advance.amount == Money.of(501)
        assert order.final.amount == Money.of(500)

    def test_subtotal_is_sum_of_line_totals(self):
        order = Order.create(
            "cust-1", "Ayesha",
            [_make_item("Frock", 2, "1500"), _make_item("Hat", 1, "500")],
            T0,
        )
        assert order.subtotal == Money.of(3500)

    def test_discount_reduces_total(self):
        order = _order("4000", discount="500")
        assert order.total == Money.of(3500)
        assert order.advance.amount == Money.of(2000)

    def test_discount_above_subtotal_rejected(self):
        with pytest.raises(ValidationError, match="cannot exceed"):
            _order("1000", discount="1500")

    def test_initial_history_entry(self):
        order = _order()
        assert [c.status for c in order.status_history] == [OrderStatus.PENDING]
        assert order.status_history[0].at == T0

    def test_empty_order_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.create("cust-1", "Ayesha", [], T0)

    def test_51_items_rejected(self):
        items = [_make_item(f"Item{i}") for i in range(51)]
        with pytest.raises(ValidationError, match="Maximum 50"):
            Order.create("cust-1", "Ayesha", items, T0)

    def test_blank_customer_name_rejected(self):
        with pytest.raises(ValidationError, match="Customer name"):
            Order.create("cust-1", "  ", [_make_item()], T0)

    def test_line_items_are_immutable(self):
        item = _make_item()
        with pytest.raises(AttributeError):
            item.unit_price = Money.of(1)


class TestAdvancePayment:

    def test_approval_confirms_order(self):
        order = _confirmed()
        assert order.status is OrderStatus.CONFIRMED
        assert order.payment_status is PaymentSummary.ADVANCE_APPROVED

    def test_rejection_keeps_order_pending(self):
        order = _order()
        order.submit_advance("adv-proof", T0)
        order.reject_advance("blurry screenshot", T0)
        assert order.status is OrderStatus.PENDING
        assert order.advance.rejection_reason == "blurry screenshot"

    def test_reject_resubmit_approve_confirms_once(self):
        order = _order()
        order.submit_advance("adv-proof", T0)
        order.reject_advance("blurry screenshot", T0)
        order.submit_advance("adv-proof-2", T0 + timedelta(hours=1))
        order.approve_advance(T0 + timedelta(hours=2))

        assert order.status is OrderStatus.CONFIRMED
        confirmed = [c for c in order.status_history if c.status is OrderStatus.CONFIRMED]
        assert len(confirmed) == 1

    def test_second_approval_fails(self):
        order = _confirmed()
        with pytest.raises(InvalidTransition):
            order.approve_advance(T0)
        assert len(order.status_history) == 2

    def test_submission_notifies_admin(self):
        order = _order()
        order.submit_advance("adv-proof", T0)
        (request,) = order.pull_notifications()
        assert request.recipient == ADMIN_RECIPIENT
        assert request.template is NotificationTemplate.ADVANCE_SUBMITTED
        assert request.payload["proof_reference"] == "adv-proof"

    def test_rejection_reason_reaches_customer_verbatim(self):
        order = _order()
        order.submit_advance("adv-proof", T0)
        order.reject_advance("blurry screenshot", T0)
        request = order.pull_notifications()[-1]
        assert request.recipient == "cust-1"
        assert request.template is NotificationTemplate.ADVANCE_REJECTED
        assert request.payload["reason"] == "blurry screenshot"

    def test_pull_empties_the_queue(self):
        order = _confirmed()
        assert order.pull_notifications()
        assert order.pull_notifications() == []


class TestShippingAssignment:

    def test_final_amount_includes_shipping(self):
        order = _confirmed("4000")
        order.assign_shipping(shipping_calculator.cost_for(2300), T0)
        assert order.billed_kg == 3
        assert order.shipping_cost == Money.of(1050)
        assert order.final.amount == Money.of(3050)
        assert order.total == Money.of(5050)
        _assert_total_invariant(order)

    def test_requires_approved_advance(self):
        order = _order()
        with pytest.raises(PreconditionFailed, match="Advance payment must be approved"):
            order.assign_shipping(shipping_calculator.cost_for(1000), T0)
        assert order.shipping_cost.is_zero

    def test_reassignment_overwrites(self):
        order = _confirmed("4000")
        order.assign_shipping(shipping_calculator.cost_for(2300), T0)
        order.assign_shipping(shipping_calculator.cost_for(900), T0)
        assert order.shipping_cost == Money.of(350)
        assert order.order_weight_grams == 900
        assert order.final.amount == Money.of(2350)

    def test_same_weight_twice_is_idempotent(self):
        order = _confirmed("4000")
        order.assign_shipping(shipping_calculator.cost_for(2300), T0)
        first = (order.shipping_cost, order.final.amount, order.status)
        order.assign_shipping(shipping_calculator.cost_for(2300), T0)
        assert (order.shipping_cost, order.final.amount, order.status) == first

    def test_zero_weight_rejected(self):
        order = _confirmed()
        with pytest.raises(ValidationError, match="positive"):
            order.assign_shipping(shipping_calculator.cost_for(0), T0)

    def test_refused_once_final_submitted(self):
        order = _awaiting_final()
        order.submit_final("final-proof", T0)
        with pytest.raises(PreconditionFailed, match="shipping can no longer change"):
            order.assign_shipping(shipping_calculator.cost_for(5000), T0)
        assert order.shipping_cost == Money.of(1050)


class TestFinalPayment:

    def test_request_requires_shipping(self):
        order = _confirmed()
        with pytest.raises(PreconditionFailed, match="Shipping must be assigned"):
            order.request_final_payment(T0)
        assert order.final_payment_requested_at is None

    def test_request_keeps_final_pending(self):
        order = _awaiting_final()
        assert order.final.status is PaymentStatus.PENDING
        assert order.final_payment_requested_at == T0
        assert order.payment_status is PaymentSummary.PENDING_FINAL

    def test_request_after_submission_fails(self):
        order = _awaiting_final()
        order.submit_final("final-proof", T0)
        with pytest.raises(InvalidTransition):
            order.request_final_payment(T0)

    def test_submit_before_request_fails(self):
        order = _confirmed()
        order.assign_shipping(shipping_calculator.cost_for(1000), T0)
        with pytest.raises(PreconditionFailed, match="not been requested"):
            order.submit_final("final-proof", T0)

    def test_approve_only_from_submitted(self):
        order = _awaiting_final()
        with pytest.raises(InvalidTransition):
            order.approve_final(T0)

    def test_double_approval_fails(self):
        order = _fully_paid()
        assert order.payment_status is PaymentSummary.FULLY_PAID
        with pytest.raises(InvalidTransition):
            order.approve_final(T0)

    def test_approval_does_not_change_status(self):
        order = _fully_paid()
        assert order.status is OrderStatus.CONFIRMED

    def test_reject_and_resubmit(self):
        order = _awaiting_final()
        order.submit_final("final-proof", T0)
        order.reject_final("amount mismatch", T0)
        assert order.final.rejection_reason == "amount mismatch"
        order.submit_final("final-proof-2", T0)
        assert order.payment_status is PaymentSummary.FINAL_SUBMITTED


class TestStatusTransitions:

    def test_forward_chain_to_delivered(self):
        order = _fully_paid()
        for status in (
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.OUT_FOR_DELIVERY,
            OrderStatus.DELIVERED,
        ):
            order.move_to(status, T0)
        assert order.status is OrderStatus.DELIVERED
        assert order.delivered_at == T0
        assert [c.status.value for c in order.status_history] == [
            "pending", "confirmed", "processing", "shipped", "out_for_delivery", "delivered",
        ]

    def test_cannot_move_backwards(self):
        order = _confirmed()
        order.move_to(OrderStatus.SHIPPED, T0)
        with pytest.raises(InvalidTransition):
            order.move_to(OrderStatus.PROCESSING, T0)
        assert order.status is OrderStatus.SHIPPED

    def test_cannot_repeat_current_status(self):
        order = _confirmed()
        with pytest.raises(InvalidTransition):
            order.move_to(OrderStatus.CONFIRMED, T0)

    def test_cannot_pass_confirmed_without_advance(self):
        order = _order()
        with pytest.raises(PreconditionFailed):
            order.move_to(OrderStatus.PROCESSING, T0)
        assert order.status is OrderStatus.PENDING
        assert len(order.status_history) == 1

    def test_delivery_requires_final_approval(self):
        order = _awaiting_final()
        order.move_to(OrderStatus.OUT_FOR_DELIVERY, T0)
        with pytest.raises(PreconditionFailed, match="Final payment must be approved"):
            order.move_to(OrderStatus.DELIVERED, T0)

    def test_legacy_order_bypasses_final_gate(self):
        order = _confirmed()
        order.final = None
        order.move_to(OrderStatus.DELIVERED, T0)
        assert order.status is OrderStatus.DELIVERED

    def test_legacy_order_has_no_final_operations(self):
        order = _confirmed()
        order.final = None
        with pytest.raises(PreconditionFailed, match="predates split payments"):
            order.request_final_payment(T0)

    def test_shipping_metadata_recorded(self):
        order = _confirmed()
        order.move_to(
            OrderStatus.SHIPPED, T0, note="Handed to courier",
            shipping=ShippingInfo(carrier="TCS", tracking_number="TCS123"),
        )
        assert order.shipping.carrier == "TCS"
        assert order.shipping.tracking_number == "TCS123"
        assert order.status_history[-1].note == "Handed to courier"

    def test_status_change_notifies_customer(self):
        order = _confirmed()
        order.pull_notifications()
        order.move_to(OrderStatus.PROCESSING, T0)
        (request,) = order.pull_notifications()
        assert request.template is NotificationTemplate.ORDER_STATUS_CHANGED
        assert request.payload["previous_status"] == "confirmed"
        assert request.payload["status"] == "processing"


class TestCancellation:

    def test_customer_cancels_pending_order(self):
        order = _order()
        order.cancel(T0, "Changed my mind")
        assert order.status is OrderStatus.CANCELLED
        assert order.status_history[-1].note == "Changed my mind"

    def test_cannot_cancel_while_advance_under_review(self):
        order = _order()
        order.submit_advance("adv-proof", T0)
        with pytest.raises(PreconditionFailed, match="under review"):
            order.cancel(T0)
        assert order.status is OrderStatus.PENDING

    def test_can_cancel_after_rejection(self):
        order = _order()
        order.submit_advance("adv-proof", T0)
        order.reject_advance(None, T0)
        order.cancel(T0)
        assert order.status is OrderStatus.CANCELLED

    def test_customer_cannot_cancel_confirmed_order(self):
        with pytest.raises(InvalidTransition):
            _confirmed().cancel(T0)

    def test_admin_cancels_confirmed_order(self):
        order = _confirmed()
        order.move_to(OrderStatus.CANCELLED, T0, note="Out of fabric")
        assert order.status is OrderStatus.CANCELLED

    def test_admin_cannot_cancel_processing_order(self):
        order = _confirmed()
        order.move_to(OrderStatus.PROCESSING, T0)
        with pytest.raises(InvalidTransition):
            order.move_to(OrderStatus.CANCELLED, T0)

    def test_cancellation_notifies_customer(self):
        order = _order()
        order.cancel(T0)
        (request,) = order.pull_notifications()
        assert request.template is NotificationTemplate.ORDER_CANCELLED


class TestTerminalOrders:

    @pytest.mark.parametrize(
        "operation",
        [
            lambda o: o.submit_advance("p", T0),
            lambda o: o.approve_advance(T0),
            lambda o: o.move_to(OrderStatus.CONFIRMED, T0),
            lambda o: o.cancel(T0),
        ],
    )
    def test_cancelled_order_accepts_nothing(self, operation):
        order = _order()
        order.cancel(T0)
        with pytest.raises(AlreadyTerminal):
            operation(order)

    def test_delivered_order_accepts_nothing(self):
        order = _fully_paid()
        order.move_to(OrderStatus.DELIVERED, T0)
        with pytest.raises(AlreadyTerminal):
            order.assign_shipping(shipping_calculator.cost_for(100), T0)


class TestTotalInvariant:

    def test_holds_through_lifecycle(self):
        order = _order("4000", discount="300")
        _assert_total_invariant(order)
        order.submit_advance("adv-proof", T0)
        order.approve_advance(T0)
        _assert_total_invariant(order)
        order.assign_shipping(shipping_calculator.cost_for(2300), T0)
        _assert_total_invariant(order)
        order.assign_shipping(shipping_calculator.cost_for(4100), T0)
        _assert_total_invariant(order)
        assert order.total == Money.of(5450)
