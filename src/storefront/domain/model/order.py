"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its line items, its two payment
tracks and its status history.  All business invariants are enforced
here; every transition checks its preconditions before the first
mutation so a failed call leaves the order untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

from storefront.domain.exceptions import (
    AlreadyTerminal,
    InvalidTransition,
    PreconditionFailed,
    ValidationError,
)
from storefront.domain.model.notification import (
    ADMIN_RECIPIENT,
    NotificationRequest,
    NotificationTemplate,
)
from storefront.domain.model.payment import PaymentKind, PaymentStatus, PaymentTrack
from storefront.domain.model.value_objects import Money, Quantity

if TYPE_CHECKING:
    from storefront.domain.service.shipping_calculator import ShippingQuote


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentSummary(Enum):
    PENDING_ADVANCE = "pending_advance"
    ADVANCE_SUBMITTED = "advance_submitted"
    ADVANCE_APPROVED = "advance_approved"
    PENDING_FINAL = "pending_final"
    FINAL_SUBMITTED = "final_submitted"
    FULLY_PAID = "fully_paid"


FULFILMENT_CHAIN = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)
TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})
ADMIN_CANCELLABLE = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})


@dataclass(frozen=True)
class OrderLineItem:
    """Captures the resolved price of an item at order-creation time.

    Immutable: later catalog or campaign edits never reach a placed order.
    """

    item_id: str
    item_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    tier_label: str | None = None
    color: str | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class StatusChange:
    status: OrderStatus
    at: datetime
    note: str | None = None


@dataclass
class ShippingInfo:
    carrier: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_LINE_ITEMS = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders — it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.

    ``final`` is ``None`` for legacy single-payment orders.
    """

    id: int | None
    customer_id: str
    customer_name: str
    items: list[OrderLineItem]
    advance: PaymentTrack
    final: PaymentTrack | None
    discount: Money = Money.zero()
    coupon_code: str | None = None
    shipping_cost: Money = Money.zero()
    order_weight_grams: int = 0
    billed_kg: int = 0
    status: OrderStatus = OrderStatus.PENDING
    shipping: ShippingInfo = field(default_factory=ShippingInfo)
    status_history: list[StatusChange] = field(default_factory=list)
    shipping_assigned_at: datetime | None = None
    final_payment_requested_at: datetime | None = None
    delivered_at: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)
    version: int = 0
    pending_notifications: list[NotificationRequest] = field(
        default_factory=list, init=False, repr=False, compare=False
    )

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        customer_id: str,
        customer_name: str,
        items: list[OrderLineItem],
        at: datetime,
        discount: Money | None = None,
        coupon_code: str | None = None,
    ) -> Order:
        """Create a new order, enforcing all invariants.

        The advance installment is half the subtotal rounded up; the final
        installment starts as the remainder and grows by the shipping
        charge once the parcel is weighed.
        """
        if not customer_id or not customer_id.strip():
            raise ValidationError("Customer ID is required")
        if not customer_name or not customer_name.strip():
            raise ValidationError("Customer name is required")

        if not items:
            raise ValidationError("Order must contain at least one item")

        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")

        subtotal = Money.zero(items[0].unit_price.currency)
        for item in items:
            subtotal = subtotal + item.line_total

        discount = discount if discount is not None else Money.zero(subtotal.currency)
        if discount > subtotal:
            raise ValidationError(
                f"Discount {discount} cannot exceed the subtotal {subtotal}"
            )

        advance_amount = subtotal.half_rounded_up()
        return Order(
            id=None,
            customer_id=customer_id.strip(),
            customer_name=customer_name.strip(),
            items=list(items),
            advance=PaymentTrack(kind=PaymentKind.ADVANCE, amount=advance_amount),
            final=PaymentTrack(kind=PaymentKind.FINAL, amount=subtotal - advance_amount),
            discount=discount,
            coupon_code=coupon_code,
            shipping_cost=Money.zero(subtotal.currency),
            status_history=[StatusChange(OrderStatus.PENDING, at, "Order placed")],
            created_at=at,
        )

    # --- Advance installment --------------------------------------------------

    def submit_advance(self, proof_reference: str, at: datetime) -> None:
        self._ensure_open()
        self.advance.submit(proof_reference, at)
        self._notify(
            ADMIN_RECIPIENT,
            NotificationTemplate.ADVANCE_SUBMITTED,
            amount=str(self.advance.amount.amount),
            proof_reference=self.advance.proof_reference,
        )

    def approve_advance(self, at: datetime) -> None:
        """Approve the advance; a pending order becomes confirmed."""
        self._ensure_open()
        self.advance.approve(at)
        self._notify_customer(
            NotificationTemplate.ADVANCE_APPROVED,
            amount=str(self.advance.amount.amount),
        )
        if self.status is OrderStatus.PENDING:
            self._change_status(OrderStatus.CONFIRMED, at, "Advance payment approved")

    def reject_advance(self, reason: str | None, at: datetime) -> None:
        """Reject the advance.  The order stays pending until resubmission."""
        self._ensure_open()
        self.advance.reject(reason, at)
        self._notify_customer(
            NotificationTemplate.ADVANCE_REJECTED,
            reason=self.advance.rejection_reason,
        )

    # --- Shipping -------------------------------------------------------------

    def assign_shipping(self, quote: ShippingQuote, at: datetime) -> None:
        """Record the weighed parcel and its charge.

        May be repeated with a new weight; the latest assignment wins and
        the final installment is recomputed.  Not allowed once the
        customer has paid (or is paying) the final installment.
        """
        self._ensure_open()
        if not self.advance.is_approved:
            raise PreconditionFailed(
                "Advance payment must be approved before shipping is assigned"
            )
        if quote.weight_grams <= 0:
            raise ValidationError("Package weight must be positive")
        if self.final is not None and self.final.status in (
            PaymentStatus.SUBMITTED,
            PaymentStatus.APPROVED,
        ):
            raise PreconditionFailed(
                f"Final payment is already {self.final.status.value}; "
                f"shipping can no longer change"
            )

        self.shipping_cost = quote.cost
        self.order_weight_grams = quote.weight_grams
        self.billed_kg = quote.billed_kg
        self.shipping_assigned_at = at
        if self.final is not None:
            self.final.amount = self.remaining_product_cost + quote.cost

        self._notify_customer(
            NotificationTemplate.SHIPPING_ASSIGNED,
            weight_grams=quote.weight_grams,
            billed_kg=quote.billed_kg,
            shipping_cost=str(quote.cost.amount),
            amount_due=str(self.final.amount.amount) if self.final else None,
        )

    # --- Final installment ----------------------------------------------------

    def request_final_payment(self, at: datetime) -> None:
        """Ask the customer for the final installment."""
        self._ensure_open()
        final = self._require_final()
        if not self.is_shipping_assigned:
            raise PreconditionFailed(
                "Shipping must be assigned before requesting the final payment"
            )
        if final.status is not PaymentStatus.PENDING:
            raise InvalidTransition("final payment", final.status.value, "requested")

        self.final_payment_requested_at = at
        self._notify_customer(
            NotificationTemplate.FINAL_PAYMENT_REQUESTED,
            amount=str(final.amount.amount),
            shipping_cost=str(self.shipping_cost.amount),
        )

    def submit_final(self, proof_reference: str, at: datetime) -> None:
        self._ensure_open()
        final = self._require_final()
        if not self.advance.is_approved:
            raise PreconditionFailed("Advance payment must be approved first")
        if self.final_payment_requested_at is None:
            raise PreconditionFailed("Final payment has not been requested yet")

        final.submit(proof_reference, at)
        self._notify(
            ADMIN_RECIPIENT,
            NotificationTemplate.FINAL_SUBMITTED,
            amount=str(final.amount.amount),
            proof_reference=final.proof_reference,
        )

    def approve_final(self, at: datetime) -> None:
        self._ensure_open()
        final = self._require_final()
        final.approve(at)
        self._notify_customer(
            NotificationTemplate.FINAL_APPROVED,
            amount=str(final.amount.amount),
        )

    def reject_final(self, reason: str | None, at: datetime) -> None:
        self._ensure_open()
        final = self._require_final()
        final.reject(reason, at)
        self._notify_customer(
            NotificationTemplate.FINAL_REJECTED,
            reason=final.rejection_reason,
        )

    # --- Status transitions ---------------------------------------------------

    def move_to(
        self,
        target: OrderStatus,
        at: datetime,
        note: str | None = None,
        shipping: ShippingInfo | None = None,
    ) -> None:
        """Admin status edit, forward-only along the fulfilment chain.

        ``cancelled`` is reachable from ``pending`` and ``confirmed`` only.
        Any non-empty field of ``shipping`` overwrites the stored metadata.
        """
        self._ensure_open()

        if target is OrderStatus.CANCELLED:
            if self.status not in ADMIN_CANCELLABLE:
                raise InvalidTransition("order", self.status.value, target.value)
            self._ensure_no_advance_under_review()
            self._change_status(target, at, note)
            return

        if FULFILMENT_CHAIN.index(target) <= FULFILMENT_CHAIN.index(self.status):
            raise InvalidTransition("order", self.status.value, target.value)
        if not self.advance.is_approved:
            raise PreconditionFailed(
                f"Advance payment must be approved before the order can be {target.value}"
            )
        if (
            target is OrderStatus.DELIVERED
            and self.final is not None
            and not self.final.is_approved
        ):
            raise PreconditionFailed(
                "Final payment must be approved before the order is delivered"
            )

        if shipping is not None:
            self.shipping = ShippingInfo(
                carrier=shipping.carrier or self.shipping.carrier,
                tracking_number=shipping.tracking_number or self.shipping.tracking_number,
                tracking_url=shipping.tracking_url or self.shipping.tracking_url,
            )
        if target is OrderStatus.DELIVERED:
            self.delivered_at = at
        self._change_status(target, at, note)

    def cancel(self, at: datetime, reason: str | None = None) -> None:
        """Customer cancellation: only a pending order whose advance is not
        under review may be cancelled."""
        self._ensure_open()
        if self.status is not OrderStatus.PENDING:
            raise InvalidTransition("order", self.status.value, OrderStatus.CANCELLED.value)
        self._ensure_no_advance_under_review()
        self._change_status(OrderStatus.CANCELLED, at, reason or "Cancelled by customer")

    # --- Computed properties --------------------------------------------------

    @property
    def subtotal(self) -> Money:
        result = Money.zero(self.advance.amount.currency)
        for item in self.items:
            result = result + item.line_total
        return result

    @property
    def total(self) -> Money:
        return self.subtotal - self.discount + self.shipping_cost

    @property
    def remaining_product_cost(self) -> Money:
        return self.subtotal - self.advance.amount

    @property
    def is_legacy(self) -> bool:
        return self.final is None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_shipping_assigned(self) -> bool:
        return self.shipping_assigned_at is not None

    @property
    def payment_status(self) -> PaymentSummary:
        final = self.final
        if final is None:
            if self.advance.is_approved:
                return PaymentSummary.FULLY_PAID
        elif final.is_approved:
            return PaymentSummary.FULLY_PAID
        elif final.status is PaymentStatus.SUBMITTED:
            return PaymentSummary.FINAL_SUBMITTED
        elif self.is_shipping_assigned:
            return PaymentSummary.PENDING_FINAL

        if self.advance.is_approved:
            return PaymentSummary.ADVANCE_APPROVED
        if self.advance.status is PaymentStatus.SUBMITTED:
            return PaymentSummary.ADVANCE_SUBMITTED
        return PaymentSummary.PENDING_ADVANCE

    def pull_notifications(self) -> list[NotificationRequest]:
        """Hand over (and forget) the notifications recorded so far."""
        pending, self.pending_notifications = self.pending_notifications, []
        return pending

    # --- Internal helpers -----------------------------------------------------

    def _ensure_open(self) -> None:
        if self.is_terminal:
            raise AlreadyTerminal(self.id, self.status.value)

    def _ensure_no_advance_under_review(self) -> None:
        if self.advance.status is PaymentStatus.SUBMITTED:
            raise PreconditionFailed(
                "Advance payment is under review; approve or reject it before cancelling"
            )

    def _require_final(self) -> PaymentTrack:
        if self.final is None:
            raise PreconditionFailed(
                f"Order #{self.id} predates split payments and has no final installment"
            )
        return self.final

    def _change_status(self, target: OrderStatus, at: datetime, note: str | None) -> None:
        previous = self.status
        self.status = target
        self.status_history.append(StatusChange(target, at, note))
        template = (
            NotificationTemplate.ORDER_CANCELLED
            if target is OrderStatus.CANCELLED
            else NotificationTemplate.ORDER_STATUS_CHANGED
        )
        self._notify_customer(
            template,
            previous_status=previous.value,
            status=target.value,
            note=note,
        )

    def _notify_customer(self, template: NotificationTemplate, **payload: Any) -> None:
        self._notify(self.customer_id, template, **payload)

    def _notify(self, recipient: str, template: NotificationTemplate, **payload: Any) -> None:
        self.pending_notifications.append(
            NotificationRequest(
                recipient=recipient,
                template=template,
                payload={"order_id": self.id, **payload},
            )
        )
