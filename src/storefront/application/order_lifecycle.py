"""Application service: everything that happens to an order after checkout.

Each public method is one state-machine operation consumed by the
customer and admin request handlers.  Every operation runs the same unit
of work under a per-order lock:

  load -> apply one aggregate transition -> save (update-if-unmodified)
  -> publish the notifications the transition recorded

A transition that raises leaves the stored order untouched, because the
aggregate validates before it mutates and nothing is saved on error.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from storefront.application.dto import OrderDTO, to_order_dto
from storefront.application.locking import KeyedLock
from storefront.application.notifier import Notifier
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.order import Order, OrderStatus, ShippingInfo
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.service import shipping_calculator
from storefront.domain.service.active_campaign_cache import Clock, utcnow

logger = logging.getLogger(__name__)


class OrderLifecycle:

    def __init__(
        self,
        order_repo: OrderRepository,
        notifier: Notifier,
        clock: Clock = utcnow,
        locks: KeyedLock | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._notifier = notifier
        self._clock = clock
        self._locks = locks or KeyedLock()

    # --- Advance installment (customer submits, admin reviews) ----------------

    def submit_advance(self, order_id: int, proof_reference: str) -> OrderDTO:
        return self._apply(
            order_id, "submit advance",
            lambda order: order.submit_advance(proof_reference, self._clock()),
        )

    def approve_advance(self, order_id: int) -> OrderDTO:
        return self._apply(
            order_id, "approve advance",
            lambda order: order.approve_advance(self._clock()),
        )

    def reject_advance(self, order_id: int, reason: str | None) -> OrderDTO:
        return self._apply(
            order_id, "reject advance",
            lambda order: order.reject_advance(reason, self._clock()),
        )

    # --- Shipping (admin) -----------------------------------------------------

    def assign_shipping(self, order_id: int, weight_grams: int) -> OrderDTO:
        quote = shipping_calculator.cost_for(weight_grams)
        return self._apply(
            order_id, "assign shipping",
            lambda order: order.assign_shipping(quote, self._clock()),
        )

    def request_final_payment(self, order_id: int) -> OrderDTO:
        return self._apply(
            order_id, "request final payment",
            lambda order: order.request_final_payment(self._clock()),
        )

    # --- Final installment ----------------------------------------------------

    def submit_final(self, order_id: int, proof_reference: str) -> OrderDTO:
        return self._apply(
            order_id, "submit final",
            lambda order: order.submit_final(proof_reference, self._clock()),
        )

    def approve_final(self, order_id: int) -> OrderDTO:
        return self._apply(
            order_id, "approve final",
            lambda order: order.approve_final(self._clock()),
        )

    def reject_final(self, order_id: int, reason: str | None) -> OrderDTO:
        return self._apply(
            order_id, "reject final",
            lambda order: order.reject_final(reason, self._clock()),
        )

    # --- Status ---------------------------------------------------------------

    def update_status(
        self,
        order_id: int,
        status: OrderStatus,
        note: str | None = None,
        shipping: ShippingInfo | None = None,
    ) -> OrderDTO:
        """Admin status edit (forward-only; may cancel early orders)."""
        return self._apply(
            order_id, f"move to {status.value}",
            lambda order: order.move_to(status, self._clock(), note, shipping),
        )

    def cancel(self, order_id: int, reason: str | None = None) -> OrderDTO:
        """Customer cancellation."""
        return self._apply(
            order_id, "cancel",
            lambda order: order.cancel(self._clock(), reason),
        )

    # --- Unit of work ---------------------------------------------------------

    def _apply(
        self,
        order_id: int,
        action: str,
        transition: Callable[[Order], None],
    ) -> OrderDTO:
        with self._locks.hold(order_id):
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            previous = order.status
            transition(order)
            self._order_repo.save(order)
            notifications = order.pull_notifications()

        logger.info(
            "Order #%s: %s (status %s -> %s, payment %s)",
            order_id,
            action,
            previous.value,
            order.status.value,
            order.payment_status.value,
        )
        for request in notifications:
            self._notifier.send(request)
        return to_order_dto(order)
