"""Application service: Create Order use case.

Orchestrates the flow between repositories, the price service and the
domain model.  Unit prices are resolved here, once, and frozen into the
line items; nothing that happens to the catalog or to campaigns later
can change what this order costs.
"""

from __future__ import annotations

import logging

from storefront.application.dto import OrderDTO, OrderItemSpec, to_order_dto
from storefront.application.notifier import Notifier
from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.model.notification import NotificationRequest, NotificationTemplate
from storefront.domain.model.order import Order, OrderLineItem
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.catalog_repository import CatalogRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.service.active_campaign_cache import Clock, utcnow
from storefront.domain.service.effective_price_service import EffectivePriceService

logger = logging.getLogger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        catalog_repo: CatalogRepository,
        price_service: EffectivePriceService,
        notifier: Notifier,
        clock: Clock = utcnow,
    ) -> None:
        self._order_repo = order_repo
        self._catalog_repo = catalog_repo
        self._price_service = price_service
        self._notifier = notifier
        self._clock = clock

    def handle(
        self,
        customer_id: str,
        customer_name: str,
        item_specs: list[OrderItemSpec],
        discount: Money | None = None,
        coupon_code: str | None = None,
        advance_proof: str | None = None,
    ) -> OrderDTO:
        """Create a new order.

        Steps:
        1. Resolve each item ID to an active CatalogItem (fail if not found).
        2. Build OrderLineItems with the *effective* price (snapshot).
        3. Let the Order aggregate validate all business rules.
        4. Optionally attach the advance proof supplied at checkout.
        5. Persist, notify and return a DTO.
        """
        now = self._clock()
        line_items: list[OrderLineItem] = []

        for spec in item_specs:
            item = self._catalog_repo.get_by_id(spec.item_id)
            if item is None:
                raise EntityNotFoundError(f"Item not found: '{spec.item_id}'")
            if not item.is_active:
                raise ValidationError(f"Item '{item.name}' is no longer available")

            line_items.append(
                OrderLineItem(
                    item_id=item.id,
                    item_name=item.name,
                    quantity=Quantity(spec.quantity),
                    unit_price=self._price_service.price_for(item, spec.tier_label),
                    tier_label=spec.tier_label,
                    color=spec.color,
                )
            )

        order = Order.create(
            customer_id=customer_id,
            customer_name=customer_name,
            items=line_items,
            at=now,
            discount=discount,
            coupon_code=coupon_code,
        )
        if advance_proof is not None:
            order.submit_advance(advance_proof, now)

        self._order_repo.save(order)
        logger.info(
            "Created order #%s for %s: subtotal %s, advance %s",
            order.id,
            order.customer_id,
            order.subtotal,
            order.advance.amount,
        )

        self._notifier.send(
            NotificationRequest(
                recipient=order.customer_id,
                template=NotificationTemplate.ORDER_CREATED,
                payload={
                    "order_id": order.id,
                    "subtotal": str(order.subtotal.amount),
                    "advance_amount": str(order.advance.amount.amount),
                },
            )
        )
        for request in order.pull_notifications():
            self._notifier.send(_with_order_id(request, order.id))

        return to_order_dto(order)


def _with_order_id(request: NotificationRequest, order_id: int | None) -> NotificationRequest:
    """Requests recorded before the first save carry no order id yet."""
    return NotificationRequest(
        recipient=request.recipient,
        template=request.template,
        payload={**request.payload, "order_id": order_id},
    )
