"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.model.order import Order
from storefront.domain.model.payment import PaymentTrack
from storefront.domain.service.effective_price_service import ResolvedPrice

_TIMESTAMP = "%Y-%m-%d %H:%M UTC"


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the customer asked for."""

    item_id: str
    quantity: int
    tier_label: str | None = None
    color: str | None = None


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    item_name: str
    tier_label: str | None
    color: str | None
    quantity: int
    unit_price: str  # formatted, e.g. "Rs 1,050"
    line_total: str


@dataclass(frozen=True)
class PaymentTrackDTO:
    kind: str
    amount: str
    status: str
    proof_reference: str | None
    submitted_at: str | None
    rejection_reason: str | None


@dataclass(frozen=True)
class StatusChangeDTO:
    status: str
    at: str
    note: str | None


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    customer_name: str
    status: str
    payment_status: str
    items: list[OrderLineItemDTO]
    subtotal: str
    discount: str
    shipping_cost: str
    total: str
    billed_kg: int
    advance: PaymentTrackDTO
    final: PaymentTrackDTO | None
    carrier: str | None
    tracking_number: str | None
    history: list[StatusChangeDTO]
    created_at: str


@dataclass(frozen=True)
class PriceQuoteDTO:
    """Output: the resolved price of one (item, tier) pair."""

    item_id: str
    tier_label: str | None
    base_price: str
    unit_price: str
    is_discounted: bool
    campaign_name: str | None
    campaign_ends_at: str | None


@dataclass(frozen=True)
class CatalogPriceDTO:
    """Output: an item as shown in a catalog listing."""

    item_id: str
    name: str
    price: PriceQuoteDTO
    tiers: list[PriceQuoteDTO]
    min_price: str
    max_price: str


# --- Mapping ------------------------------------------------------------------


def to_order_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        customer_name=order.customer_name,
        status=order.status.value,
        payment_status=order.payment_status.value,
        items=[
            OrderLineItemDTO(
                item_name=item.item_name,
                tier_label=item.tier_label,
                color=item.color,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
            )
            for item in order.items
        ],
        subtotal=str(order.subtotal),
        discount=str(order.discount),
        shipping_cost=str(order.shipping_cost),
        total=str(order.total),
        billed_kg=order.billed_kg,
        advance=_to_track_dto(order.advance),
        final=_to_track_dto(order.final) if order.final is not None else None,
        carrier=order.shipping.carrier,
        tracking_number=order.shipping.tracking_number,
        history=[
            StatusChangeDTO(
                status=change.status.value,
                at=change.at.strftime(_TIMESTAMP),
                note=change.note,
            )
            for change in order.status_history
        ],
        created_at=order.created_at.strftime(_TIMESTAMP),
    )


def to_price_quote_dto(resolved: ResolvedPrice) -> PriceQuoteDTO:
    campaign = resolved.campaign
    return PriceQuoteDTO(
        item_id=resolved.item_id,
        tier_label=resolved.tier_label,
        base_price=str(resolved.base_price),
        unit_price=str(resolved.unit_price),
        is_discounted=resolved.is_discounted,
        campaign_name=campaign.name if campaign is not None else None,
        campaign_ends_at=campaign.end_at.strftime(_TIMESTAMP) if campaign is not None else None,
    )


def _to_track_dto(track: PaymentTrack) -> PaymentTrackDTO:
    return PaymentTrackDTO(
        kind=track.kind.value,
        amount=str(track.amount),
        status=track.status.value,
        proof_reference=track.proof_reference,
        submitted_at=track.submitted_at.strftime(_TIMESTAMP) if track.submitted_at else None,
        rejection_reason=track.rejection_reason,
    )
