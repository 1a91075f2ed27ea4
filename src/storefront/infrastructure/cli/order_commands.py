"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from storefront.application.dto import OrderDTO, OrderItemSpec
from storefront.application.show_order import ShowOrderHandler
from storefront.domain.exceptions import DomainException
from storefront.domain.model.order import OrderStatus, ShippingInfo
from storefront.domain.model.value_objects import Money
from storefront.infrastructure.bootstrap import (
    create_order_handler,
    order_lifecycle,
    order_repository,
)
from storefront.infrastructure.cli.catalog_commands import pricing_error


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse 'tee-01@S:2,mug-07:1' into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ItemId[@Tier]:Quantity'."
            )
        ref, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for item '{ref}'."
            )
        item_id, _, tier = ref.partition("@")
        specs.append(
            OrderItemSpec(
                item_id=item_id.strip(),
                quantity=qty,
                tier_label=tier.strip() or None,
            )
        )
    return specs


def display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status}, payment={dto.payment_status})")
    click.echo(f"Customer: {dto.customer_name}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()

    click.echo(f"  {'Item':<28} {'Qty':>5} {'Price':>12} {'Total':>12}")
    click.echo(f"  {'-'*60}")
    for item in dto.items:
        name = f"{item.item_name} [{item.tier_label}]" if item.tier_label else item.item_name
        click.echo(
            f"  {name:<28} {item.quantity:>5} {item.unit_price:>12} {item.line_total:>12}"
        )
    click.echo(f"  {'-'*60}")
    click.echo(f"  {'Subtotal':<34} {dto.subtotal:>25}")
    if dto.discount != "Rs 0":
        click.echo(f"  {'Discount':<34} {dto.discount:>25}")
    if dto.billed_kg:
        shipping_label = f"Shipping ({dto.billed_kg} kg)"
        click.echo(f"  {shipping_label:<34} {dto.shipping_cost:>25}")
    click.echo(f"  {'Order Total':<34} {dto.total:>25}")
    click.echo()

    tracks = [dto.advance] + ([dto.final] if dto.final is not None else [])
    for track in tracks:
        line = f"  {track.kind.capitalize():<8} {track.amount:>12}  {track.status}"
        if track.rejection_reason:
            line += f" ({track.rejection_reason})"
        click.echo(line)

    if dto.carrier or dto.tracking_number:
        click.echo(f"  Shipped via {dto.carrier or '-'}, tracking {dto.tracking_number or '-'}")

    click.echo()
    for change in dto.history:
        note = f"  {change.note}" if change.note else ""
        click.echo(f"  {change.at}  {change.status}{note}")


@click.command("create")
@click.option("--customer-id", required=True, help="Customer account ID.")
@click.option("--customer-name", required=True, help="Customer display name.")
@click.option("--items", required=True, help="Items as 'ItemId[@Tier]:Qty,...'.")
@click.option("--discount", default=None, help="Flat discount amount, e.g. 200.")
@click.option("--coupon", default=None, help="Coupon code the discount came from.")
@click.option("--proof", default=None, help="Advance payment proof reference.")
def order_create(
    customer_id: str,
    customer_name: str,
    items: str,
    discount: str | None,
    coupon: str | None,
    proof: str | None,
) -> None:
    """Place a new order at today's prices."""
    specs = _parse_items(items)
    handler = create_order_handler()

    try:
        dto = handler.handle(
            customer_id=customer_id,
            customer_name=customer_name,
            item_specs=specs,
            discount=Money.of(discount) if discount is not None else None,
            coupon_code=coupon,
            advance_proof=proof,
        )
    except DomainException as exc:
        raise pricing_error(exc)

    click.echo(f"Order #{dto.id} created  (advance due: {dto.advance.amount})")
    display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_order(dto)


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option("--reason", default=None, help="Why the customer cancelled.")
def order_cancel(order_id: int, reason: str | None) -> None:
    """Cancel a pending order on the customer's behalf."""
    try:
        order_lifecycle().cancel(order_id, reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled.")


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to update.")
@click.option(
    "--status",
    required=True,
    type=click.Choice([s.value for s in OrderStatus]),
    help="New order status.",
)
@click.option("--carrier", default=None, help="Courier handling the parcel.")
@click.option("--tracking", default=None, help="Courier tracking number.")
@click.option("--tracking-url", default=None, help="Courier tracking page.")
@click.option("--note", default=None, help="Note recorded in the status history.")
def order_status(
    order_id: int,
    status: str,
    carrier: str | None,
    tracking: str | None,
    tracking_url: str | None,
    note: str | None,
) -> None:
    """Move an order forward (admin)."""
    shipping = None
    if carrier or tracking or tracking_url:
        shipping = ShippingInfo(
            carrier=carrier, tracking_number=tracking, tracking_url=tracking_url
        )

    try:
        dto = order_lifecycle().update_status(
            order_id, OrderStatus(status), note=note, shipping=shipping
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} is now {dto.status}.")
