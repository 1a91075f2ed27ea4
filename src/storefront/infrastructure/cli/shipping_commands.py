"""CLI commands for shipping charges."""

from __future__ import annotations

from decimal import ROUND_CEILING, Decimal

import click

from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import order_lifecycle


def _kg_to_grams(raw: str) -> int:
    """Parse a kilogram amount, rounding fractional grams up."""
    try:
        weight_kg = Decimal(raw)
    except ArithmeticError:
        raise click.BadParameter(f"Invalid weight '{raw}'.")
    if not weight_kg.is_finite():
        raise click.BadParameter(f"Invalid weight '{raw}'.")
    return int((weight_kg * 1000).to_integral_value(rounding=ROUND_CEILING))


@click.command("assign")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--weight-kg", required=True, type=str, help="Parcel weight, e.g. 2.3.")
def shipping_assign(order_id: int, weight_kg: str) -> None:
    """Record the parcel weight and charge shipping (admin)."""
    grams = _kg_to_grams(weight_kg)

    try:
        dto = order_lifecycle().assign_shipping(order_id, grams)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Order #{dto.id}: {dto.billed_kg} kg billed, shipping {dto.shipping_cost}, "
        f"final payment {dto.final.amount if dto.final else '-'}."
    )


@click.command("request-final")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
def shipping_request_final(order_id: int) -> None:
    """Ask the customer for the final installment (admin)."""
    try:
        dto = order_lifecycle().request_final_payment(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id}: final payment of {dto.final.amount} requested.")
