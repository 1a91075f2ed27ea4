"""CLI commands for catalog prices."""

from __future__ import annotations

import logging

import click

from storefront.application.list_catalog import ListCatalogHandler
from storefront.application.quote_price import QuotePriceHandler
from storefront.domain.exceptions import DomainException, UpstreamUnavailable
from storefront.infrastructure.bootstrap import catalog_repository, price_service

logger = logging.getLogger(__name__)

PRICING_UNAVAILABLE = "Pricing is temporarily unavailable, please try again shortly."


def pricing_error(exc: DomainException) -> click.ClickException:
    """Translate a domain error; upstream failures get a generic message."""
    if isinstance(exc, UpstreamUnavailable):
        logger.error("Price resolution failed: %s", exc)
        return click.ClickException(PRICING_UNAVAILABLE)
    return click.ClickException(str(exc))


@click.command("quote")
@click.option("--item", "item_id", required=True, help="Catalog item ID.")
@click.option("--tier", "tier_label", default=None, help="Pricing tier label.")
def catalog_quote(item_id: str, tier_label: str | None) -> None:
    """Show the price a customer would pay right now."""
    handler = QuotePriceHandler(
        catalog_repo=catalog_repository(),
        price_service=price_service(),
    )

    try:
        quote = handler.handle(item_id, tier_label)
    except DomainException as exc:
        raise pricing_error(exc)

    label = f" [{quote.tier_label}]" if quote.tier_label else ""
    click.echo(f"{quote.item_id}{label}: {quote.unit_price}")
    if quote.is_discounted:
        click.echo(f"  was {quote.base_price}")
    if quote.campaign_name:
        click.echo(f"  {quote.campaign_name} (ends {quote.campaign_ends_at})")


@click.command("list")
def catalog_list() -> None:
    """List active items with their current prices."""
    handler = ListCatalogHandler(
        catalog_repo=catalog_repository(),
        price_service=price_service(),
    )

    try:
        listing = handler.handle()
    except DomainException as exc:
        raise pricing_error(exc)

    if not listing:
        click.echo("No items found.")
        return

    click.echo(f"{'ID':<12} {'Name':<24} {'Price':>12} {'Range':>24}")
    click.echo("-" * 75)
    for entry in listing:
        price_range = (
            f"{entry.min_price} - {entry.max_price}"
            if entry.min_price != entry.max_price
            else ""
        )
        marker = "*" if entry.price.is_discounted else " "
        click.echo(
            f"{entry.item_id:<12} {entry.name:<24} {entry.price.unit_price:>11}{marker} {price_range:>24}"
        )
        for tier in entry.tiers:
            click.echo(f"  {tier.tier_label:<34} {tier.unit_price:>12}")
