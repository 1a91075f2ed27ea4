"""CLI commands for promotional campaigns."""

from __future__ import annotations

import click

from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import campaign_cache
from storefront.infrastructure.cli.catalog_commands import pricing_error


@click.command("active")
def campaign_active() -> None:
    """List the campaigns pricing currently applies, highest priority first."""
    try:
        campaigns = campaign_cache().get_active()
    except DomainException as exc:
        raise pricing_error(exc)

    if not campaigns:
        click.echo("No campaigns running.")
        return

    click.echo(f"{'ID':<12} {'Name':<24} {'Discount':>10} {'Priority':>9}  Ends")
    click.echo("-" * 75)
    for c in campaigns:
        discount = f"{c.value}%" if c.kind.value == "percentage" else f"Rs {c.value}"
        click.echo(
            f"{c.id:<12} {c.name:<24} {discount:>10} {c.priority:>9}  {c.end_at:%Y-%m-%d %H:%M}"
        )
