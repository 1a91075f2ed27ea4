import logging
import os
from pathlib import Path

import click

from storefront.infrastructure.bootstrap import DATA_DIR_ENV
from storefront.infrastructure.cli.campaign_commands import campaign_active
from storefront.infrastructure.cli.catalog_commands import catalog_list, catalog_quote
from storefront.infrastructure.cli.order_commands import (
    order_cancel,
    order_create,
    order_show,
    order_status,
)
from storefront.infrastructure.cli.payment_commands import (
    payment_approve,
    payment_reject,
    payment_submit,
)
from storefront.infrastructure.cli.shipping_commands import (
    shipping_assign,
    shipping_request_final,
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar=DATA_DIR_ENV,
    help="Directory holding the JSON data files.",
)
def cli(verbose: bool, data_dir: Path | None) -> None:
    """Storefront: pricing and split-payment orders"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if data_dir is not None:
        os.environ[DATA_DIR_ENV] = str(data_dir)


@cli.group()
def catalog() -> None:
    """Look up catalog prices."""


@cli.group()
def campaign() -> None:
    """Inspect promotional campaigns."""


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def payment() -> None:
    """Review advance and final payments."""


@cli.group()
def shipping() -> None:
    """Weigh parcels and request final payments."""


# Register subcommands
catalog.add_command(catalog_list)
catalog.add_command(catalog_quote)
campaign.add_command(campaign_active)
order.add_command(order_cancel)
order.add_command(order_create)
order.add_command(order_show)
order.add_command(order_status)
payment.add_command(payment_approve)
payment.add_command(payment_reject)
payment.add_command(payment_submit)
shipping.add_command(shipping_assign)
shipping.add_command(shipping_request_final)
