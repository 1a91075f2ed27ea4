"""CLI commands for reviewing installment payments."""

from __future__ import annotations

import click

from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import order_lifecycle

_TRACK = click.Choice(["advance", "final"])


@click.command("submit")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--track", required=True, type=_TRACK, help="Which installment.")
@click.option("--proof", required=True, help="Proof of payment reference.")
def payment_submit(order_id: int, track: str, proof: str) -> None:
    """Attach a proof of payment to an installment."""
    lifecycle = order_lifecycle()
    submit = lifecycle.submit_advance if track == "advance" else lifecycle.submit_final

    try:
        dto = submit(order_id, proof)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id}: {track} payment submitted for review.")


@click.command("approve")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--track", required=True, type=_TRACK, help="Which installment.")
def payment_approve(order_id: int, track: str) -> None:
    """Approve a submitted installment (admin)."""
    lifecycle = order_lifecycle()
    approve = lifecycle.approve_advance if track == "advance" else lifecycle.approve_final

    try:
        dto = approve(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id}: {track} payment approved (status={dto.status}).")


@click.command("reject")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--track", required=True, type=_TRACK, help="Which installment.")
@click.option("--reason", default=None, help="Reason shown to the customer.")
def payment_reject(order_id: int, track: str, reason: str | None) -> None:
    """Reject a submitted installment (admin)."""
    lifecycle = order_lifecycle()
    reject = lifecycle.reject_advance if track == "advance" else lifecycle.reject_final

    try:
        dto = reject(order_id, reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    track_dto = dto.advance if track == "advance" else dto.final
    click.echo(f"Order #{dto.id}: {track} payment rejected ({track_dto.rejection_reason}).")
