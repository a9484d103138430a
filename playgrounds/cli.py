"""
Playgrounds CLI: drive the booking wizard from the command line.

Usage:
    playgrounds venue <venue-id>  # show venue booking options
    playgrounds slots <venue-id> --date D --duration MIN  # list bookable slots
    playgrounds book <venue-id> --date D --slot S --payment P ...  # run the booking wizard
    playgrounds bookings --user-id U  # list a user's bookings
"""

from __future__ import annotations

import asyncio
import logging

import click

from playgrounds.config import get_settings
from playgrounds.core.config_loader import load_venue_config
from playgrounds.core.draft_storage import DraftStorage
from playgrounds.core.exceptions import BookingError
from playgrounds.core.pricing import format_money
from playgrounds.core.schemas import PaymentType, Slot, VenueConfig
from playgrounds.core.slots import SLOTS_ERROR
from playgrounds.core.wizard import BookingWizardController, WizardStep
from playgrounds.integrations.playgrounds_api import PlaygroundsApiClient

logger = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def cli(verbose: bool):
    """Playgrounds venue booking CLI."""
    level = logging.DEBUG if verbose else getattr(logging, get_settings().log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


@cli.command()
@click.argument("venue_id")
@click.option("--venue-file", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Read venue configuration from a YAML file instead of the API")
def venue(venue_id: str, venue_file: str | None):
    """Show pricing, player bounds, payment methods and durations for a venue."""
    venue_cfg = asyncio.run(_load_venue(PlaygroundsApiClient.from_settings(), venue_id, venue_file))

    click.echo(f"{venue_cfg.name or venue_cfg.id}")
    click.echo(f"  Price per hour: {format_money(venue_cfg.price_per_hour, venue_cfg.currency)}")
    click.echo(f"  Players: {venue_cfg.min_players}-{venue_cfg.max_players}")
    methods = ", ".join(p.value for p in venue_cfg.allowed_payment_types()) or "(none)"
    click.echo(f"  Payment: {methods}")
    for d in venue_cfg.durations:
        marker = " (default)" if d.is_default else ""
        click.echo(f"  • {d.id}: {d.label or f'{d.minutes} min'}{marker}")


@cli.command()
@click.argument("venue_id")
@click.option("--date", "booking_date", required=True, help="Booking date, YYYY-MM-DD")
@click.option("--duration", "duration_minutes", type=int, required=True, help="Duration in minutes")
def slots(venue_id: str, booking_date: str, duration_minutes: int):
    """List bookable slots for a venue, date and duration."""
    asyncio.run(_slots(venue_id, booking_date, duration_minutes))


async def _slots(venue_id: str, booking_date: str, duration_minutes: int):
    client = PlaygroundsApiClient.from_settings()
    result = await client.fetch_slots(venue_id, booking_date, duration_minutes)
    if not result["success"]:
        click.echo(f"Error: {SLOTS_ERROR}", err=True)
        raise SystemExit(1)

    found = [Slot.from_api(s) for s in result["data"]]
    if not found:
        click.echo("No slots available.")
        return

    for slot in found:
        status = "✓" if slot.is_available else "✗"
        click.echo(f"{status} {slot.display_label}")


@cli.command()
@click.argument("venue_id")
@click.option("--date", "booking_date", required=True, help="Booking date, YYYY-MM-DD")
@click.option("--duration", "duration_id", default=None, help="Duration id (defaults to the venue default)")
@click.option("--slot", "slot_ref", required=True, help="Slot id or start time")
@click.option("--players", type=str, default=None, help="Number of players")
@click.option(
    "--payment",
    type=click.Choice([p.value for p in PaymentType]),
    required=True,
    help="Payment method",
)
@click.option("--receipt", type=click.Path(exists=True, dir_okay=False), default=None,
              help="CliQ transfer receipt image")
@click.option("--user-id", default=None, help="Booking user id")
@click.option("--venue-file", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Read venue configuration from a YAML file instead of the API")
@click.option("--resume", is_flag=True, help="Resume and keep the saved booking draft")
def book(
    venue_id: str,
    booking_date: str,
    duration_id: str | None,
    slot_ref: str,
    players: str | None,
    payment: str,
    receipt: str | None,
    user_id: str | None,
    venue_file: str | None,
    resume: bool,
):
    """Book a slot by walking the wizard: schedule, players, payment, review."""
    asyncio.run(
        _book(venue_id, booking_date, duration_id, slot_ref, players, payment, receipt, user_id, venue_file, resume)
    )


async def _book(
    venue_id: str,
    booking_date: str,
    duration_id: str | None,
    slot_ref: str,
    players: str | None,
    payment: str,
    receipt: str | None,
    user_id: str | None,
    venue_file: str | None,
    resume: bool,
):
    settings = get_settings()
    client = PlaygroundsApiClient.from_settings(settings)
    venue_cfg = await _load_venue(client, venue_id, venue_file)

    wizard = BookingWizardController(
        venue_cfg,
        client,
        user_id=user_id,
        storage=DraftStorage(settings.draft_path) if resume else None,
        strict_player_bounds=settings.strict_player_bounds,
    )
    try:
        await wizard.start()

        duration = venue_cfg.find_duration(duration_id) if duration_id else venue_cfg.default_duration()
        if duration is None:
            click.echo("Error: no such duration for this venue", err=True)
            raise SystemExit(1)

        for task in (wizard.select_duration(duration), wizard.select_date(booking_date)):
            if task is not None:
                await task
        if wizard.slots_error:
            click.echo(f"Error: {wizard.slots_error}", err=True)
            raise SystemExit(1)

        try:
            wizard.select_slot(slot_ref)
            if players is not None:
                wizard.set_players(players)
            wizard.set_payment_type(payment)
            if receipt:
                wizard.attach_receipt(receipt)
        except BookingError as e:
            click.echo(f"Error: {e}", err=True)
            raise SystemExit(1)

        while wizard.step < WizardStep.REVIEW:
            if not await wizard.advance():
                click.echo(f"Error: {wizard.validation_message}", err=True)
                raise SystemExit(1)

        click.echo(f"Total: {format_money(wizard.total_price, venue_cfg.currency)}")
        if not await wizard.advance():
            click.echo(f"Error: {wizard.state.error}", err=True)
            raise SystemExit(1)

        summary = wizard.state.success_result
        click.echo(f"✓ Booked {summary.venue_name} on {summary.date} at {summary.slot_label}")
        if summary.booking_id:
            click.echo(f"  Booking: {summary.booking_id}")
        click.echo(f"  Total: {format_money(summary.total_price, summary.currency)}")
    finally:
        wizard.close()


@cli.command()
@click.option("--user-id", required=True, help="Booking user id")
def bookings(user_id: str):
    """List bookings for a user."""
    asyncio.run(_bookings(user_id))


async def _bookings(user_id: str):
    client = PlaygroundsApiClient.from_settings()
    result = await client.list_bookings(user_id)
    if not result["success"]:
        click.echo("Error: unable to load bookings", err=True)
        raise SystemExit(1)

    rows = result["data"]
    if not rows:
        click.echo("No bookings.")
        return

    click.echo(f"{'Booking':<15} {'Date':<12} {'Venue':<25} {'Status':<10}")
    click.echo("-" * 62)
    for b in rows:
        venue_raw = b.get("venue") if isinstance(b.get("venue"), dict) else {}
        booking_id = str(b.get("booking_code") or b.get("booking_id") or b.get("id") or "")
        booking_date = str(b.get("booking_date") or b.get("date") or "")
        venue_name = str(venue_raw.get("name") or b.get("venue_name") or "")
        status = str(b.get("status") or "")
        click.echo(f"{booking_id:<15} {booking_date:<12} {venue_name:<25} {status:<10}")


async def _load_venue(client: PlaygroundsApiClient, venue_id: str, venue_file: str | None) -> VenueConfig:
    if venue_file:
        return load_venue_config(venue_file).model_copy(update={"id": str(venue_id)})

    result = await client.get_venue(venue_id)
    if not result["success"]:
        click.echo(f"Error: venue {venue_id} not found", err=True)
        raise SystemExit(1)
    return VenueConfig.from_api(result["data"])


if __name__ == "__main__":
    cli()
