"""MemoDays CLI - countdowns and anniversaries."""

import json
import locale
import logging
import sys
from datetime import date, datetime, time

import click

from .config import load_config
from .core.events import Event, EventCategory
from .core.selection import EventQuery, filter_by_tag, summarize
from .ports.clock import SystemClock
from .ports.event_store import StoreError
from .workflows import (
    EventNotFound,
    add_event,
    delete_event,
    edit_event,
    find_event,
    get_store,
    toggle_pin,
)

logger = logging.getLogger(__name__)

CATEGORY_CHOICE = click.Choice([c.value for c in EventCategory], case_sensitive=False)

# "now" for every command and for watch refreshes
clock = SystemClock()


def _parse_day(value: str) -> datetime:
    try:
        return datetime.combine(date.fromisoformat(value), time.min)
    except ValueError:
        raise click.BadParameter(f"{value!r} is not a YYYY-MM-DD date")


def _load_events(store) -> list[Event]:
    try:
        return store.fetch_all()
    except StoreError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _lookup(store, event_id: str) -> Event:
    try:
        return find_event(store, event_id)
    except (StoreError, EventNotFound) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _event_json(event: Event, now: datetime) -> dict:
    data = event.to_dict()
    data.update(
        is_recurring=event.is_recurring,
        next_target_date=event.next_target_date(now).isoformat(),
        days_remaining=event.days_remaining(now),
        display=event.days_display(now),
    )
    return data


def _show_events(events: list[Event], as_json: bool, now: datetime, empty_msg: str = "No events.") -> None:
    """Shared event display logic."""
    if as_json:
        click.echo(json.dumps([_event_json(e, now) for e in events], indent=2, ensure_ascii=False))
        return

    if not events:
        click.echo(empty_msg)
        return

    for event in events:
        pin = "*" if event.is_pinned else " "
        when = event.next_target_date(now).strftime("%Y-%m-%d")
        click.echo(f"{pin} {event.id[:8]}  {when}  {event.days_display(now):20} {event.title} [{event.category.value}]")


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """MemoDays - track the days that matter."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.debug(f"Keeping default collation: {e}")


@main.command("list")
@click.option("--category", "-c", type=CATEGORY_CHOICE, default=None, help="Only this category")
@click.option("--search", "-s", default="", help="Case-insensitive text in title or notes")
@click.option("--sort", "sort_by", type=click.Choice(["date", "title"]), default=None, help="Sort order")
@click.option("--tagged", is_flag=True, help="Only events carrying the default tag")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_events(category: str | None, search: str, sort_by: str | None, tagged: bool, as_json: bool):
    """List events, pinned first."""
    config = load_config()
    store = get_store(config)
    events = _load_events(store)
    if tagged:
        events = filter_by_tag(events, config.default_tag)

    query = EventQuery(
        category=EventCategory.parse(category) if category else None,
        search_text=search,
        sort_by_date=config.sort_by_date if sort_by is None else sort_by == "date",
    )
    empty_msg = "No events in this category." if category else "No events yet. Add one with 'memodays add'."
    _show_events(query.apply(events), as_json, clock.now(), empty_msg)


@main.command()
@click.argument("title")
@click.argument("start_date", metavar="DATE")
@click.option("--category", "-c", type=CATEGORY_CHOICE, default=None, help="Event category")
@click.option("--notes", "-n", default="", help="Free-form notes")
def add(title: str, start_date: str, category: str | None, notes: str):
    """Add an event on DATE (YYYY-MM-DD). Birthdays repeat every year."""
    config = load_config()
    store = get_store(config)
    _load_events(store)
    now = clock.now()
    try:
        event, saved = add_event(
            store,
            title,
            _parse_day(start_date),
            EventCategory.parse(category) if category else config.default_category,
            notes=notes,
            tag=config.default_tag,
            now=now,
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    if not saved:
        click.echo("Warning: event was not saved.", err=True)
    click.echo(f"Added {event.id[:8]}: {event.title} ({event.days_display(now)})")


@main.command()
@click.argument("event_id")
@click.option("--title", "-t", default=None, help="New title")
@click.option("--date", "-d", "start_date", default=None, help="New date (YYYY-MM-DD)")
@click.option("--category", "-c", type=CATEGORY_CHOICE, default=None, help="New category")
@click.option("--notes", "-n", default=None, help="New notes")
def edit(event_id: str, title: str | None, start_date: str | None, category: str | None, notes: str | None):
    """Edit an event."""
    store = get_store(load_config())
    event = _lookup(store, event_id)

    changes = {}
    if title is not None:
        changes["title"] = title
    if start_date is not None:
        changes["start_date"] = _parse_day(start_date)
    if category is not None:
        changes["category"] = EventCategory.parse(category)
    if notes is not None:
        changes["notes"] = notes
    if not changes:
        click.echo("Nothing to change.")
        return

    now = clock.now()

    try:
        saved = edit_event(store, event, now=now, **changes)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    if not saved:
        click.echo("Warning: change was not saved.", err=True)
    click.echo(f"Updated {event.id[:8]}: {event.title} ({event.days_display(now)})")


@main.command()
@click.argument("event_id")
def pin(event_id: str):
    """Pin or unpin an event."""
    store = get_store(load_config())
    event = _lookup(store, event_id)
    if not toggle_pin(store, event):
        click.echo("Warning: change was not saved.", err=True)
    click.echo(f"{'Pinned' if event.is_pinned else 'Unpinned'} {event.title}")


@main.command()
@click.argument("event_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def delete(event_id: str, yes: bool):
    """Delete an event."""
    store = get_store(load_config())
    event = _lookup(store, event_id)
    if not yes and not click.confirm(f"Delete {event.title!r}?"):
        return
    if not delete_event(store, event):
        click.echo("Warning: deletion was not saved.", err=True)
    click.echo(f"Deleted {event.title}")


@main.command()
@click.argument("event_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show(event_id: str, as_json: bool):
    """Show one event in detail."""
    store = get_store(load_config())
    event = _lookup(store, event_id)
    now = clock.now()

    if as_json:
        data = _event_json(event, now)
        data.update(
            total_days_passed=event.total_days_passed(now),
            anniversary_years=event.anniversary_years(now),
            anniversary_days=event.anniversary_days(now),
        )
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    click.echo(f"{event.title}{' (pinned)' if event.is_pinned else ''}")
    click.echo(f"  Category:     {event.category.value}{' (yearly)' if event.is_recurring else ''}")
    click.echo(f"  Start date:   {event.start_date.strftime('%Y-%m-%d')}")
    click.echo(f"  Target date:  {event.next_target_date(now).strftime('%Y-%m-%d')}")
    click.echo(f"  Countdown:    {event.days_display(now)}")
    click.echo(f"  Days passed:  {event.total_days_passed(now)}")
    years = event.anniversary_years(now)
    if years:
        click.echo(f"  Anniversary:  {years} years and {event.anniversary_days(now)} days")
    if event.notes:
        click.echo(f"  Notes:        {event.notes}")


@main.command()
def stats():
    """Show event counts."""
    store = get_store(load_config())
    summary = summarize(_load_events(store))
    click.echo(f"Total events:  {summary.total}")
    click.echo(f"Pinned events: {summary.pinned}")


@main.command()
@click.option("--category", "-c", type=CATEGORY_CHOICE, default=None, help="Only this category")
@click.option("--search", "-s", default="", help="Case-insensitive text in title or notes")
def watch(category: str | None, search: str):
    """Keep the list on screen, refreshing at midnight and periodically."""
    from apscheduler.executors.pool import ThreadPoolExecutor
    from apscheduler.schedulers.blocking import BlockingScheduler

    from .refresh import RefreshCoordinator

    config = load_config()
    store = get_store(config)
    query = EventQuery(
        category=EventCategory.parse(category) if category else None,
        search_text=search,
        sort_by_date=config.sort_by_date,
    )

    def render() -> None:
        click.clear()
        now = clock.now()
        click.echo(f"MemoDays - {now.strftime('%A, %B %d %H:%M')}\n")
        _show_events(query.apply(_load_events(store)), as_json=False, now=now)

    # One worker keeps refreshes on a single thread
    scheduler = BlockingScheduler(executors={"default": ThreadPoolExecutor(max_workers=1)})
    coordinator = RefreshCoordinator(
        store,
        scheduler,
        clock=clock,
        interval_seconds=config.refresh_interval,
        on_refresh=render,
    )

    render()
    coordinator.start()
    try:
        scheduler.start()
    except KeyboardInterrupt:
        coordinator.stop()
        click.echo("\nStopped.")
