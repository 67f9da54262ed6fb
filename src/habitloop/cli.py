"""Command line entry points for habitloop."""

from __future__ import annotations

from datetime import date, datetime

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .logging_config import setup_logging
from .models.settings import UserSettings
from .services.dates import parse_date_key
from .services.habit_service import HabitStoreUnavailable
from .services.habits import HabitStatus

_STATUS_MARKS = {
    HabitStatus.COMPLETED: "x",
    HabitStatus.SKIPPED: "-",
    HabitStatus.SNOOZED: "z",
    HabitStatus.MISSED: "!",
    HabitStatus.ACTIVE: " ",
}


def _parse_date(ctx, param, value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return parse_date_key(value)
    except ValueError as exc:
        raise click.BadParameter("expected YYYY-MM-DD") from exc


def _parse_time(ctx, param, value: str) -> tuple[int, int]:
    try:
        hour_text, minute_text = value.split(":")
        hour, minute = int(hour_text), int(minute_text)
    except ValueError as exc:
        raise click.BadParameter("expected HH:MM") from exc
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise click.BadParameter("expected a 24-hour time between 00:00 and 23:59")
    return hour, minute


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Inspect habits and the local habit cache."""

    if ctx.obj is None:
        config = BaseConfig()
        setup_logging(config)
        ctx.obj = create_app_context(config)


@cli.command("today")
@click.option("--user", "user_id", required=True, help="User id whose habits to show")
@click.option("--date", "day", callback=_parse_date, help="Day to show (YYYY-MM-DD), defaults to now")
@click.pass_obj
def today(app: AppContext, user_id: str, day: date | None) -> None:
    """List the habits scheduled on a day with their completion state."""

    now = datetime.now()
    try:
        view = app.habit_service.load_day(user_id=user_id, viewing=day or now, now=now)
    except HabitStoreUnavailable as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"{view.date_key} (day resets at {view.reset.hour:02d}:{view.reset.minute:02d})")
    if not view.habits:
        click.echo("No habits scheduled.")
    for habit_view in view.habits:
        habit = habit_view.habit
        mark = _STATUS_MARKS[view.statuses[habit_view.id]]
        line = f"[{mark}] {habit.name or habit.id}"
        if habit.increment:
            goal = f"/{habit.increment_goal:g}" if habit.increment_goal else ""
            unit = f" {habit.increment_type}" if habit.increment_type else ""
            line += f" {habit_view.increment_amount:g}{goal}{unit}"
        click.echo(line)

    click.echo(
        f"Progress: {view.progress.earned:g}/{view.progress.total:g}"
        f" | Points today: {view.earned_points} | Total points: {view.total_points}"
        f" | Streak: {view.app_streak}"
    )
    if view.from_cache:
        click.echo("(served from local cache)")


@cli.group("cache")
def cache_group() -> None:
    """Local habit cache commands."""


@cache_group.command("show")
@click.pass_obj
def cache_show(app: AppContext) -> None:
    """Show what the local cache currently holds."""

    record = app.cache.read_record()
    if record is None:
        click.echo("Cache is empty.")
        return
    cached_at = record.cached_at.isoformat() if record.cached_at else "unknown (legacy format)"
    click.echo(f"Cached at: {cached_at}")
    click.echo(f"Habits: {len(record.habits)}")
    click.echo(f"Window: {', '.join(record.cached_for_dates) or '-'}")


@cache_group.command("clear")
@click.pass_obj
def cache_clear(app: AppContext) -> None:
    """Drop the cached habits; the next load reads from the habit store."""

    app.cache.invalidate()
    click.echo("Cache cleared.")


@cli.group("reset-time")
def reset_time_group() -> None:
    """End-of-day reset time commands."""


@reset_time_group.command("show")
@click.option("--user", "user_id", required=True)
@click.pass_obj
def reset_time_show(app: AppContext, user_id: str) -> None:
    reset = app.habit_service.reset_boundary(user_id=user_id)
    click.echo(f"{reset.hour:02d}:{reset.minute:02d}")


@reset_time_group.command("set")
@click.argument("time", callback=_parse_time)
@click.option("--user", "user_id", required=True)
@click.pass_obj
def reset_time_set(app: AppContext, time: tuple[int, int], user_id: str) -> None:
    """Store a 24-hour reset time (HH:MM) for a user."""

    hour, minute = time
    app.habit_store.save_user_settings(
        UserSettings(
            user_id=user_id,
            end_of_day_hour=str(hour),
            end_of_day_minute=f"{minute:02d}",
            end_of_day_meridiem=None,
        )
    )
    reset = app.habit_service.reset_boundary(user_id=user_id)
    click.echo(f"Day now resets at {reset.hour:02d}:{reset.minute:02d}")


def main() -> None:
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
