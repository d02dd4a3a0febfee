"""equilibrium score / sleep — record a day and resolve a night's sleep."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

import click


def _parse_window(ctx: click.Context, param: click.Parameter, value: str | None) -> tuple[str, str] | None:
    """Validate an ``HH:MM-HH:MM`` window option."""
    if not value:
        return None
    from equilibrium.core.exceptions import ConfigurationError
    from equilibrium.health.models import SleepWindow

    start, sep, end = value.partition("-")
    if not sep:
        raise click.BadParameter(f"expected HH:MM-HH:MM, got '{value}'")
    try:
        SleepWindow.parse(start, end)
    except ConfigurationError as e:
        raise click.BadParameter(str(e)) from e
    return start, end


@click.command()
@click.option(
    "--date", "day", type=click.DateTime(formats=["%Y-%m-%d"]), default=None, help="Day to record (default: today)."
)
@click.option("--sleep", "sleep_hours", type=float, default=None, help="Hours slept.")
@click.option("--mood", type=click.FloatRange(0, 5), default=None, help="Mood score, 0-5.")
@click.option("--screen", "screen_minutes", type=float, default=None, help="Screen time in minutes.")
@click.option("--activity", "activity_minutes", type=float, default=None, help="Active minutes.")
@click.pass_context
def score(
    ctx: click.Context,
    day: datetime | None,
    sleep_hours: float | None,
    mood: float | None,
    screen_minutes: float | None,
    activity_minutes: float | None,
) -> None:
    """Score a day's metrics and check for declines."""
    from equilibrium.core.cli.common import create_service
    from equilibrium.health.models import DailyMetrics

    service = create_service(ctx)
    metrics = DailyMetrics(
        date=day.date() if day else date.today(),
        sleep_hours=sleep_hours,
        mood_score=mood,
        screen_time_minutes=screen_minutes,
        activity_minutes=activity_minutes,
    )
    result = service.submit_metrics(metrics)

    click.echo(f"{metrics.date}: wellness score {result.wellness_score}")
    for alert in result.alerts:
        click.echo(
            f"  ! {alert.type} ({alert.severity}): baseline {alert.baseline_score} -> "
            f"{alert.current_score} ({alert.percentage_change}%)"
        )


@click.command()
@click.option("--night", type=click.DateTime(formats=["%Y-%m-%d"]), required=True, help="Date the sleep window opens.")
@click.option(
    "--events-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="File with one ISO-8601 interaction timestamp per line.",
)
@click.option(
    "--window", default=None, callback=_parse_window, help="Override the sleep window, e.g. 23:00-07:00."
)
@click.pass_context
def sleep(ctx: click.Context, night: datetime, events_file: Path | None, window: tuple[str, str] | None) -> None:
    """Estimate a night's sleep from a sensor or interaction timestamps."""
    from equilibrium.core.cli.common import create_service
    from equilibrium.health.collector import InMemoryEventSource

    event_source = None
    if events_file is not None:
        lines = [ln.strip() for ln in events_file.read_text(encoding="utf-8").splitlines() if ln.strip()]
        try:
            event_source = InMemoryEventSource(datetime.fromisoformat(ln) for ln in lines)
        except ValueError as e:
            raise click.BadParameter(f"Bad timestamp in {events_file}: {e}") from e

    service = create_service(ctx, event_source=event_source)
    if window:
        service.set_sleep_window(*window)

    estimate = service.resolve_sleep(night.date())
    click.echo(
        f"{night.date()} [{service.sleep_window}]: {estimate.minutes} min "
        f"({estimate.hours:.1f} h) via {estimate.source}, confidence {estimate.confidence:.2f}"
    )
