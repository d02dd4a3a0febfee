"""equilibrium report — trends, patterns and recommendations."""

from __future__ import annotations

import click


@click.command()
@click.option("--days", default=30, show_default=True, help="How many days of history to analyze.")
@click.pass_context
def report(ctx: click.Context, days: int) -> None:
    """Show wellness trends and insights for recent days."""
    from equilibrium.core.cli.common import create_service

    service = create_service(ctx)
    result = service.analyze(days)

    overview = result.overview
    click.echo(f"Days tracked: {overview.total_days_tracked} (streak {overview.current_streak})")
    click.echo(
        f"Averages: wellness {overview.avg_wellness_score}, mood {overview.avg_mood_score}, "
        f"sleep {overview.avg_sleep_hours} h"
    )

    trends = result.trends
    click.echo(f"Trends: wellness {trends.wellness_trend}, mood {trends.mood_trend}, sleep {trends.sleep_trend}")
    for pattern in trends.patterns:
        click.echo(f"  * {pattern.title}: {pattern.message}")

    for insight in result.insights:
        click.echo(f"[{insight.type}] {insight.title}: {insight.message}")

    click.echo("Recommendations:")
    for line in result.recommendations:
        click.echo(f"  - {line}")

    click.echo(f"Data completeness: {result.completeness.overall}%")
