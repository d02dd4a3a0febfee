"""equilibrium alerts — list and acknowledge decline alerts."""

from __future__ import annotations

import click


@click.command()
@click.option("--all", "show_all", is_flag=True, help="Include acknowledged alerts.")
@click.option("--ack", "ack_id", default=None, help="Acknowledge the alert with this id.")
@click.pass_context
def alerts(ctx: click.Context, show_all: bool, ack_id: str | None) -> None:
    """List unacknowledged alerts, or acknowledge one."""
    from equilibrium.core.cli.common import create_service

    service = create_service(ctx)

    if ack_id:
        if not service.acknowledge_alert(ack_id):
            raise click.ClickException(f"No alert with id {ack_id}")
        click.echo(f"Acknowledged {ack_id}")
        return

    found = service.get_alerts(unacknowledged_only=not show_all)
    if not found:
        click.echo("No alerts.")
        return
    for alert in found:
        mark = " " if alert.acknowledged else "!"
        click.echo(
            f"{mark} {alert.id} {alert.timestamp:%Y-%m-%d %H:%M} {alert.type} ({alert.severity}) "
            f"{alert.baseline_score} -> {alert.current_score} ({alert.percentage_change}%)"
        )
