"""Equilibrium CLI — entry point for score, sleep, report and alerts commands."""

import click

from equilibrium import __version__

from .common import DEFAULT_CONFIG_PATH


@click.group()
@click.version_option(version=__version__, package_name="equilibrium")
@click.option(
    "--config",
    "config_path",
    default=str(DEFAULT_CONFIG_PATH),
    show_default=True,
    help="YAML or JSON config file.",
)
@click.option("--data-dir", default=None, help="Directory for local history and alert files.")
@click.pass_context
def main(ctx: click.Context, config_path: str, data_dir: str | None) -> None:
    """Equilibrium — daily wellness scoring and decline alerts."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["data_dir"] = data_dir


# Register subcommands
from .alerts_cmd import alerts
from .report_cmd import report
from .score_cmd import score, sleep

main.add_command(score)
main.add_command(sleep)
main.add_command(report)
main.add_command(alerts)
