"""Shared setup logic for CLI commands."""

from __future__ import annotations

from pathlib import Path

import click

EQUILIBRIUM_DIR = Path.home() / ".equilibrium"
DEFAULT_CONFIG_PATH = EQUILIBRIUM_DIR / "config.yaml"


def load_config(ctx: click.Context):
    """Load config from the --config / --data-dir options."""
    from equilibrium.core.config import Config

    obj = ctx.obj or {}
    return Config(config_file=obj.get("config_path"), data_dir=obj.get("data_dir"))


def create_service(ctx: click.Context, event_source=None):
    """Build a WellnessService from config, with logging configured."""
    from equilibrium.core.exceptions import ConfigurationError
    from equilibrium.core.utils.logging import setup_logging_from_config
    from equilibrium.wellness.service import WellnessService

    config = load_config(ctx)
    setup_logging_from_config(config)
    try:
        return WellnessService.from_config(config, event_source=event_source)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
