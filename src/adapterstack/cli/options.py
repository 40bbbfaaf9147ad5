"""Options shared by several adapterstack commands."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from adapterstack.core.config import ExpansionConfig, discover_config, load_config
from adapterstack.exceptions import ConfigError

config_option = click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML configuration file (default: ./adapterstack.yaml if present).",
)

format_option = click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)


def resolve_config(config_path: str | None) -> ExpansionConfig:
    """Load the configuration named on the command line, or discover one.

    Exits with code 2 if the configuration is invalid.
    """
    try:
        if config_path is not None:
            return load_config(Path(config_path))
        return discover_config(Path.cwd())
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)
