"""``adapterstack markers`` -- List the marker capabilities.

Marker capabilities are structural tags (``Hashable``, ``Protocol``, ...)
that never count as dependencies. The list reflects the active
configuration, so it is the quickest way to check an ``adapterstack.yaml``.

Exit Codes:
    0 -- Always, unless the configuration is invalid (2).
"""

from __future__ import annotations

import json

import click

from adapterstack.cli.options import config_option, format_option, resolve_config
from adapterstack.cli.output import print_markers


@click.command("markers")
@format_option
@config_option
def markers_command(output_format: str, config_path: str | None) -> None:
    """List the marker capabilities excluded from dependency stacks."""
    config = resolve_config(config_path)
    if output_format == "json":
        click.echo(json.dumps({"markers": sorted(config.markers)}))
        return
    print_markers(config)
