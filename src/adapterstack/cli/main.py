"""adapterstack CLI — Dependency stacks for adapter protocols.

Entry point for the ``adapterstack`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    expand   — Generate the stack of every @Adapter protocol.
    check    — Validate @Adapter annotations without generating code.
    markers  — List the marker capabilities in effect.

Usage::

    adapterstack expand services/orders.py
    adapterstack expand src/ --companion -o src/stacks.py
    adapterstack check src/ --strict
    adapterstack markers --config adapterstack.yaml
"""

from __future__ import annotations

import logging

import click

from adapterstack import __version__
from adapterstack.cli.check_cmd import check_command
from adapterstack.cli.expand_cmd import expand_command
from adapterstack.cli.markers_cmd import markers_command


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """adapterstack: Dependency stacks for adapter protocols.

    Find protocols annotated with @Adapter(Target.self), validate the
    annotation, and generate the composed stack of each protocol's
    dependencies.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register all subcommands
cli.add_command(expand_command)
cli.add_command(check_command)
cli.add_command(markers_command)
