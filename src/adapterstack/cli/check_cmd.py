"""``adapterstack check <path>`` — Validate @Adapter annotations.

Runs the same expansion as ``expand`` but prints only diagnostics. Intended
for CI: with ``--strict`` the advisory missing-conformance warning also fails
the run.

Exit Codes:
    0 — No errors (and no warnings, with ``--strict``).
    1 — One or more error diagnostics (or warnings, with ``--strict``).
    2 — Input could not be parsed, or no Python modules were found.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from adapterstack.cli.options import config_option, format_option, resolve_config
from adapterstack.cli.output import (
    count_severities,
    module_to_json,
    print_diagnostics,
    print_summary,
)
from adapterstack.exceptions import ParseError
from adapterstack.pipeline import expand_path


@click.command("check")
@click.argument("path", type=click.Path(exists=True))
@format_option
@click.option(
    "--strict", is_flag=True, default=False,
    help="Treat warnings as failures.",
)
@config_option
def check_command(
    path: str,
    output_format: str,
    strict: bool,
    config_path: str | None,
) -> None:
    """Report diagnostics for every @Adapter annotation under PATH."""
    config = resolve_config(config_path)
    try:
        modules = expand_path(Path(path), config)
    except ParseError as exc:
        if output_format == "json":
            click.echo(json.dumps({"error": str(exc)}))
        else:
            click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    if not modules:
        if output_format == "json":
            click.echo(json.dumps({"modules": [], "summary": "No Python modules found"}))
        else:
            click.echo("No Python modules found.", err=True)
        sys.exit(2)

    errors, warnings = count_severities(modules)
    failed = errors > 0 or (strict and warnings > 0)

    if output_format == "json":
        click.echo(json.dumps({
            "modules": [module_to_json(m) for m in modules if m.expansions],
            "errors": errors,
            "warnings": warnings,
        }, indent=2))
    else:
        print_diagnostics(modules)
        print_summary(modules)

    sys.exit(1 if failed else 0)
