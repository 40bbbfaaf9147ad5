"""``adapterstack expand <path>`` — Generate dependency stacks.

Expands every ``@Adapter`` protocol in a module (or every module under a
directory) and prints the result. By default each module is printed with its
annotations consumed and its generated stacks spliced in; with
``--companion`` only the generated declarations are printed, as one module
that imports the protocols it extends.

Diagnostics go to stderr in text mode and into the document in JSON mode.

Exit Codes:
    0 — Expansion succeeded (warnings allowed).
    1 — One or more adapters produced an error diagnostic.
    2 — Input could not be parsed, or no Python modules were found.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from adapterstack.cli.options import config_option, format_option, resolve_config
from adapterstack.cli.output import module_to_json, print_diagnostics, print_summary
from adapterstack.exceptions import ParseError
from adapterstack.pipeline import ModuleExpansion, companion_source, expand_path


def render_expanded(modules: list[ModuleExpansion]) -> str:
    """Render every module that gained generated code.

    A single module is printed as is; several are separated by a
    ``# --- <path>`` banner line.
    """
    touched = [m for m in modules if m.generated]
    if len(touched) == 1:
        return touched[0].expanded_source()
    return "\n".join(f"# --- {m.path}\n{m.expanded_source()}" for m in touched)


@click.command("expand")
@click.argument("path", type=click.Path(exists=True))
@format_option
@click.option(
    "--companion", is_flag=True, default=False,
    help="Print only the generated declarations, as one module.",
)
@click.option(
    "--output", "-o", "output_path",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write the companion module to this file (requires --companion).",
)
@config_option
def expand_command(
    path: str,
    output_format: str,
    companion: bool,
    output_path: str | None,
    config_path: str | None,
) -> None:
    """Generate the dependency stack of every @Adapter protocol under PATH.

    Exit code 0 on success, 1 if any adapter is invalid, 2 if PATH cannot
    be parsed.
    """
    if output_path is not None and not companion:
        raise click.UsageError("--output requires --companion")

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

    has_errors = any(m.has_errors for m in modules)

    if output_format == "json":
        click.echo(json.dumps({
            "modules": [module_to_json(m) for m in modules],
            "has_errors": has_errors,
        }, indent=2))
        sys.exit(1 if has_errors else 0)

    text = companion_source(modules) if companion else render_expanded(modules)
    if output_path is not None:
        Path(output_path).write_text(text, encoding="utf-8")
        click.echo(f"Wrote {output_path}", err=True)
    elif text:
        click.echo(text, nl=not text.endswith("\n"))

    print_diagnostics(modules)
    print_summary(modules)
    sys.exit(1 if has_errors else 0)
