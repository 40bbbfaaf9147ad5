"""Rich output formatting helpers for the adapterstack CLI.

Diagnostics are written to stderr in the familiar ``path:line:col:
severity: message`` shape so editors can jump to them; generated code goes
to stdout untouched.

Severity Color Mapping:
    ERROR = bold red, WARNING = yellow
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

from adapterstack.core.config import ExpansionConfig
from adapterstack.core.diagnostics import Diagnostic, Severity
from adapterstack.pipeline import ModuleExpansion

_SEVERITY_STYLES: dict[Severity, str] = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
}

console = Console()
err_console = Console(stderr=True)


def severity_style(severity: Severity) -> str:
    """Return the Rich style string for a given severity level."""
    return _SEVERITY_STYLES.get(severity, "white")


def format_location(path: str, diagnostic: Diagnostic) -> str:
    anchor = diagnostic.anchor
    if anchor.line is None:
        return path
    return f"{path}:{anchor.describe()}"


def print_diagnostics(modules: list[ModuleExpansion]) -> None:
    """Print every diagnostic of every module, one per line, to stderr."""
    for module in modules:
        for diagnostic in module.diagnostics:
            severity = diagnostic.severity
            line = Text.assemble(
                (format_location(module.path, diagnostic), "bold"),
                ": ",
                (severity.name.lower(), severity_style(severity)),
                ": ",
                diagnostic.message,
                (f" [{diagnostic.code}]", "dim"),
            )
            err_console.print(line, soft_wrap=True)


def count_severities(modules: list[ModuleExpansion]) -> tuple[int, int]:
    """Return (errors, warnings) across ``modules``."""
    errors = warnings = 0
    for module in modules:
        for diagnostic in module.diagnostics:
            if diagnostic.severity is Severity.ERROR:
                errors += 1
            else:
                warnings += 1
    return errors, warnings


def print_summary(modules: list[ModuleExpansion]) -> None:
    """Print a one-line summary after the diagnostics."""
    adapters = sum(len(m.expansions) for m in modules)
    generated = sum(len(m.generated) for m in modules)
    errors, warnings = count_severities(modules)
    parts = [
        f"[bold]{len(modules)}[/bold] modules",
        f"{adapters} adapters",
        f"{generated} stacks generated",
    ]
    if errors:
        parts.append(f"[red]{errors} errors[/red]")
    if warnings:
        parts.append(f"[yellow]{warnings} warnings[/yellow]")
    if not errors and not warnings:
        parts.append("[green]no issues[/green]")
    err_console.print(" | ".join(parts))


def print_markers(config: ExpansionConfig) -> None:
    """Print the effective marker set as a table."""
    table = Table(title="Marker Capabilities", show_header=True, header_style="bold")
    table.add_column("Name", style="bold")
    for name in sorted(config.markers):
        table.add_row(name)
    console.print(table)


def module_to_json(module: ModuleExpansion) -> dict[str, Any]:
    """Convert a module expansion to a JSON-serializable dict."""
    adapters = []
    for expansion in module.expansions:
        declaration = expansion.site.declaration
        generated = expansion.result.generated
        adapters.append({
            "declaration": declaration.name,
            "kind": declaration.kind.value,
            "line": declaration.anchor.line,
            "generated": generated.as_dict() if generated else None,
            "diagnostics": [d.as_dict() for d in expansion.result.diagnostics],
        })
    return {"path": module.path, "adapters": adapters}
