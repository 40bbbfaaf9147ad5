"""Host driver: expand every ``@Adapter`` site in Python modules.

The pipeline is the only place that touches the filesystem. For each module
it runs the Python frontend, hands every adapter site to the expander, and
collects the results so callers (the CLI, build hooks) can route generated
code and diagnostics wherever they need them.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from adapterstack.codegen import Placement, render_companion, render_module
from adapterstack.core.config import DEFAULT_CONFIG, ExpansionConfig
from adapterstack.core.diagnostics import Diagnostic, Severity
from adapterstack.core.expander import AdapterExpander
from adapterstack.core.models import ExpansionResult, GeneratedDeclaration
from adapterstack.exceptions import ParseError
from adapterstack.frontend import AdapterSite, find_adapter_sites

logger = logging.getLogger(__name__)

_SKIPPED_DIRS = {".git", ".venv", "venv", "__pycache__", "build", "dist", ".tox"}


@dataclass
class SiteExpansion:
    """An adapter site together with its expansion result."""

    site: AdapterSite
    result: ExpansionResult


@dataclass
class ModuleExpansion:
    """All expansions of one module.

    Attributes:
        path: Module path as given by the caller.
        source: Original module text.
        expansions: Per-site results in source order.
        module: Dotted import name, or None when the source has no file.
    """

    path: str
    source: str
    expansions: list[SiteExpansion] = field(default_factory=list)
    module: str | None = None

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return [d for e in self.expansions for d in e.result.diagnostics]

    @property
    def generated(self) -> list[GeneratedDeclaration]:
        return [g for e in self.expansions for g in e.result.declarations]

    @property
    def has_errors(self) -> bool:
        return any(e.result.has_errors for e in self.expansions)

    @property
    def max_severity(self) -> Severity | None:
        severities = [d.severity for d in self.diagnostics]
        return max(severities) if severities else None

    def expanded_source(self) -> str:
        """The module with its annotations consumed and its stacks spliced in."""
        placements = [
            Placement(e.site.declaration, e.result.generated, e.site.attribute)
            for e in self.expansions
            if e.result.generated is not None
        ]
        return render_module(self.source, placements)

    def companion_source(self) -> str:
        """A standalone module holding only the generated declarations."""
        return companion_source([self])


def companion_source(modules: Sequence[ModuleExpansion]) -> str:
    """Render the stacks of every module as one importable companion module.

    Each extended protocol is imported from its module. Modules without an
    import name contribute their stacks only, so the companion then has to
    be star-imported into the protocols' namespace.
    """
    imports: dict[str, list[str]] = {}
    for module in modules:
        if module.module and module.generated:
            names = imports.setdefault(module.module, [])
            names.extend(g.extended for g in module.generated)
    generated = [g for m in modules for g in m.generated]
    return render_companion(generated, list(imports.items()))


def module_name(path: Path) -> str:
    """Return the dotted import name of the module at ``path``.

    Enclosing directories count as packages while they hold an
    ``__init__.py``; a package's ``__init__.py`` takes the package's name.
    """
    path = path.resolve()
    parts = [] if path.stem == "__init__" else [path.stem]
    directory = path.parent
    while (directory / "__init__.py").is_file():
        parts.insert(0, directory.name)
        directory = directory.parent
    return ".".join(parts)


def expand_source(
    source: str,
    path: str = "<string>",
    config: ExpansionConfig = DEFAULT_CONFIG,
    module: str | None = None,
) -> ModuleExpansion:
    """Expand every adapter site in ``source``.

    ``module`` is the import name used by ``companion_source``.

    Raises:
        ParseError: If ``source`` is not valid Python.
    """
    expander = AdapterExpander(config)
    expansion = ModuleExpansion(path=path, source=source, module=module)
    for site in find_adapter_sites(source, path, config):
        result = expander.expand(site.declaration, site.attribute)
        expansion.expansions.append(SiteExpansion(site=site, result=result))
    logger.debug("%s: %d adapter site(s)", path, len(expansion.expansions))
    return expansion


def expand_file(path: Path, config: ExpansionConfig = DEFAULT_CONFIG) -> ModuleExpansion:
    """Read and expand a single module.

    Raises:
        ParseError: If the file cannot be read or is not valid Python.
    """
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(f"Cannot read module: {exc}", path=str(path)) from exc
    return expand_source(source, str(path), config, module_name(path) or None)


def iter_modules(path: Path) -> list[Path]:
    """Return ``path`` itself for a file, or every ``*.py`` below a directory."""
    if path.is_file():
        return [path]
    modules: list[Path] = []
    for candidate in sorted(path.rglob("*.py")):
        if any(part in _SKIPPED_DIRS for part in candidate.relative_to(path).parts):
            continue
        modules.append(candidate)
    return modules


def expand_path(
    path: Path,
    config: ExpansionConfig = DEFAULT_CONFIG,
    *,
    strict: bool = True,
) -> list[ModuleExpansion]:
    """Expand a module or every module under a directory.

    Modules without adapter sites are included with no expansions.

    Args:
        path: File or directory.
        config: Expansion configuration.
        strict: If True, the first unparseable module raises. If False,
            unparseable modules are logged and skipped.

    Raises:
        ParseError: In strict mode, for the first module that fails.
    """
    results: list[ModuleExpansion] = []
    for module_path in iter_modules(path):
        try:
            results.append(expand_file(module_path, config))
        except ParseError as exc:
            if strict:
                raise
            logger.warning("Skipping %s: %s", module_path, exc)
    return results
