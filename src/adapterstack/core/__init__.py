"""Adapter stack expansion core.

Given a protocol declaration annotated with ``@Adapter(Target.self)``, the
core derives the protocol's dependency stack and validates the annotation.
It never reads files: input is a ``Declaration`` plus an ``AdapterAttribute``,
output is an ``ExpansionResult``.

Submodules
----------
- ``syntax``: Input model (declarations, parent references, arguments).
- ``diagnostics``: Diagnostic kinds, severities, and messages.
- ``models``: Output model (stack expression, generated declaration, result).
- ``config``: ``ExpansionConfig`` and its YAML loader.
- ``expander``: The expansion steps and ``AdapterExpander``.

All public names are re-exported here::

    from adapterstack.core import AdapterExpander, Declaration, ExpansionResult
"""

from adapterstack.core.config import (
    DEFAULT_CONFIG,
    DEFAULT_MARKERS,
    ExpansionConfig,
    load_config,
)
from adapterstack.core.diagnostics import Diagnostic, DiagnosticKind, Severity
from adapterstack.core.expander import (
    AdapterExpander,
    collect_dependencies,
    conforms_to_target,
    expand,
    extract_target_capability,
    synthesize_stack,
)
from adapterstack.core.models import (
    ExpansionResult,
    GeneratedDeclaration,
    StackExpression,
)
from adapterstack.core.syntax import (
    AdapterAttribute,
    AnchorRole,
    Argument,
    Declaration,
    DeclarationKind,
    Identifier,
    Literal,
    MemberAccess,
    OpaqueExpression,
    ReferenceKind,
    SyntaxAnchor,
    TypeReference,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_MARKERS",
    "ExpansionConfig",
    "load_config",
    "Diagnostic",
    "DiagnosticKind",
    "Severity",
    "AdapterExpander",
    "collect_dependencies",
    "conforms_to_target",
    "expand",
    "extract_target_capability",
    "synthesize_stack",
    "ExpansionResult",
    "GeneratedDeclaration",
    "StackExpression",
    "AdapterAttribute",
    "AnchorRole",
    "Argument",
    "Declaration",
    "DeclarationKind",
    "Identifier",
    "Literal",
    "MemberAccess",
    "OpaqueExpression",
    "ReferenceKind",
    "SyntaxAnchor",
    "TypeReference",
]
