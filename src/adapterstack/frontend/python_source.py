"""Frontend for Python modules: find ``@Adapter`` sites with ``ast``.

Capability declarations are ``typing.Protocol`` classes; the adapter
annotation is a class decorator whose argument names the target protocol::

    @Adapter(OrderService.self)
    class OrderServiceAdapter(OrderService, CartStorage, Protocol):
        ...

The decorator is never imported or executed. Every class or function whose
decorator list contains a recognised annotation name becomes an
``AdapterSite`` pairing a ``Declaration`` with its ``AdapterAttribute``; the
expander decides whether the site is valid.
"""

from __future__ import annotations

import ast
import logging
import re
from dataclasses import dataclass

from adapterstack.core.config import DEFAULT_CONFIG, ExpansionConfig
from adapterstack.core.syntax import (
    AdapterAttribute,
    AnchorRole,
    Argument,
    Declaration,
    DeclarationKind,
    Expression,
    Identifier,
    Literal,
    MemberAccess,
    OpaqueExpression,
    ReferenceKind,
    SyntaxAnchor,
    TypeReference,
)
from adapterstack.exceptions import ParseError

logger = logging.getLogger(__name__)

_FunctionNode = (ast.FunctionDef, ast.AsyncFunctionDef)


@dataclass(frozen=True)
class AdapterSite:
    """An annotated declaration found in a module."""

    declaration: Declaration
    attribute: AdapterAttribute


def _anchor(node: ast.AST, role: AnchorRole) -> SyntaxAnchor:
    return SyntaxAnchor(
        role=role,
        line=getattr(node, "lineno", None),
        column=getattr(node, "col_offset", None),
        end_line=getattr(node, "end_lineno", None),
        end_column=getattr(node, "end_col_offset", None),
    )


def _name_anchor(node: ast.ClassDef | ast.FunctionDef | ast.AsyncFunctionDef, lines: list[str]) -> SyntaxAnchor:
    """Locate the name token of a class or function definition.

    ``ast`` only records where the ``class``/``def`` keyword starts, so the
    name is searched for on that line.
    """
    line, column = node.lineno, node.col_offset
    if 0 < line <= len(lines):
        match = re.compile(rf"\b{re.escape(node.name)}\b").search(lines[line - 1], column)
        if match:
            column = match.start()
    return SyntaxAnchor(
        role=AnchorRole.NAME,
        line=line,
        column=column,
        end_line=line,
        end_column=column + len(node.name),
    )


# ---------------------------------------------------------------------------
# Parent references
# ---------------------------------------------------------------------------


def _type_reference(node: ast.expr) -> TypeReference:
    text = ast.unparse(node)
    if isinstance(node, ast.Name):
        return TypeReference(text, ReferenceKind.IDENTIFIER)
    if isinstance(node, ast.Subscript):
        return TypeReference(text, ReferenceKind.GENERIC)
    return TypeReference(text, ReferenceKind.QUALIFIED)


def _is_protocol_base(reference: TypeReference, config: ExpansionConfig) -> bool:
    return reference.base_name in config.protocol_bases


# ---------------------------------------------------------------------------
# Annotation arguments
# ---------------------------------------------------------------------------


def _expression(node: ast.expr) -> Expression:
    if isinstance(node, ast.Attribute):
        base = node.value.id if isinstance(node.value, ast.Name) else None
        return MemberAccess(base=base, member=node.attr)
    if isinstance(node, ast.Name):
        return Identifier(node.id)
    if isinstance(node, ast.Constant):
        return Literal(node.value)
    return OpaqueExpression(ast.unparse(node))


def _decorator_name(node: ast.expr) -> str | None:
    target = node.func if isinstance(node, ast.Call) else node
    if isinstance(target, ast.Name):
        return target.id
    if isinstance(target, ast.Attribute):
        return target.attr
    return None


def _attribute(node: ast.expr, name: str) -> AdapterAttribute:
    arguments: tuple[Argument, ...] | None = None
    if isinstance(node, ast.Call):
        positional = [Argument(_expression(arg)) for arg in node.args]
        keyword = [Argument(_expression(kw.value), label=kw.arg or "**") for kw in node.keywords]
        arguments = tuple(positional + keyword)
    return AdapterAttribute(name=name, arguments=arguments, anchor=_anchor(node, AnchorRole.ATTRIBUTE))


def _find_attribute(
    node: ast.ClassDef | ast.FunctionDef | ast.AsyncFunctionDef,
    config: ExpansionConfig,
) -> AdapterAttribute | None:
    found: list[AdapterAttribute] = []
    for decorator in node.decorator_list:
        name = _decorator_name(decorator)
        if name in config.attribute_names:
            found.append(_attribute(decorator, name))
    if len(found) > 1:
        logger.warning(
            "%s carries %d adapter annotations; only the first is used",
            node.name,
            len(found),
        )
    return found[0] if found else None


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


def _declaration(
    node: ast.ClassDef | ast.FunctionDef | ast.AsyncFunctionDef,
    lines: list[str],
    config: ExpansionConfig,
) -> Declaration:
    parents: tuple[TypeReference, ...] = ()
    if isinstance(node, ast.ClassDef):
        parents = tuple(_type_reference(base) for base in node.bases)
        is_protocol = any(_is_protocol_base(p, config) for p in parents)
        kind = DeclarationKind.PROTOCOL if is_protocol else DeclarationKind.CLASS
    else:
        kind = DeclarationKind.FUNCTION
    return Declaration(
        name=node.name,
        kind=kind,
        parents=parents,
        anchor=_anchor(node, AnchorRole.DECLARATION),
        name_anchor=_name_anchor(node, lines),
        end_line=node.end_lineno,
    )


def find_adapter_sites(
    source: str,
    path: str = "<string>",
    config: ExpansionConfig = DEFAULT_CONFIG,
) -> list[AdapterSite]:
    """Parse Python source and return its annotated declarations in source order.

    Nested classes and functions are included.

    Raises:
        ParseError: If ``source`` is not valid Python.
    """
    try:
        tree = ast.parse(source, filename=path)
    except SyntaxError as exc:
        raise ParseError(exc.msg, path=path, line=exc.lineno) from exc

    lines = source.splitlines()
    sites: list[AdapterSite] = []
    for node in ast.walk(tree):
        if not isinstance(node, (ast.ClassDef, *_FunctionNode)):
            continue
        attribute = _find_attribute(node, config)
        if attribute is None:
            continue
        sites.append(AdapterSite(_declaration(node, lines, config), attribute))

    sites.sort(key=lambda s: (s.declaration.anchor.line or 0, s.declaration.anchor.column or 0))
    return sites
