"""Render generated stack declarations as Python source.

Python cannot extend an existing class with a nested alias, so the alias
``OrderServiceAdapter.Stack`` is emitted as the companion
``OrderServiceAdapterStack`` right after the protocol it belongs to.

A trivial stack is a plain alias::

    OrderServiceAdapterStack: typing.TypeAlias = OrderServiceAdapter

A composed stack is an intersection protocol::

    class OrderServiceAdapterStack(OrderServiceAdapter, CartStorageStack, typing.Protocol):
        \"\"\"Stack of OrderServiceAdapter: Self & CartStorage.Stack.\"\"\"

Two outputs are supported: an *expanded module* (the original source with
the adapter annotations consumed and the companions spliced in) and a
*companion module* holding only the generated declarations, importing the
protocols they extend.

Within one module the protocols' bases already force dependency order. The
companion module gathers stacks from many modules, so it is ordered
explicitly: a stack that builds on another generated stack comes after it.
"""

from __future__ import annotations

import ast
from collections.abc import Sequence
from dataclasses import dataclass

from adapterstack.core.models import GeneratedDeclaration
from adapterstack.core.syntax import AdapterAttribute, Declaration

_INDENT = "    "

COMPANION_HEADER = (
    '"""Dependency stacks generated by adapterstack. Do not edit."""\n'
    "\n"
    "from __future__ import annotations\n"
    "\n"
    "import typing\n"
)


@dataclass(frozen=True)
class Placement:
    """Where one generated declaration goes in its module.

    Attributes:
        declaration: The annotated protocol.
        generated: Its generated stack.
        annotation: The adapter annotation to remove, if any.
    """

    declaration: Declaration
    generated: GeneratedDeclaration
    annotation: AdapterAttribute | None = None


def render_declaration(generated: GeneratedDeclaration, indent: str = "") -> str:
    """Render one generated declaration, without a trailing newline."""
    expression = generated.expression
    name = generated.companion_name
    if expression.is_trivial:
        return f"{indent}{name}: typing.TypeAlias = {expression.owner}"

    # A repeated dependency appears once among the bases.
    bases = ", ".join(dict.fromkeys((*expression.terms, "typing.Protocol")))
    docstring = f"Stack of {generated.extended}: {expression.notation()}."
    return (
        f"{indent}class {name}({bases}):\n"
        f'{indent}{_INDENT}"""{docstring}"""'
    )


def order_by_dependencies(
    generated: Sequence[GeneratedDeclaration],
) -> list[GeneratedDeclaration]:
    """Order ``generated`` so every companion follows the companions it uses.

    Source order is kept wherever the dependencies allow it. References to
    stacks outside ``generated`` are ignored.
    """
    pending = list(generated)
    ordered: list[GeneratedDeclaration] = []
    while pending:
        waiting = {g.companion_name for g in pending}
        ready = next(
            (
                g for g in pending
                if not set(g.expression.references) & (waiting - {g.companion_name})
            ),
            pending[0],
        )
        ordered.append(ready)
        pending.remove(ready)
    return ordered


def render_companion(
    generated: Sequence[GeneratedDeclaration],
    imports: Sequence[tuple[str, Sequence[str]]] = (),
) -> str:
    """Render a standalone module holding ``generated``.

    Args:
        generated: Declarations to emit.
        imports: ``(module, names)`` pairs; each becomes a
            ``from module import names`` line so the companion module can
            be imported on its own.
    """
    text = COMPANION_HEADER
    import_lines = [
        f"from {module} import {', '.join(dict.fromkeys(names))}"
        for module, names in imports
        if module and names
    ]
    if import_lines:
        text += "\n" + "\n".join(import_lines) + "\n"

    blocks = [render_declaration(g) for g in order_by_dependencies(generated)]
    if not blocks:
        return text
    return text + "\n\n" + "\n\n\n".join(blocks) + "\n"


def _imports_typing(tree: ast.Module) -> bool:
    for node in tree.body:
        if isinstance(node, ast.Import):
            if any(alias.name == "typing" and alias.asname is None for alias in node.names):
                return True
    return False


def _preamble_end(tree: ast.Module) -> int:
    """Return the last line of the module docstring and ``__future__`` imports."""
    end = 0
    for index, node in enumerate(tree.body):
        is_docstring = (
            index == 0
            and isinstance(node, ast.Expr)
            and isinstance(node.value, ast.Constant)
            and isinstance(node.value.value, str)
        )
        is_future = isinstance(node, ast.ImportFrom) and node.module == "__future__"
        if not (is_docstring or is_future):
            break
        end = node.end_lineno or end
    return end


def _stack_imports(
    tree: ast.Module,
    placements: Sequence[Placement],
) -> list[tuple[int, int, list[str]]]:
    """Import the stacks of dependencies that the module imports.

    ``from shop.storage import CartStorageAdapter`` gains a sibling
    ``from shop.storage import CartStorageAdapterStack`` when a generated
    stack in this module builds on ``CartStorageAdapter.Stack``.
    """
    imported: dict[str, tuple[ast.ImportFrom, str]] = {}
    for node in tree.body:
        if isinstance(node, ast.ImportFrom) and node.module != "__future__":
            for alias in node.names:
                imported[alias.asname or alias.name] = (node, alias.name)

    defined = {p.generated.companion_name for p in placements}
    wanted: dict[ast.ImportFrom, list[str]] = {}
    for placement in placements:
        expression = placement.generated.expression
        for dependency, reference in zip(expression.dependencies, expression.references):
            if dependency not in imported or reference in defined or reference in imported:
                continue
            node, original = imported[dependency]
            suffix = reference[len(dependency):]
            name = original + suffix
            entry = name if name == reference else f"{name} as {reference}"
            names = wanted.setdefault(node, [])
            if entry not in names:
                names.append(entry)

    edits: list[tuple[int, int, list[str]]] = []
    for node, names in wanted.items():
        module = "." * node.level + (node.module or "")
        end = node.end_lineno or node.lineno
        edits.append((end, end, [f"from {module} import {', '.join(names)}"]))
    return edits


def render_module(source: str, placements: Sequence[Placement]) -> str:
    """Splice generated declarations into ``source``.

    Each companion follows its protocol, and each placement's adapter
    annotation is removed. Stacks of dependencies imported from other
    modules are imported alongside them. ``import typing`` is added below
    the module preamble when the module does not already import it. Source
    without placements is returned as is.
    """
    if not placements:
        return source

    tree = ast.parse(source)
    lines = source.splitlines()

    # (start, stop, replacement) slices over ``lines``, 0-based.
    edits: list[tuple[int, int, list[str]]] = []
    for placement in placements:
        anchor = placement.annotation.anchor if placement.annotation else None
        if anchor is not None and anchor.line is not None:
            edits.append((anchor.line - 1, anchor.end_line or anchor.line, []))

        declaration = placement.declaration
        end = declaration.end_line or len(lines)
        indent = " " * (declaration.anchor.column or 0)
        # PEP 8 spacing: two blank lines at module level, one inside a class.
        gap = [""] if indent else ["", ""]
        block = render_declaration(placement.generated, indent).split("\n")
        edits.append((end, end, gap + block))
    edits.extend(_stack_imports(tree, placements))

    # Bottom-up so earlier line numbers stay valid; at the same line a
    # removal goes before an insertion.
    for start, stop, replacement in sorted(edits, key=lambda e: (e[0], e[1] - e[0]), reverse=True):
        lines[start:stop] = replacement

    if not _imports_typing(tree):
        at = _preamble_end(tree)
        insert = ["import typing"]
        if at:
            insert.insert(0, "")
        else:
            insert.append("")
        lines[at:at] = insert

    return "\n".join(lines) + "\n"
