"""Python code generation for dependency stacks."""

from adapterstack.codegen.render import (
    Placement,
    order_by_dependencies,
    render_companion,
    render_declaration,
    render_module,
)

__all__ = [
    "Placement",
    "order_by_dependencies",
    "render_companion",
    "render_declaration",
    "render_module",
]
