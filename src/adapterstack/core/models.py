"""Data models for expansion output: StackExpression, GeneratedDeclaration, ExpansionResult.

These are intentionally decoupled from the expander so that the code
generator, pipeline, and CLI formatters can import them without pulling in
the expansion logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from adapterstack.core.diagnostics import Diagnostic, Severity

DEFAULT_STACK_SUFFIX = "Stack"


def stack_reference(name: str, suffix: str = DEFAULT_STACK_SUFFIX) -> str:
    """Return the companion name of ``name``'s own stack.

    The suffix goes before any type arguments: ``Repo[T]`` -> ``RepoStack[T]``.
    """
    head, bracket, tail = name.partition("[")
    return f"{head}{suffix}{bracket}{tail}"


# ---------------------------------------------------------------------------
# StackExpression: The synthesized composition
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StackExpression:
    """Conjunction of a protocol with the stacks of its dependencies.

    Attributes:
        owner: Name of the annotated protocol.
        dependencies: Dependency names in filtered source order.
        suffix: Reserved suffix naming a dependency's own stack.
    """

    owner: str
    dependencies: tuple[str, ...] = ()
    suffix: str = DEFAULT_STACK_SUFFIX

    @property
    def is_trivial(self) -> bool:
        """True when the expression is the owner alone."""
        return not self.dependencies

    @property
    def references(self) -> tuple[str, ...]:
        """Companion names of the dependency stacks, in order."""
        return tuple(stack_reference(dep, self.suffix) for dep in self.dependencies)

    @property
    def terms(self) -> tuple[str, ...]:
        """All conjuncts: the owner followed by the dependency stacks."""
        return (self.owner, *self.references)

    def notation(self, self_name: str = "Self") -> str:
        """Render as ``Self & A.Stack & B.Stack``.

        ``self_name`` stands in for the owner, which is ``Self`` when the
        expression is read from inside the protocol's own scope.
        """
        parts = [self_name]
        parts.extend(f"{dep}.{self.suffix}" for dep in self.dependencies)
        return " & ".join(parts)


# ---------------------------------------------------------------------------
# GeneratedDeclaration: The single derived alias
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GeneratedDeclaration:
    """An alias named ``alias`` scoped to the ``extended`` protocol.

    Python has no declaration extension, so the alias is materialised as a
    companion type named ``<extended><alias>`` placed next to the protocol.
    """

    extended: str
    expression: StackExpression
    alias: str = DEFAULT_STACK_SUFFIX

    @property
    def qualified_name(self) -> str:
        return f"{self.extended}.{self.alias}"

    @property
    def companion_name(self) -> str:
        return f"{self.extended}{self.alias}"

    def as_dict(self) -> dict:
        return {
            "extends": self.extended,
            "alias": self.alias,
            "companion": self.companion_name,
            "dependencies": list(self.expression.dependencies),
            "expression": self.expression.notation(),
        }


# ---------------------------------------------------------------------------
# ExpansionResult: Complete output for one annotated declaration
# ---------------------------------------------------------------------------


@dataclass
class ExpansionResult:
    """The result of expanding a single annotated declaration.

    Attributes:
        declaration_name: Name of the annotated declaration.
        generated: The derived declaration, or None when a hard failure
            stopped expansion.
        diagnostics: Diagnostics in emission order (may be empty).
    """

    declaration_name: str
    generated: GeneratedDeclaration | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self.diagnostics)

    @property
    def max_severity(self) -> Severity | None:
        """Return the highest severity among diagnostics, or None if clean."""
        if not self.diagnostics:
            return None
        return max(d.severity for d in self.diagnostics)

    @property
    def declarations(self) -> list[GeneratedDeclaration]:
        """Generated declarations as a list of zero or one elements."""
        return [self.generated] if self.generated is not None else []
