"""Input model for the expander: declarations, references, and attributes.

These types are the boundary between a host parser and the expander. The
Python frontend builds them from ``ast`` nodes, but library users can also
construct them directly. All of them are immutable; the expander never
mutates its input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


# ---------------------------------------------------------------------------
# SyntaxAnchor: Where a diagnostic points
# ---------------------------------------------------------------------------


class AnchorRole(Enum):
    """Which part of the source a diagnostic is attached to."""

    ATTRIBUTE = "attribute"
    DECLARATION = "declaration"
    NAME = "name"


@dataclass(frozen=True)
class SyntaxAnchor:
    """A node position in the source.

    Lines are 1-based and columns 0-based, matching ``ast`` conventions.
    """

    role: AnchorRole
    line: int | None = None
    column: int | None = None
    end_line: int | None = None
    end_column: int | None = None

    def describe(self) -> str:
        if self.line is not None and self.column is not None:
            return f"{self.line}:{self.column + 1}"
        if self.line is not None:
            return str(self.line)
        return "unknown location"


# ---------------------------------------------------------------------------
# TypeReference: One entry of a declaration's parent list
# ---------------------------------------------------------------------------


class ReferenceKind(Enum):
    """Syntactic shape of a parent reference."""

    IDENTIFIER = "identifier"  # CartStorage
    QUALIFIED = "qualified"  # typing.Protocol
    GENERIC = "generic"  # Repository[T]


@dataclass(frozen=True)
class TypeReference:
    """A parent capability as written by the author.

    Attributes:
        text: Literal source text of the reference.
        kind: Whether the reference is a bare identifier, a dotted name,
            or carries type arguments.
    """

    text: str
    kind: ReferenceKind = ReferenceKind.IDENTIFIER

    @property
    def is_identifier(self) -> bool:
        return self.kind is ReferenceKind.IDENTIFIER

    @property
    def base_name(self) -> str:
        """Terminal identifier with qualifiers and type arguments removed.

        ``typing.Protocol`` -> ``Protocol``, ``Generic[T]`` -> ``Generic``.
        """
        head = self.text.split("[", 1)[0].strip()
        return head.rsplit(".", 1)[-1]


# ---------------------------------------------------------------------------
# Declaration: The annotated entity
# ---------------------------------------------------------------------------


class DeclarationKind(Enum):
    """What kind of declaration an annotation is attached to."""

    PROTOCOL = "protocol"
    CLASS = "class"
    FUNCTION = "function"


@dataclass(frozen=True)
class Declaration:
    """A declaration carrying an adapter annotation.

    Attributes:
        name: Declared identifier, unique within its module.
        kind: Declaration kind. Only ``PROTOCOL`` declarations are expanded.
        parents: Parent references in source order. Duplicates are kept.
        anchor: Span of the whole declaration.
        name_anchor: Span of the name token.
        end_line: Last source line of the declaration, used when splicing
            generated code back into a module.
    """

    name: str
    kind: DeclarationKind = DeclarationKind.PROTOCOL
    parents: tuple[TypeReference, ...] = ()
    anchor: SyntaxAnchor = field(
        default_factory=lambda: SyntaxAnchor(AnchorRole.DECLARATION)
    )
    name_anchor: SyntaxAnchor = field(
        default_factory=lambda: SyntaxAnchor(AnchorRole.NAME)
    )
    end_line: int | None = None


# ---------------------------------------------------------------------------
# Attribute arguments
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MemberAccess:
    """``base.member``. ``base`` is None when the base is not a plain name."""

    base: str | None
    member: str


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class Literal:
    value: object


@dataclass(frozen=True)
class OpaqueExpression:
    """Any other expression, kept as source text."""

    text: str


Expression = Union[MemberAccess, Identifier, Literal, OpaqueExpression]


@dataclass(frozen=True)
class Argument:
    """A single attribute argument. ``label`` is set for keyword arguments."""

    expression: Expression
    label: str | None = None


@dataclass(frozen=True)
class AdapterAttribute:
    """The adapter annotation attached to a declaration.

    Attributes:
        name: Annotation name as written (``Adapter``).
        arguments: Argument list, or None when the annotation was written
            without parentheses.
        anchor: Span of the annotation.
    """

    name: str
    arguments: tuple[Argument, ...] | None = None
    anchor: SyntaxAnchor = field(
        default_factory=lambda: SyntaxAnchor(AnchorRole.ATTRIBUTE)
    )
