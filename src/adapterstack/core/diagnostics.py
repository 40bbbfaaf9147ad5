"""Diagnostic records emitted by the adapter expander.

There are exactly three kinds. Two are hard failures (error severity) that
stop expansion of the declaration; the third is an advisory warning that is
reported alongside normal output.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from adapterstack.core.syntax import SyntaxAnchor


class Severity(IntEnum):
    """Diagnostic severity. The integer encoding orders WARNING < ERROR."""

    WARNING = 1
    ERROR = 2


class DiagnosticKind(Enum):
    INVALID_ARGUMENT = "invalid-argument"
    NOT_A_PROTOCOL_DECLARATION = "not-a-protocol-declaration"
    MISSING_TARGET_CONFORMANCE = "missing-target-conformance"


_SEVERITIES: dict[DiagnosticKind, Severity] = {
    DiagnosticKind.INVALID_ARGUMENT: Severity.ERROR,
    DiagnosticKind.NOT_A_PROTOCOL_DECLARATION: Severity.ERROR,
    DiagnosticKind.MISSING_TARGET_CONFORMANCE: Severity.WARNING,
}

INVALID_ARGUMENT_MESSAGE = (
    "@Adapter requires a protocol type as argument "
    "(e.g., @Adapter(MyProtocol.self))"
)
NOT_A_PROTOCOL_MESSAGE = "@Adapter can only be applied to protocol declarations"
MISSING_CONFORMANCE_TEMPLATE = (
    "Protocol should conform to '{name}' for the adapter pattern to work correctly"
)


@dataclass(frozen=True)
class Diagnostic:
    """A single message for the user, anchored at a source node.

    Attributes:
        kind: Which of the three diagnostic kinds this is.
        severity: ERROR or WARNING.
        message: Rendered message text.
        anchor: The node the message refers to.
    """

    kind: DiagnosticKind
    severity: Severity
    message: str
    anchor: SyntaxAnchor

    @property
    def code(self) -> str:
        """Stable identifier, e.g. ``adapter.invalid-argument``."""
        return f"adapter.{self.kind.value}"

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "severity": self.severity.name.lower(),
            "message": self.message,
            "anchor": self.anchor.role.value,
            "line": self.anchor.line,
            "column": self.anchor.column,
        }


def invalid_argument(anchor: SyntaxAnchor) -> Diagnostic:
    """The annotation argument is not of the form ``Target.self``."""
    kind = DiagnosticKind.INVALID_ARGUMENT
    return Diagnostic(kind, _SEVERITIES[kind], INVALID_ARGUMENT_MESSAGE, anchor)


def not_a_protocol_declaration(anchor: SyntaxAnchor) -> Diagnostic:
    """The annotation is attached to something other than a protocol."""
    kind = DiagnosticKind.NOT_A_PROTOCOL_DECLARATION
    return Diagnostic(kind, _SEVERITIES[kind], NOT_A_PROTOCOL_MESSAGE, anchor)


def missing_target_conformance(target: str, anchor: SyntaxAnchor) -> Diagnostic:
    """The protocol does not list its target capability as a parent."""
    kind = DiagnosticKind.MISSING_TARGET_CONFORMANCE
    message = MISSING_CONFORMANCE_TEMPLATE.format(name=target)
    return Diagnostic(kind, _SEVERITIES[kind], message, anchor)
