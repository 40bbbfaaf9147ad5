"""adapterstack exception hierarchy.

All public exceptions inherit from AdapterStackError, giving callers a single
base class to catch when they want to handle any adapterstack-specific failure
without swallowing unrelated errors.

Expansion problems in user code (bad ``@Adapter`` arguments, adapters on
non-protocol classes, missing conformance) are *not* exceptions: they are
reported as ``Diagnostic`` values in the expansion result.
"""

from __future__ import annotations


class AdapterStackError(Exception):
    """Base exception for all adapterstack errors."""


class ParseError(AdapterStackError):
    """Raised when a module cannot be read or parsed.

    Covers syntax errors, unreadable files, and encoding issues
    encountered while building declarations from source text.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        line: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.line = line

    def __str__(self) -> str:
        if self.path and self.line is not None:
            return f"{self.path}:{self.line}: {self.message}"
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class ConfigError(AdapterStackError):
    """Raised when an expansion configuration is invalid.

    Covers malformed YAML, unknown keys, and values of the wrong type.
    """
