"""
Error types and source location tracking for solscope.
"""

from dataclasses import dataclass
from typing import Any, Optional
import reprlib


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Attributes:
        line: 1-indexed line number
        column: 0-indexed column number
        offset: 0-indexed character offset from start of source
        filename: Optional filename for error reporting
    """

    line: int
    column: int
    offset: int = 0
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


class SolScopeError(Exception):
    """Base exception for all solscope errors."""

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> None:
        self.message = message
        self.location = location
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []

        if self.location:
            parts.append(f"[{self.location}]")

        parts.append(self.message)

        if self.source_line and self.location:
            parts.append(f"\n    {self.source_line}")
            # Caret under the offending column
            padding = " " * (4 + self.location.column)
            parts.append(f"\n{padding}^")

        return " ".join(parts) if not self.source_line else parts[0] + " " + "".join(parts[1:])


class MalformedNodeError(SolScopeError):
    """
    Raised when an object handed to an AST operation is not a valid node.

    The message names the operation that rejected the object.
    """

    def __init__(self, operation: str, obj: Any) -> None:
        self.operation = operation
        self.obj = obj
        super().__init__(f"{operation}(): {reprlib.repr(obj)} is not a valid AST node.")


class InvalidCriteriaError(SolScopeError):
    """Raised when an ancestor search receives a malformed criteria mapping."""

    pass


class AstLoadError(SolScopeError):
    """Raised when an AST file cannot be read or decoded."""

    pass


class ConfigurationError(SolScopeError):
    """Raised for invalid configuration files, levels or lint directives."""

    pass


class InternalConsistencyError(SolScopeError):
    """
    Base class for states that can only be reached through a defect.

    These indicate that the traversal engine or the declaration registry
    broke its contract. They are never recovered from.
    """

    pass


class ScopeUnderflowError(InternalConsistencyError):
    """Raised when a scope is exited (or queried) with no scope open."""

    pass


class UnmappedDeclarationKindError(InternalConsistencyError):
    """Raised when the hoisting policy has no entry for a declaration kind."""

    def __init__(self, kind: Any) -> None:
        self.kind = kind
        super().__init__(f"no hoisting policy for declaration kind {kind!r}")
