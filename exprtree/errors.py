"""Structured error objects for the expression compiler.

Every failure is a typed exception carrying a machine-readable payload:
an ErrorKind, a message, an optional source location and a details dict.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    SYNTAX_ERROR = "syntax_error"
    UNDEFINED_VARIABLE = "undefined_variable"
    UNDEFINED_FUNCTION = "undefined_function"
    ARITY_MISMATCH = "arity_mismatch"
    UNINITIALIZED_VARIABLE = "uninitialized_variable"
    UNINITIALIZED_FUNCTION = "uninitialized_function"
    UNBOUND_VARIABLE = "unbound_variable"
    UNBOUND_FUNCTION = "unbound_function"
    DIVISION_BY_ZERO = "division_by_zero"


@dataclass(frozen=True)
class SourceLocation:
    position: int
    source: str = "<expr>"

    def __str__(self) -> str:
        return f"{self.source}:{self.position}"


def signature(name: str, arity: int) -> str:
    """Render a function key the way error messages name it: ``f/2``."""
    return f"{name}/{arity}"


class ExpressionError(Exception):
    """Base class for every error raised by exprtree."""

    kind: ErrorKind

    def __init__(self, message: str, location: Optional[SourceLocation] = None,
                 details: Optional[dict[str, Any]] = None):
        self.message = message
        self.location = location
        self.details = details or {}
        super().__init__(self._format())

    @property
    def position(self) -> Optional[int]:
        return self.location.position if self.location else None

    def _format(self) -> str:
        if self.location:
            return f"{self.message} ({self.location.position})"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.location:
            d["location"] = {
                "source": self.location.source,
                "position": self.location.position,
            }
        if self.details:
            d["details"] = self.details
        return d

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


# ---------------------------------------------------------------------------
# Compile-time
# ---------------------------------------------------------------------------

class CompileError(ExpressionError):
    """Raised by the parser; always position-tagged."""

    kind = ErrorKind.SYNTAX_ERROR


class ExpressionSyntaxError(CompileError):
    pass


class EndOfInput(ExpressionSyntaxError):
    def __init__(self, location: Optional[SourceLocation] = None):
        super().__init__("unexpected end of expression", location)


# ---------------------------------------------------------------------------
# Binding
# ---------------------------------------------------------------------------

class BindingError(ExpressionError):
    pass


class UndefinedVariable(BindingError):
    kind = ErrorKind.UNDEFINED_VARIABLE

    def __init__(self, name: str):
        super().__init__(f"undefined variable ({name})", details={"name": name})


class UndefinedFunction(BindingError):
    kind = ErrorKind.UNDEFINED_FUNCTION

    def __init__(self, name: str, arity: int):
        super().__init__(
            f"undefined function ({signature(name, arity)})",
            details={"name": name, "arity": arity},
        )


class ArityMismatch(BindingError):
    kind = ErrorKind.ARITY_MISMATCH

    def __init__(self, name: str, arity: int, callback: Any):
        super().__init__(
            f"invalid function type for {signature(name, arity)} ({callback!r})",
            details={"name": name, "arity": arity},
        )


# ---------------------------------------------------------------------------
# Validation / evaluation
# ---------------------------------------------------------------------------

class EvaluationError(ExpressionError):
    pass


class UninitializedVariable(EvaluationError):
    kind = ErrorKind.UNINITIALIZED_VARIABLE

    def __init__(self, name: str):
        super().__init__(f"uninitialized variable ({name})", details={"name": name})


class UninitializedFunction(EvaluationError):
    kind = ErrorKind.UNINITIALIZED_FUNCTION

    def __init__(self, name: str, arity: int):
        super().__init__(
            f"uninitialized function ({signature(name, arity)})",
            details={"name": name, "arity": arity},
        )


class UnboundVariable(EvaluationError):
    """Evaluated a variable that was never bound.

    Only reachable when a node is evaluated without going through
    ``Expression.validate()`` first.
    """

    kind = ErrorKind.UNBOUND_VARIABLE

    def __init__(self, name: str):
        super().__init__(f"unbound variable ({name})", details={"name": name})


class UnboundFunction(EvaluationError):
    kind = ErrorKind.UNBOUND_FUNCTION

    def __init__(self, name: str, arity: int):
        super().__init__(
            f"unbound function ({signature(name, arity)})",
            details={"name": name, "arity": arity},
        )


class DivisionByZero(EvaluationError):
    kind = ErrorKind.DIVISION_BY_ZERO

    def __init__(self) -> None:
        super().__init__("division by zero")
