from __future__ import annotations

from typing import Any, Literal

ErrorKind = Literal[
    "MissingParameter",
    "UnrecognizedParameter",
    "InvalidValueSyntax",
    "OutOfRange",
    "QuantityExceedsMax",
    "InvalidExpiry",
    "NotFound",
    "DuplicateName",
    "InsufficientStock",
]


class CommandError(ValueError):
    kind: ErrorKind = "InvalidValueSyntax"

    def __init__(self, message: str, *, field: str = "", value: str | None = None, syntax: str = ""):
        super().__init__(message)
        self.field = field
        self.value = value
        self.syntax = syntax

    def with_syntax(self, syntax: str) -> "CommandError":
        if not self.syntax:
            self.syntax = syntax
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.kind,
            "field": self.field,
            "value": self.value,
            "syntax": self.syntax,
            "detail": str(self),
        }


class MissingParameterError(CommandError):
    kind = "MissingParameter"


class UnrecognizedParameterError(CommandError):
    kind = "UnrecognizedParameter"


class InvalidValueSyntaxError(CommandError):
    kind = "InvalidValueSyntax"


class OutOfRangeError(CommandError):
    kind = "OutOfRange"


class QuantityExceedsMaxError(CommandError):
    kind = "QuantityExceedsMax"


class InvalidExpiryError(CommandError):
    kind = "InvalidExpiry"


class NotFoundError(CommandError):
    kind = "NotFound"


class DuplicateNameError(CommandError):
    kind = "DuplicateName"


class InsufficientStockError(CommandError):
    kind = "InsufficientStock"


class InternalInvariantError(AssertionError):
    """A value passed validation but could not be parsed afterwards."""
