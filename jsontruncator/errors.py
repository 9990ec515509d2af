"""Exception types raised by jsontruncator."""

from __future__ import annotations

from typing import Any


class TruncationError(Exception):
    """Base class for all jsontruncator failures."""


class ConfigurationError(TruncationError, ValueError):
    """Raised before any encoding attempt when a configuration is rejected."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"configuration rejected: {field}: {reason}")


class EncodingError(TruncationError):
    """Raised when a value cannot be represented as JSON text.

    Shrinking only addresses size, so this is never retried.
    """

    def __init__(self, message: str, cause: Any = None) -> None:
        self.cause = cause if cause is not None else message
        super().__init__(message)


class DepthExceededError(TruncationError):
    """Raised when a value tree is nested deeper than the hard recursion ceiling."""

    def __init__(self, depth: int, limit: int) -> None:
        self.depth = depth
        self.limit = limit
        super().__init__(f"value nesting depth {depth} exceeds hard limit {limit}")
