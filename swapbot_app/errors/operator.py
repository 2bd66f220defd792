"""
Operator-facing error classifications for session intents.

These exceptions describe input or timing problems that the operator can
correct: invalid configuration, blank mod source, or an intent issued while
another mutating operation is already in flight.
"""

from typing import Any, Optional


class SessionError(Exception):
    """Base class for recoverable session errors."""

    category = "session"

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class InvalidConfigError(SessionError):
    """Bot configuration failed validation."""

    category = "validation"

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []

    @property
    def fields(self) -> list[str]:
        """Names of the offending fields."""
        return [error.field for error in self.errors]


class BusyError(SessionError):
    """A mutating operation is already in flight."""

    category = "concurrency"

    def __init__(self, message: str, operation: Optional[str] = None,
                 current_state: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.current_state = current_state


class EmptySourceError(SessionError):
    """Submitted mod source is blank or whitespace only."""

    category = "validation"
