"""
Error classification for the session host.

Operator errors and pipeline errors are recoverable and are surfaced to the
operator as notices; system failures indicate wiring mistakes.
"""

from .operator import (
    SessionError,
    InvalidConfigError,
    BusyError,
    EmptySourceError,
)
from .pipeline import (
    CompileFailedError,
    LoadFailedError,
    RuntimeUnavailableError,
    StaleResultError,
)
from .system_failures import (
    SystemFailureError,
    StateTransitionError,
    UnknownChannelError,
    SampleOrderError,
)

__all__ = [
    # Operator errors
    "SessionError",
    "InvalidConfigError",
    "BusyError",
    "EmptySourceError",
    # Pipeline errors
    "CompileFailedError",
    "LoadFailedError",
    "RuntimeUnavailableError",
    "StaleResultError",
    # System failures
    "SystemFailureError",
    "StateTransitionError",
    "UnknownChannelError",
    "SampleOrderError",
]
