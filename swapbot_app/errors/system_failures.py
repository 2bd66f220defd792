"""
System failure error classifications for unrecoverable errors.

These exceptions represent programming or wiring mistakes rather than
operator input problems, and are not expected during normal operation.
"""

from typing import Any, Optional


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class StateTransitionError(SystemFailureError):
    """Invalid lifecycle transition requested."""

    def __init__(self, message: str, current_state: Optional[str] = None,
                 attempted_transition: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_state = current_state
        self.attempted_transition = attempted_transition


class UnknownChannelError(KeyError):
    """Append or read against a channel that is not registered."""

    def __init__(self, channel: str):
        super().__init__(channel)
        self.channel = channel


class SampleOrderError(ValueError):
    """Sample timestamp is older than the channel's newest sample."""

    def __init__(self, message: str, channel: Optional[str] = None,
                 timestamp: Optional[float] = None, newest: Optional[float] = None):
        super().__init__(message)
        self.channel = channel
        self.timestamp = timestamp
        self.newest = newest
