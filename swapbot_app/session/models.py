"""Session state and intent result models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SessionState(Enum):
    """Process-wide session state; drives which operator intents are accepted."""
    IDLE = "idle"
    RUNNING = "running"
    SWAPPING_MODULE = "swapping_module"


@dataclass(frozen=True)
class ActionResult:
    """Outcome of an operator intent. Errors are carried, never raised."""
    ok: bool
    state: SessionState
    error: Optional[Exception] = None
    detail: Optional[str] = None

    @classmethod
    def success(cls, state: SessionState, detail: Optional[str] = None) -> "ActionResult":
        return cls(ok=True, state=state, detail=detail)

    @classmethod
    def failure(cls, state: SessionState, error: Exception, detail: Optional[str] = None) -> "ActionResult":
        return cls(ok=False, state=state, error=error, detail=detail or str(error))

    @property
    def category(self) -> Optional[str]:
        """Coarse error category ("validation", "compile", "load", ...)."""
        if self.error is None:
            return None
        return getattr(self.error, "category", "system")
