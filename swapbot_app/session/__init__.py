"""Session orchestration: state machine over operator intents."""

from .controller import SessionController
from .models import ActionResult, SessionState

__all__ = ["ActionResult", "SessionController", "SessionState"]
