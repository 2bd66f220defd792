"""Operator notice models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class NoticeLevel(Enum):
    """Severity of an operator notice."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class OperatorNotice:
    """A single message surfaced to the operator."""
    level: NoticeLevel
    message: str
    category: str = "session"
    context: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level.value,
            "message": self.message,
            "category": self.category,
            "context": dict(self.context),
            "timestamp": self.timestamp.isoformat(),
        }
