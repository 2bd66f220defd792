"""Base class for operator notice sinks."""

from abc import ABC, abstractmethod
from typing import Any

import structlog

from .models import OperatorNotice


class NoticeSinkError(Exception):
    """A sink could not accept a notice."""
    pass


class BaseNoticeSink(ABC):
    """Destination for operator notices."""

    def __init__(self, name: str):
        self.name = name
        self.logger = structlog.get_logger(f"notify.sink.{name}")
        self._delivery_count = 0
        self._error_count = 0

    @abstractmethod
    def emit(self, notice: OperatorNotice) -> None:
        """
        Write one notice to the destination.

        Raises:
            NoticeSinkError: the destination rejected the notice.
        """
        pass

    def deliver(self, notice: OperatorNotice) -> bool:
        """Emit a notice, counting the outcome. Returns False on failure."""
        try:
            self.emit(notice)
        except Exception as e:
            self._error_count += 1
            self.logger.warning(
                "Notice delivery failed",
                sink=self.name,
                level=notice.level.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        self._delivery_count += 1
        return True

    def get_stats(self) -> dict[str, Any]:
        """Get delivery statistics."""
        return {
            "name": self.name,
            "delivery_count": self._delivery_count,
            "error_count": self._error_count,
            "success_rate": (
                self._delivery_count / (self._delivery_count + self._error_count)
                if (self._delivery_count + self._error_count) > 0 else 0.0
            )
        }

    def reset_stats(self):
        """Reset delivery statistics."""
        self._delivery_count = 0
        self._error_count = 0
