"""
Notice dispatcher.

Every operator-facing outcome goes through ``publish``: the notice is
logged with structlog and fanned out to each registered sink. A failing
sink never prevents delivery to the others.
"""

from typing import Any, Iterable, Optional

import structlog

from .base import BaseNoticeSink
from .models import NoticeLevel, OperatorNotice

logger = structlog.get_logger(__name__)

_LOG_METHODS = {
    NoticeLevel.INFO: "info",
    NoticeLevel.SUCCESS: "info",
    NoticeLevel.WARNING: "warning",
    NoticeLevel.ERROR: "error",
}


class NoticeDispatcher:
    """Fans operator notices out to sinks."""

    def __init__(self, sinks: Optional[Iterable[BaseNoticeSink]] = None):
        self.sinks: list[BaseNoticeSink] = list(sinks or [])
        self.logger = logger

    def add_sink(self, sink: BaseNoticeSink) -> None:
        self.sinks.append(sink)

    def publish(
        self,
        level: NoticeLevel,
        message: str,
        category: str = "session",
        **context: Any,
    ) -> OperatorNotice:
        """Build a notice, log it and deliver it to every sink."""
        notice = OperatorNotice(level=level, message=message, category=category, context=context)

        log_method = getattr(self.logger, _LOG_METHODS[level])
        log_method(message, notice_level=level.value, category=category, **context)

        for sink in list(self.sinks):
            sink.deliver(notice)
        return notice

    def info(self, message: str, category: str = "session", **context: Any) -> OperatorNotice:
        return self.publish(NoticeLevel.INFO, message, category, **context)

    def success(self, message: str, category: str = "session", **context: Any) -> OperatorNotice:
        return self.publish(NoticeLevel.SUCCESS, message, category, **context)

    def warning(self, message: str, category: str = "session", **context: Any) -> OperatorNotice:
        return self.publish(NoticeLevel.WARNING, message, category, **context)

    def error(self, message: str, category: str = "session", **context: Any) -> OperatorNotice:
        return self.publish(NoticeLevel.ERROR, message, category, **context)

    def get_stats(self) -> list[dict[str, Any]]:
        return [sink.get_stats() for sink in self.sinks]
