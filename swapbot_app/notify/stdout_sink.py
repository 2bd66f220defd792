"""Standard output notice sink."""

import sys

import orjson

from .base import BaseNoticeSink, NoticeSinkError
from .models import OperatorNotice


class StdoutNoticeSink(BaseNoticeSink):
    """Prints notices to stdout as JSON lines or a human-readable line."""

    def __init__(self, name: str = "stdout", format: str = "pretty"):
        super().__init__(name)
        if format not in ("json", "pretty"):
            raise NoticeSinkError(f"Unsupported format: {format}")
        self.format = format

    def emit(self, notice: OperatorNotice) -> None:
        print(self._format_notice(notice), file=sys.stdout, flush=True)

    def _format_notice(self, notice: OperatorNotice) -> str:
        if self.format == "pretty":
            output = f"[{notice.timestamp.isoformat()}] {notice.level.value.upper()}: {notice.message}"
            if notice.context:
                details = ", ".join(f"{key}={value}" for key, value in notice.context.items())
                output += f" ({details})"
            return output
        return orjson.dumps(notice.to_dict(), default=str).decode()
