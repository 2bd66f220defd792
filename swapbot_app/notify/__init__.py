"""Operator notices: models, sinks and the dispatcher."""

from .base import BaseNoticeSink, NoticeSinkError
from .dispatcher import NoticeDispatcher
from .file_sink import FileNoticeSink
from .memory_sink import MemoryNoticeSink
from .models import NoticeLevel, OperatorNotice
from .stdout_sink import StdoutNoticeSink

__all__ = [
    "BaseNoticeSink",
    "NoticeSinkError",
    "NoticeDispatcher",
    "FileNoticeSink",
    "MemoryNoticeSink",
    "NoticeLevel",
    "OperatorNotice",
    "StdoutNoticeSink",
]
