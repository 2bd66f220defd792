"""
Pipeline and runtime error classifications.

Compile and load failures carry the diagnostic text verbatim so the
operator can tell "your code is wrong" apart from "the system could not
load it".
"""

from typing import Optional

from .operator import SessionError


class CompileFailedError(SessionError):
    """The compiler service rejected the submitted source."""

    category = "compile"

    def __init__(self, message: str, diagnostic: str = "",
                 request_id: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.diagnostic = diagnostic
        self.request_id = request_id


class LoadFailedError(SessionError):
    """A compiled artifact could not be instantiated as a module."""

    category = "load"

    def __init__(self, message: str, diagnostic: str = "",
                 artifact_ref: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.diagnostic = diagnostic
        self.artifact_ref = artifact_ref


class RuntimeUnavailableError(SessionError):
    """The bot runtime is missing or not ready to start."""

    category = "runtime"

    def __init__(self, message: str, reason: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.reason = reason


class StaleResultError(SessionError):
    """A compile result arrived after its request was invalidated."""

    category = "concurrency"

    def __init__(self, message: str, request_id: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.request_id = request_id
