"""Compile request models."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class RequestKind(str, Enum):
    """What the compiler is asked to do."""
    COMPILE = "compile"
    VALIDATE = "validate"


class RequestState(str, Enum):
    """Compile request lifecycle."""
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def _request_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class CompileRequest:
    """One submission to the compiler service."""
    source: str
    kind: RequestKind = RequestKind.COMPILE
    state: RequestState = RequestState.PENDING
    epoch: int = 0
    id: str = field(default_factory=_request_id)
    artifact_ref: Optional[str] = None
    diagnostic: Optional[str] = None
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.state == RequestState.PENDING

    @property
    def succeeded(self) -> bool:
        return self.state == RequestState.SUCCEEDED

    def with_success(self, artifact_ref: Optional[str] = None) -> "CompileRequest":
        """Completed copy in the Succeeded state."""
        return replace(
            self,
            state=RequestState.SUCCEEDED,
            artifact_ref=artifact_ref,
            completed_at=datetime.now(timezone.utc),
        )

    def with_failure(self, diagnostic: str) -> "CompileRequest":
        """Completed copy in the Failed state."""
        return replace(
            self,
            state=RequestState.FAILED,
            diagnostic=diagnostic,
            completed_at=datetime.now(timezone.utc),
        )

    def summary(self) -> dict:
        """Loggable summary without the source text."""
        return {
            "request_id": self.id,
            "kind": self.kind.value,
            "state": self.state.value,
            "epoch": self.epoch,
            "source_chars": len(self.source),
        }
