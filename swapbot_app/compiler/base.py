"""Compiler service contract."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CompilerResponse:
    """Outcome of one compile or validate call."""
    success: bool
    artifact_ref: Optional[str] = None     # Only for successful compiles
    diagnostic: Optional[str] = None       # Compiler output, verbatim

    @classmethod
    def compiled(cls, artifact_ref: str) -> "CompilerResponse":
        """Successful compile with a loadable artifact."""
        return cls(success=True, artifact_ref=artifact_ref)

    @classmethod
    def validated(cls) -> "CompilerResponse":
        """Successful validate-only call."""
        return cls(success=True)

    @classmethod
    def failed(cls, diagnostic: str) -> "CompilerResponse":
        """Rejected source or transport failure."""
        return cls(success=False, diagnostic=diagnostic)


class CompilerService(ABC):
    """Remote or local service turning user source into artifacts."""

    @abstractmethod
    def compile(self, source: str) -> CompilerResponse:
        """Compile source into a loadable artifact."""

    @abstractmethod
    def validate(self, source: str) -> CompilerResponse:
        """Check source without producing an artifact."""
