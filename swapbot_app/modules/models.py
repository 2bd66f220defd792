"""
Module lifecycle models.

A ModuleHandle wraps one instantiated module together with its generation
number and lifecycle state. Handles are created by the host on load and
retired when a newer handle is activated.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from .contract import ComputationModule


class ModuleState(str, Enum):
    """Lifecycle states of a module handle and of the host."""
    UNLOADED = "unloaded"
    LOADING = "loading"
    ACTIVE = "active"
    UNLOADING = "unloading"
    LOAD_FAILED = "load_failed"


@dataclass(eq=False)
class ModuleHandle:
    """Opaque reference to one instantiated module."""
    generation: int
    artifact_ref: str
    module: Optional[ComputationModule] = None
    state: ModuleState = ModuleState.LOADING
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    retired_at: Optional[datetime] = None

    def is_active(self) -> bool:
        """True while this handle is the host's active module."""
        return self.state == ModuleState.ACTIVE

    @property
    def channels(self) -> tuple[str, ...]:
        """Overlay channels the wrapped module emits."""
        return tuple(getattr(self.module, "channels", ()) or ())

    def describe(self) -> dict:
        """Loggable summary."""
        return {
            "generation": self.generation,
            "artifact_ref": self.artifact_ref,
            "state": self.state.value,
        }
