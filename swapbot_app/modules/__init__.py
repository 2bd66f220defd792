"""Computation module contract, artifact loading and the module host."""

from .contract import ComputationModule, Decision, FunctionModule, Signal
from .host import ModuleHost
from .loader import ArtifactLoader
from .models import ModuleHandle, ModuleState

__all__ = [
    "ArtifactLoader",
    "ComputationModule",
    "Decision",
    "FunctionModule",
    "ModuleHandle",
    "ModuleHost",
    "ModuleState",
    "Signal",
]
