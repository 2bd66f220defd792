"""
Computation module contract.

A module is the replaceable decision logic of the bot. The host only ever
talks to it through this interface: evaluate the current price window and
return a decision, and release resources on close. Modules never receive
the session, the store or the host, so they cannot mutate session state.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional


class Signal(str, Enum):
    """Trade decision for one tick."""
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"

    @classmethod
    def coerce(cls, value: object) -> "Signal":
        """Accept a Signal, its name, or legacy integers (0 hold, 1 buy, 2 sell)."""
        if isinstance(value, Signal):
            return value
        if isinstance(value, str):
            return cls(value.upper())
        if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 2:
            return (cls.HOLD, cls.BUY, cls.SELL)[value]
        raise ValueError(f"Cannot interpret {value!r} as a trade signal")


@dataclass(frozen=True)
class Decision:
    """Module output for one tick."""
    signal: Signal = Signal.HOLD
    indicators: Mapping[str, float] = field(default_factory=dict)


class ComputationModule(ABC):
    """Interface every loaded module implements."""

    #: Overlay channels the module emits through Decision.indicators
    channels: tuple[str, ...] = ()

    @abstractmethod
    def evaluate(self, prices: Sequence[float], params: Mapping[str, float]) -> Decision:
        """Decide on the newest price given the recent window."""

    def close(self) -> None:
        """Release resources held by the module."""


class FunctionModule(ComputationModule):
    """Adapts a plain strategy function into a module."""

    def __init__(
        self,
        strategy: Callable[[Sequence[float], Mapping[str, float]], object],
        indicators: Optional[Callable[[Sequence[float], Mapping[str, float]], Mapping[str, float]]] = None,
        channels: Sequence[str] = (),
    ) -> None:
        if not callable(strategy):
            raise TypeError("strategy must be callable")
        self.strategy = strategy
        self.indicators = indicators
        self.channels = tuple(channels)

    def evaluate(self, prices: Sequence[float], params: Mapping[str, float]) -> Decision:
        signal = Signal.coerce(self.strategy(prices, params))
        values = dict(self.indicators(prices, params)) if self.indicators else {}
        return Decision(signal=signal, indicators=values)
