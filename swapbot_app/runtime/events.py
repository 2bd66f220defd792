"""
Typed events emitted by a bot runtime.

Timestamps are monotonic seconds, the same clock the series store orders
samples by; ``wall_time`` is kept alongside for display.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Union

from ..modules.contract import Signal


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StatusChanged:
    """Free-text runtime status label."""
    status: str


@dataclass(frozen=True)
class PriceTick:
    """New price from the feed."""
    price: float
    timestamp: float
    wall_time: datetime = field(default_factory=_utc_now)


@dataclass(frozen=True)
class TradeSignal:
    """Decision taken on a tick."""
    signal: Signal
    price: float
    timestamp: float


@dataclass(frozen=True)
class IndicatorBatch:
    """Named indicator values sampled at one instant."""
    values: dict[str, float]
    timestamp: float


@dataclass(frozen=True)
class PerformanceSnapshot:
    """Paper trading statistics."""
    trade_count: int
    win_rate: float            # Percent of closed trades with positive P/L
    current_price: float
    profit_loss: float


@dataclass(frozen=True)
class UptimeTick:
    """Elapsed time since the runtime started."""
    elapsed: timedelta

    @property
    def text(self) -> str:
        return str(timedelta(seconds=int(self.elapsed.total_seconds())))


@dataclass(frozen=True)
class PriceAlert:
    """Price moved past the alert threshold since the last alert level."""
    symbol: str
    direction: str             # "UP" or "DOWN"
    change_pct: float
    from_price: float
    to_price: float


RuntimeEvent = Union[
    StatusChanged,
    PriceTick,
    TradeSignal,
    IndicatorBatch,
    PerformanceSnapshot,
    UptimeTick,
    PriceAlert,
]
