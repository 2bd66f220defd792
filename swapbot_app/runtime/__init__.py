"""Bot runtime contract, events, routing and the simulation runtime."""

from .base import BotRuntime, EventSink
from .events import (
    IndicatorBatch,
    PerformanceSnapshot,
    PriceAlert,
    PriceTick,
    RuntimeEvent,
    StatusChanged,
    TradeSignal,
    UptimeTick,
)
from .router import EventRouter
from .simulation import PaperAccount, PriceFeed, SimulationRuntime

__all__ = [
    "BotRuntime",
    "EventSink",
    "EventRouter",
    "IndicatorBatch",
    "PaperAccount",
    "PerformanceSnapshot",
    "PriceAlert",
    "PriceFeed",
    "PriceTick",
    "RuntimeEvent",
    "SimulationRuntime",
    "StatusChanged",
    "TradeSignal",
    "UptimeTick",
]
