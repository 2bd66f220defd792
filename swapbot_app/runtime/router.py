"""
Event router.

The single path from runtime output into session state: prices and
trade signals become series samples, indicator batches fan out to the
overlay channels, and the latest status, performance and uptime are kept
for read-only consumers. Selected events are forwarded as operator
notices.
"""

from typing import Optional

import structlog

from ..data.models import BUY_SIGNAL, PRICE, SELL_SIGNAL, Sample
from ..data.series_store import SeriesStore
from ..errors import SampleOrderError, UnknownChannelError
from ..modules.contract import Signal
from ..modules.host import ModuleHost
from ..modules.models import ModuleHandle
from ..notify.dispatcher import NoticeDispatcher
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

logger = structlog.get_logger(__name__)

_SIGNAL_CHANNELS = {
    Signal.BUY: BUY_SIGNAL,
    Signal.SELL: SELL_SIGNAL,
}


class EventRouter:
    """Routes runtime events into the series store and notices."""

    def __init__(self, store: SeriesStore, notifier: Optional[NoticeDispatcher] = None):
        self.store = store
        self.notifier = notifier
        self.logger = logger

        self.status: Optional[str] = None
        self.performance: Optional[PerformanceSnapshot] = None
        self.uptime: Optional[str] = None
        self.last_signal: Optional[Signal] = None

    def attach(self, host: ModuleHost) -> None:
        """Register overlay channels of every module the host activates."""
        host.add_activation_listener(self.register_module_channels)

    def register_module_channels(self, handle: ModuleHandle) -> list[str]:
        added = [name for name in handle.channels if self.store.register_channel(name)]
        if added:
            self.logger.info(
                "Registered module overlay channels",
                generation=handle.generation,
                channels=added,
            )
        return added

    def __call__(self, event: RuntimeEvent) -> None:
        self.route(event)

    def route(self, event: RuntimeEvent) -> None:
        try:
            if isinstance(event, PriceTick):
                self.store.append(PRICE, Sample(event.timestamp, event.price))
            elif isinstance(event, TradeSignal):
                self._route_signal(event)
            elif isinstance(event, IndicatorBatch):
                self.store.append_many(event.values, event.timestamp)
            elif isinstance(event, StatusChanged):
                self.status = event.status
                self._notify("info", f"Status: {event.status}", "runtime", status=event.status)
            elif isinstance(event, PerformanceSnapshot):
                self.performance = event
            elif isinstance(event, UptimeTick):
                self.uptime = event.text
            elif isinstance(event, PriceAlert):
                self._notify(
                    "warning",
                    f"PRICE ALERT: {event.symbol} moved {event.direction} by {event.change_pct:.2f}% "
                    f"(from ${event.from_price:.2f} to ${event.to_price:.2f})",
                    "alert",
                    symbol=event.symbol,
                    direction=event.direction,
                    change_pct=round(event.change_pct, 4),
                )
            else:
                self.logger.warning("Unroutable runtime event", event_type=type(event).__name__)
        except (SampleOrderError, UnknownChannelError) as e:
            self.logger.warning(
                "Dropped runtime event",
                event_type=type(event).__name__,
                error=str(e),
            )

    def _route_signal(self, event: TradeSignal) -> None:
        channel = _SIGNAL_CHANNELS.get(event.signal)
        if channel is None:
            return

        self.last_signal = event.signal
        self.store.append(channel, Sample(event.timestamp, event.price))
        self._notify(
            "info",
            f"{event.signal.value} signal triggered at ${event.price:.2f}",
            "signal",
            signal=event.signal.value,
            price=event.price,
        )

    def _notify(self, level: str, message: str, category: str, **context) -> None:
        if self.notifier is not None:
            getattr(self.notifier, level)(message, category=category, **context)
