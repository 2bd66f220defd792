"""
Simulation runtime.

Streams a synthetic random-walk price at the configured tick interval,
asks the host's active module for a decision on every tick and keeps a
paper account of the resulting trades. The module is looked up fresh on
each tick, so a hot-swap takes effect on the next one.
"""

import math
import random
import threading
import time
from collections import deque
from datetime import timedelta
from typing import Callable, Optional

import structlog

from ..config.bot_config import BotConfig
from ..config.defaults import RuntimeParams
from ..errors import RuntimeUnavailableError
from ..modules.contract import Decision, Signal
from ..modules.host import ModuleHost
from .base import BotRuntime, EventSink
from .events import (
    IndicatorBatch,
    PerformanceSnapshot,
    PriceAlert,
    PriceTick,
    StatusChanged,
    TradeSignal,
    UptimeTick,
)

logger = structlog.get_logger(__name__)

SIMULATION_CONNECTOR = "simulation"

# Share of equity committed per position
RISK_ALLOCATION = {
    "conservative": 0.25,
    "moderate": 0.5,
    "aggressive": 1.0,
}


class PriceFeed:
    """Random walk with a slow sinusoidal trend, clamped to [10, 1000]."""

    MIN_PRICE = 10.0
    MAX_PRICE = 1000.0

    def __init__(self, rng: Optional[random.Random] = None, clock: Callable[[], float] = time.time):
        self.rng = rng or random.Random()
        self.clock = clock
        self.last_price = 0.0
        self.volatility = 0.0

    def connect(self) -> None:
        self.last_price = 100.0 + self.rng.random() * 50.0
        self.volatility = 0.02 + self.rng.random() * 0.03

    def next_price(self) -> float:
        trend = math.sin(self.clock() / 100.0) * 0.001
        noise = (self.rng.random() - 0.5) * self.volatility
        self.last_price *= 1 + trend + noise
        self.last_price = min(max(self.last_price, self.MIN_PRICE), self.MAX_PRICE)
        return self.last_price


class PaperAccount:
    """
    Long-only paper position.

    BUY opens a position with a risk-scaled share of equity, SELL closes
    it and realizes the P/L. A trade is counted whenever the position
    direction changes; a closed trade with positive P/L is a win.
    """

    def __init__(self, initial_equity: float, allocation: float = 0.5):
        self.initial_equity = initial_equity
        self.equity = initial_equity
        self.allocation = allocation
        self.quantity = 0.0
        self.entry_price = 0.0
        self.last_position: Optional[Signal] = None
        self.trade_count = 0
        self.closed_count = 0
        self.win_count = 0

    def apply(self, signal: Signal, price: float) -> Optional[float]:
        """Book a signal. Returns realized P/L when a position was closed."""
        if signal == Signal.HOLD or signal == self.last_position:
            return None

        self.trade_count += 1
        self.last_position = signal
        realized = None

        if signal == Signal.BUY and self.quantity == 0.0:
            self.quantity = self.equity * self.allocation / price
            self.entry_price = price
        elif signal == Signal.SELL and self.quantity > 0.0:
            realized = (price - self.entry_price) * self.quantity
            self.equity += realized
            self.closed_count += 1
            if realized > 0:
                self.win_count += 1
            self.quantity = 0.0
            self.entry_price = 0.0

        return realized

    @property
    def win_rate(self) -> float:
        if self.closed_count == 0:
            return 0.0
        return self.win_count / self.closed_count * 100

    @property
    def profit_loss(self) -> float:
        return self.equity - self.initial_equity


class SimulationRuntime(BotRuntime):
    """Paper-trading runtime backed by a synthetic price feed."""

    def __init__(
        self,
        host: ModuleHost,
        params: Optional[RuntimeParams] = None,
        sink: Optional[EventSink] = None,
        feed: Optional[PriceFeed] = None,
        clock: Callable[[], float] = time.monotonic,
        background: bool = True,
    ):
        super().__init__(sink)
        self.host = host
        self.params = params or RuntimeParams()
        self.feed = feed or PriceFeed()
        self.clock = clock
        self.background = background
        self.logger = logger

        self.config: Optional[BotConfig] = None
        self.account = PaperAccount(self.params.initial_equity)
        self.prices: deque[float] = deque(maxlen=self.params.price_window)
        self.last_price_alert = 0.0

        self._running = False
        self._closed = False
        self._started_at = 0.0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._state_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._running

    def is_ready(self) -> bool:
        return not self._closed

    def start(self, config: BotConfig) -> None:
        if self._closed:
            raise RuntimeUnavailableError("Simulation runtime has been closed", reason="closed")
        if config.connector_id != SIMULATION_CONNECTOR:
            raise RuntimeUnavailableError(
                f"Connector '{config.connector_id}' is not available",
                reason="unsupported_connector",
            )

        with self._state_lock:
            if self._running:
                raise RuntimeUnavailableError("Simulation runtime is already running", reason="running")

            self.config = config
            self.feed.connect()
            self.prices.clear()
            self.account = PaperAccount(
                self.params.initial_equity,
                RISK_ALLOCATION.get(config.risk_level, RISK_ALLOCATION["moderate"]),
            )
            self.last_price_alert = 0.0
            self._started_at = self.clock()
            self._stop_event.clear()
            self._running = True

        self.logger.info(
            "Simulation runtime started",
            symbol=config.symbol,
            tick_interval_seconds=config.tick_interval_seconds,
            paper_trading=config.paper_trading,
        )
        self.emit(StatusChanged(f"RUNNING - {config.symbol}"))
        self.emit(self._performance(0.0))

        if self.background:
            self._thread = threading.Thread(
                target=self._loop,
                args=(config.tick_interval_seconds,),
                name="simulation-runtime",
                daemon=True,
            )
            self._thread.start()

    def stop(self) -> None:
        with self._state_lock:
            if not self._running:
                return
            self._running = False
            self._stop_event.set()
            thread = self._thread
            self._thread = None

        if thread is not None and thread is not threading.current_thread():
            thread.join()

        self.logger.info("Simulation runtime stopped")
        self.emit(StatusChanged("STOPPED"))

    def close(self) -> None:
        """Stop and refuse further starts."""
        self.stop()
        self._closed = True

    def run_tick(self) -> Decision:
        """Advance the feed one step and act on the active module's decision."""
        if self.config is None:
            raise RuntimeUnavailableError("Simulation runtime was never started", reason="not_started")

        price = self.feed.next_price()
        timestamp = self.clock()
        self.prices.append(price)

        self.emit(PriceTick(price=price, timestamp=timestamp))
        self.emit(UptimeTick(timedelta(seconds=timestamp - self._started_at)))
        self.logger.debug("New price", symbol=self.config.symbol, price=round(price, 2))

        decision = self._evaluate()
        if decision.signal != Signal.HOLD:
            realized = self.account.apply(decision.signal, price)
            self.logger.info(
                "Paper trade placed",
                signal=decision.signal.value,
                symbol=self.config.symbol,
                price=round(price, 2),
                realized_pnl=realized,
            )
            self.emit(TradeSignal(signal=decision.signal, price=price, timestamp=timestamp))

        if decision.indicators:
            self.emit(IndicatorBatch(values=dict(decision.indicators), timestamp=timestamp))

        self.emit(self._performance(price))
        self._check_price_alert(price)
        return decision

    def _evaluate(self) -> Decision:
        module = self.host.active_module()
        if module is None:
            return Decision()

        try:
            decision = module.evaluate(tuple(self.prices), dict(self.config.strategy_params))
            if not isinstance(decision, Decision):
                decision = Decision(signal=Signal.coerce(decision))
            return decision
        except Exception as e:
            self.logger.error(
                "Module evaluation failed, holding",
                error=str(e),
                error_type=type(e).__name__,
            )
            return Decision()

    def _check_price_alert(self, price: float) -> None:
        if self.last_price_alert == 0:
            self.last_price_alert = price
            return

        change = abs(price - self.last_price_alert) / self.last_price_alert * 100
        if change >= self.params.price_alert_pct:
            self.emit(PriceAlert(
                symbol=self.config.symbol,
                direction="UP" if price > self.last_price_alert else "DOWN",
                change_pct=change,
                from_price=self.last_price_alert,
                to_price=price,
            ))
            self.last_price_alert = price

    def _performance(self, price: float) -> PerformanceSnapshot:
        return PerformanceSnapshot(
            trade_count=self.account.trade_count,
            win_rate=self.account.win_rate,
            current_price=price,
            profit_loss=self.account.profit_loss,
        )

    def _loop(self, interval: float) -> None:
        while not self._stop_event.wait(interval):
            try:
                self.run_tick()
            except Exception as e:
                self.logger.error(
                    "Simulation tick failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )
        self.logger.debug("Simulation loop exited")
