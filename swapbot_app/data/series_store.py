"""
Bounded, time-ordered series store.

Holds the primary price channel plus auxiliary overlay channels (trade
signals and indicators). The primary channel is capped at ``max_samples``
and every append to it prunes auxiliary samples older than the oldest
retained price, so memory stays bounded however long a session runs.

Appends come from the runtime's tick thread while readers (rendering,
tests, the operator API) take snapshots from other threads; both go
through one short critical section and readers always get tuple copies.
"""

import threading
from collections import deque
from collections.abc import Iterable, Mapping
from typing import Optional

import structlog

from ..config.defaults import SeriesParams
from ..errors import SampleOrderError, UnknownChannelError
from .models import BUY_SIGNAL, PRICE, SELL_SIGNAL, Sample

logger = structlog.get_logger(__name__)


class SeriesStore:
    """Channel name -> ordered samples, with primary-driven retention."""

    def __init__(
        self,
        max_samples: Optional[int] = None,
        channels: Optional[Iterable[str]] = None,
        params: Optional[SeriesParams] = None,
    ) -> None:
        params = params or SeriesParams()
        self.max_samples = max_samples if max_samples is not None else params.max_samples
        if self.max_samples < 1:
            raise ValueError(f"max_samples must be positive, got {self.max_samples}")

        self.logger = logger
        self._lock = threading.Lock()
        self._channels: dict[str, deque] = {PRICE: deque()}

        for name in (BUY_SIGNAL, SELL_SIGNAL, *params.overlay_channels, *(channels or ())):
            self._channels.setdefault(name, deque())

    @property
    def primary(self) -> str:
        """Name of the primary channel."""
        return PRICE

    def register_channel(self, name: str) -> bool:
        """Register an auxiliary channel. Returns False if it already existed."""
        with self._lock:
            if name in self._channels:
                return False
            self._channels[name] = deque()

        self.logger.debug("Registered series channel", channel=name)
        return True

    def channel_names(self) -> tuple[str, ...]:
        """Registered channel names, primary first."""
        with self._lock:
            return tuple(self._channels)

    def append(self, channel: str, sample: Sample) -> bool:
        """
        Append a sample to a channel.

        For the primary channel the oldest sample is evicted first when at
        capacity, then every auxiliary channel is pruned to the new oldest
        primary timestamp. Auxiliary samples older than the oldest retained
        price are dropped and False is returned.
        """
        with self._lock:
            buffer = self._channels.get(channel)
            if buffer is None:
                raise UnknownChannelError(channel)
            return self._append_locked(channel, buffer, sample)

    def append_many(self, values: Mapping[str, float], timestamp: float) -> list[str]:
        """
        Fan out one timestamp to several auxiliary channels.

        Unregistered channel names are skipped silently; which overlays
        exist depends on the active module. Returns the channels written.

        The batch is all or nothing: if any target channel already holds a
        newer sample, SampleOrderError is raised and no channel is written.
        """
        written = []
        with self._lock:
            targets = []
            for name, value in values.items():
                buffer = self._channels.get(name)
                if buffer is not None:
                    targets.append((name, buffer, Sample(timestamp, float(value))))
            for name, buffer, sample in targets:
                self._check_order(name, buffer, sample)
            for name, buffer, sample in targets:
                if self._append_locked(name, buffer, sample):
                    written.append(name)
        return written

    def reset(self) -> None:
        """Clear every channel; registered channel names are kept."""
        with self._lock:
            for buffer in self._channels.values():
                buffer.clear()

        self.logger.debug("Series store reset")

    def snapshot(self, channel: str) -> tuple[Sample, ...]:
        """Immutable copy of a channel's current contents."""
        with self._lock:
            buffer = self._channels.get(channel)
            if buffer is None:
                raise UnknownChannelError(channel)
            return tuple(buffer)

    def snapshot_all(self) -> dict[str, tuple[Sample, ...]]:
        """Consistent copy of every channel taken under one lock."""
        with self._lock:
            return {name: tuple(buffer) for name, buffer in self._channels.items()}

    def latest(self, channel: str) -> Optional[Sample]:
        """Newest sample of a channel, None if empty."""
        with self._lock:
            buffer = self._channels.get(channel)
            if buffer is None:
                raise UnknownChannelError(channel)
            return buffer[-1] if buffer else None

    def oldest_primary_timestamp(self) -> Optional[float]:
        """Timestamp of the oldest retained price, None if empty."""
        with self._lock:
            prices = self._channels[PRICE]
            return prices[0].timestamp if prices else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._channels[PRICE])

    @staticmethod
    def _check_order(channel: str, buffer: deque, sample: Sample) -> None:
        if buffer and sample.timestamp < buffer[-1].timestamp:
            raise SampleOrderError(
                f"Sample at {sample.timestamp} is older than newest {buffer[-1].timestamp} in {channel}",
                channel=channel,
                timestamp=sample.timestamp,
                newest=buffer[-1].timestamp,
            )

    def _append_locked(self, channel: str, buffer: deque, sample: Sample) -> bool:
        self._check_order(channel, buffer, sample)

        prices = self._channels[PRICE]

        if channel != PRICE:
            if prices and sample.timestamp < prices[0].timestamp:
                return False
            buffer.append(sample)
            return True

        if len(prices) >= self.max_samples:
            prices.popleft()
        prices.append(sample)

        floor = prices[0].timestamp
        for name, aux in self._channels.items():
            if name == PRICE:
                continue
            while aux and aux[0].timestamp < floor:
                aux.popleft()
        return True
