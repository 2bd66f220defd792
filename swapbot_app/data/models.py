"""
Canonical data models for the session's time series.

Samples are immutable once appended; timestamps are monotonic-clock
seconds, so they order correctly even if the wall clock jumps.
"""

import time
from dataclasses import dataclass
from typing import Optional

# Primary channel; governs retention for every other channel
PRICE = "price"

# Trade signal overlays
BUY_SIGNAL = "buy_signal"
SELL_SIGNAL = "sell_signal"


@dataclass(frozen=True)
class Sample:
    """Single time-series point."""
    timestamp: float    # Monotonic instant in seconds
    value: float

    @classmethod
    def now(cls, value: float, timestamp: Optional[float] = None) -> "Sample":
        """Create a sample stamped with the monotonic clock."""
        return cls(
            timestamp=time.monotonic() if timestamp is None else timestamp,
            value=float(value),
        )
