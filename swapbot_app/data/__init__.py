"""Time-series data models and the bounded series store."""

from .models import BUY_SIGNAL, PRICE, SELL_SIGNAL, Sample
from .series_store import SeriesStore

__all__ = ["BUY_SIGNAL", "PRICE", "SELL_SIGNAL", "Sample", "SeriesStore"]
