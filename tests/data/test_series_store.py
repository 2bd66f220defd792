"""Tests for the bounded series store."""

import threading

import pytest

from swapbot_app.config.defaults import SeriesParams
from swapbot_app.data.models import BUY_SIGNAL, PRICE, SELL_SIGNAL, Sample
from swapbot_app.data.series_store import SeriesStore
from swapbot_app.errors import SampleOrderError, UnknownChannelError


class TestPrimaryRetention:
    """Test primary channel capacity and FIFO eviction."""

    def test_length_never_exceeds_capacity(self):
        store = SeriesStore(max_samples=5)

        for i in range(12):
            store.append(PRICE, Sample(float(i), 100.0 + i))
            assert len(store) <= 5
            expected = [float(t) for t in range(max(0, i - 4), i + 1)]
            assert [s.timestamp for s in store.snapshot(PRICE)] == expected

    def test_2500_appends_keep_most_recent_2000(self):
        """Capacity 2000 after 2500 appends keeps samples 501 through 2500."""
        store = SeriesStore(max_samples=2000)

        for i in range(2500):
            store.append(PRICE, Sample(float(i), float(i)))

        prices = store.snapshot(PRICE)
        assert len(prices) == 2000
        assert prices[0].timestamp == 500.0
        assert prices[-1].timestamp == 2499.0
        assert store.oldest_primary_timestamp() == 500.0

    def test_default_capacity_from_params(self):
        store = SeriesStore(params=SeriesParams(max_samples=3))
        assert store.max_samples == 3

    def test_non_positive_capacity_rejected(self):
        with pytest.raises(ValueError):
            SeriesStore(max_samples=0)


class TestAuxiliaryPrune:
    """Test pruning of auxiliary channels against the oldest price."""

    def test_no_auxiliary_sample_older_than_oldest_price(self):
        store = SeriesStore(max_samples=10)

        for i in range(40):
            ts = float(i)
            store.append(PRICE, Sample(ts, 100.0))
            if i % 3 == 0:
                store.append(BUY_SIGNAL, Sample(ts, 100.0))
            if i % 4 == 0:
                store.append_many({"sma_short": 99.0, "sma_long": 98.0}, ts)

            oldest = store.oldest_primary_timestamp()
            for name, samples in store.snapshot_all().items():
                assert all(s.timestamp >= oldest for s in samples), name

    def test_auxiliary_sample_older_than_oldest_price_is_dropped(self):
        store = SeriesStore(max_samples=2)
        store.append(SELL_SIGNAL, Sample(0.0, 1.0))
        for ts in (1.0, 2.0, 3.0):
            store.append(PRICE, Sample(ts, 100.0))

        assert store.snapshot(SELL_SIGNAL) == ()

    def test_late_auxiliary_append_rejected_below_floor(self):
        store = SeriesStore(max_samples=2)
        for ts in (5.0, 6.0, 7.0):
            store.append(PRICE, Sample(ts, 100.0))

        assert store.append(BUY_SIGNAL, Sample(5.5, 100.0)) is False
        assert store.append(BUY_SIGNAL, Sample(6.0, 100.0)) is True
        assert [s.timestamp for s in store.snapshot(BUY_SIGNAL)] == [6.0]


class TestChannels:
    """Test channel registration and append validation."""

    def test_default_channels_registered(self):
        store = SeriesStore()
        names = store.channel_names()
        assert names[0] == PRICE
        assert BUY_SIGNAL in names
        assert SELL_SIGNAL in names
        assert "bollinger_upper" in names

    def test_unknown_channel_append_raises(self):
        store = SeriesStore()
        with pytest.raises(UnknownChannelError):
            store.append("rsi", Sample(1.0, 50.0))

    def test_out_of_order_append_raises(self):
        store = SeriesStore()
        store.append(PRICE, Sample(2.0, 100.0))
        with pytest.raises(SampleOrderError) as exc_info:
            store.append(PRICE, Sample(1.0, 101.0))
        assert exc_info.value.channel == PRICE
        assert exc_info.value.newest == 2.0

    def test_equal_timestamps_allowed(self):
        store = SeriesStore()
        store.append(PRICE, Sample(1.0, 100.0))
        store.append(PRICE, Sample(1.0, 100.5))
        assert len(store) == 2

    def test_append_many_ignores_unknown_channels(self):
        store = SeriesStore()
        store.append(PRICE, Sample(1.0, 100.0))

        written = store.append_many({"sma_short": 99.0, "mystery": 1.0}, 1.0)

        assert written == ["sma_short"]
        assert "mystery" not in store.channel_names()

    def test_registered_channel_accepts_append_many(self):
        store = SeriesStore()
        assert store.register_channel("rsi") is True
        assert store.register_channel("rsi") is False

        store.append_many({"rsi": 55.0}, 1.0)
        assert store.latest("rsi") == Sample(1.0, 55.0)

    def test_out_of_order_batch_writes_nothing(self):
        store = SeriesStore()
        store.append(PRICE, Sample(1.0, 100.0))
        store.append_many({"sma_short": 99.0}, 1.0)
        store.append("sma_long", Sample(3.0, 98.0))

        with pytest.raises(SampleOrderError) as exc_info:
            store.append_many({"sma_short": 99.5, "sma_long": 98.5}, 2.0)

        assert exc_info.value.channel == "sma_long"
        assert store.snapshot("sma_short") == (Sample(1.0, 99.0),)
        assert store.snapshot("sma_long") == (Sample(3.0, 98.0),)


class TestResetAndSnapshots:
    """Test reset semantics and snapshot isolation."""

    def test_reset_clears_samples_keeps_channels(self):
        store = SeriesStore()
        store.register_channel("rsi")
        store.append(PRICE, Sample(1.0, 100.0))
        store.append("rsi", Sample(1.0, 50.0))

        store.reset()

        assert len(store) == 0
        assert store.snapshot("rsi") == ()
        assert "rsi" in store.channel_names()
        assert store.oldest_primary_timestamp() is None

    def test_snapshot_is_unaffected_by_later_appends(self):
        store = SeriesStore()
        store.append(PRICE, Sample(1.0, 100.0))

        snapshot = store.snapshot(PRICE)
        store.append(PRICE, Sample(2.0, 101.0))

        assert isinstance(snapshot, tuple)
        assert len(snapshot) == 1
        assert len(store.snapshot(PRICE)) == 2

    def test_concurrent_append_and_snapshot(self):
        store = SeriesStore(max_samples=100)
        done = threading.Event()
        errors = []

        def writer():
            for i in range(5000):
                store.append(PRICE, Sample(float(i), 100.0))
                store.append_many({"sma_short": 1.0}, float(i))
            done.set()

        def reader():
            while not done.is_set():
                view = store.snapshot_all()
                prices = view[PRICE]
                timestamps = [s.timestamp for s in prices]
                if len(prices) > 100 or timestamps != sorted(timestamps):
                    errors.append(timestamps)
                if prices and any(s.timestamp < prices[0].timestamp for s in view["sma_short"]):
                    errors.append("prune")

        threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert errors == []
        assert len(store) == 100
