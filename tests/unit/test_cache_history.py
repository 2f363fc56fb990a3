"""
Unit Tests for Plot Cache and Compute History
=============================================
"""

from unittest.mock import Mock

import pytest

from wavesynth.core.signal.cache import Cache
from wavesynth.core.signal.history import HISTORY_SIZE, MAX_HISTORY_AGE, ComputeHistory


class TestCache:
    """Test the single-slot cache."""

    def test_initialises_once(self):
        init = Mock(return_value="data")
        cache: Cache[str] = Cache()

        assert cache.get_or_init(init) == "data"
        assert cache.get_or_init(init) == "data"
        init.assert_called_once()

    def test_invalidate_recomputes(self):
        init = Mock(side_effect=["first", "second"])
        cache: Cache[str] = Cache()

        assert cache.get_or_init(init) == "first"
        cache.invalidate()
        assert cache.is_valid() is False
        assert cache.get_or_init(init) == "second"
        assert cache.is_valid() is True

    def test_prefilled(self):
        cache = Cache(data=3)
        assert cache.get_or_init(lambda: 4) == 3


class TestComputeHistory:
    """Test the rolling compute time history."""

    def test_defaults(self):
        history = ComputeHistory()

        assert history.capacity == HISTORY_SIZE == 1024
        assert history.max_age == MAX_HISTORY_AGE == 1.0
        assert len(history) == 0
        assert history.mean_ms() == 0.0
        assert history.points() == []

    def test_mean_in_milliseconds(self):
        history = ComputeHistory()
        history.add(0.0, 0.001)
        history.add(0.1, 0.003)

        assert history.mean_ms() == pytest.approx(2.0)
        assert history.points() == [(0, pytest.approx(1.0)), (1, pytest.approx(3.0))]

    def test_old_samples_pruned(self):
        """Samples older than max_age relative to the newest are dropped."""
        history = ComputeHistory()
        history.add(0.0, 0.001)
        history.add(0.5, 0.002)
        history.add(2.0, 0.003)

        assert len(history) == 1
        assert history.mean_ms() == pytest.approx(3.0)
        assert history.total() == 3

    def test_sample_at_max_age_kept(self):
        history = ComputeHistory(max_age=1.0)
        history.add(0.0, 0.001)
        history.add(1.0, 0.001)

        assert len(history) == 2

    def test_capacity_bound(self):
        history = ComputeHistory(capacity=2)
        for i in range(3):
            history.add(0.0, 0.001 * (i + 1))

        assert len(history) == 2
        assert history.total() == 3
        assert history.mean_ms() == pytest.approx(2.5)

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            ComputeHistory(capacity=0)
