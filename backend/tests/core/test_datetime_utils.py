"""
Tests for datetime utilities module.
"""
from datetime import datetime, timedelta, timezone

from satprep.core.datetime_utils import ensure_timezone_aware, utc_now


class TestEnsureTimezoneAware:
    """Tests for ensure_timezone_aware function."""

    def test_naive_datetime_becomes_utc(self):
        """Test that a naive datetime is converted to UTC."""
        result = ensure_timezone_aware(datetime(2024, 1, 15, 12, 30, 45))

        assert result.tzinfo == timezone.utc
        assert (result.hour, result.minute, result.second) == (12, 30, 45)

    def test_aware_datetime_unchanged(self):
        """Test that aware datetimes are returned as-is."""
        aware = datetime(2024, 1, 15, 12, 0, tzinfo=timezone(timedelta(hours=5)))
        assert ensure_timezone_aware(aware) is aware

    def test_none_passes_through(self):
        assert ensure_timezone_aware(None) is None


def test_utc_now_is_aware():
    """Test that utc_now returns a UTC-aware datetime."""
    assert utc_now().tzinfo == timezone.utc
