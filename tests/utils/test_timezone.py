"""Tests for utils/timezone.py - UTC event stamps, naive local booking instants."""

from datetime import timezone

import pytest

from utils.timezone import current_time_local, now_local, now_utc, today_local


class TestNowUtc:
    """Tests for now_utc()."""

    def test_returns_timezone_aware(self):
        """Result must have tzinfo set (not naive)."""
        assert now_utc().tzinfo is not None

    def test_is_utc(self):
        assert now_utc().tzinfo == timezone.utc


class TestNowLocal:
    """Tests for now_local()."""

    def test_is_naive_and_whole_seconds(self):
        result = now_local()
        assert result.tzinfo is None
        assert result.microsecond == 0

    def test_named_timezone_is_naive(self):
        result = now_local("Asia/Kolkata")
        assert result.tzinfo is None
        assert result.microsecond == 0

    def test_unknown_timezone_raises(self):
        with pytest.raises(ValueError, match="Unknown timezone"):
            now_local("Mars/Olympus_Mons")

    def test_day_and_time_helpers(self):
        assert today_local("UTC") == now_local("UTC").date()
        assert current_time_local().microsecond == 0
