"""Tests for the position registry."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from terramine.exceptions import InvalidCoordinates, LocationUnavailable
from terramine.services.location import LocationRegistry

T0 = datetime(2025, 6, 15, 16, 0, tzinfo=UTC)


class TestLocationRegistry:
    """Tests for reporting and reading positions."""

    def test_report_and_read(self):
        registry = LocationRegistry(max_age=timedelta(minutes=2))
        registry.report_position("alice", 42.0, -71.0, T0)
        position = registry.get_current_position("alice", T0 + timedelta(seconds=30))
        assert (position.latitude, position.longitude) == (42.0, -71.0)

    def test_unknown_account(self):
        registry = LocationRegistry()
        with pytest.raises(LocationUnavailable):
            registry.get_current_position("alice", T0)

    def test_stale_position(self):
        registry = LocationRegistry(max_age=timedelta(minutes=2))
        registry.report_position("alice", 42.0, -71.0, T0)
        with pytest.raises(LocationUnavailable, match="too old"):
            registry.get_current_position("alice", T0 + timedelta(minutes=3))

    def test_invalid_fix_rejected(self):
        registry = LocationRegistry()
        with pytest.raises(InvalidCoordinates):
            registry.report_position("alice", 95.0, 0.0, T0)
        with pytest.raises(LocationUnavailable):
            registry.get_current_position("alice", T0)

    def test_forget(self):
        registry = LocationRegistry()
        registry.report_position("alice", 42.0, -71.0, T0)
        registry.forget("alice")
        with pytest.raises(LocationUnavailable):
            registry.get_current_position("alice", T0)


class TestWatchPosition:
    """Tests for position watchers."""

    def test_watcher_notified_until_unsubscribed(self):
        registry = LocationRegistry()
        callback = MagicMock()
        unsubscribe = registry.watch_position("alice", callback)

        registry.report_position("alice", 42.0, -71.0, T0)
        callback.assert_called_once()
        assert callback.call_args[0][0].latitude == 42.0

        unsubscribe()
        registry.report_position("alice", 43.0, -71.0, T0)
        callback.assert_called_once()

    def test_other_accounts_not_notified(self):
        registry = LocationRegistry()
        callback = MagicMock()
        registry.watch_position("alice", callback)
        registry.report_position("bob", 42.0, -71.0, T0)
        callback.assert_not_called()

    def test_failing_watcher_does_not_block_others(self, caplog):
        registry = LocationRegistry()
        good = MagicMock()
        registry.watch_position("alice", MagicMock(side_effect=RuntimeError("boom")))
        registry.watch_position("alice", good)

        registry.report_position("alice", 42.0, -71.0, T0)
        good.assert_called_once()
        assert "boom" in caplog.text
