"""
Unit tests for MeasureRegistry - the measure state machine.

Covers both timing strategies and event-derived measures without any
flushing or idle scheduling involved.
"""

from unittest.mock import MagicMock

import pytest

from chronos.services.capabilities import Capabilities, detect_capabilities
from chronos.services.extra_data import ExtraDataStore
from chronos.services.registry import MeasureRegistry


@pytest.fixture
def marker_registry(clock):
    return MeasureRegistry(clock, detect_capabilities(clock), ExtraDataStore({"tags": ["bar:bar"]}))


@pytest.fixture
def wall_registry(clock):
    wall = MagicMock(spec=["now", "timing"])
    wall.now.side_effect = clock.now
    wall.timing = clock.timing
    return MeasureRegistry(wall, detect_capabilities(wall), ExtraDataStore())


class TestMarkerMode:
    """Registry backed by a clock with interval markers"""

    def test_start_places_start_mark(self, marker_registry, clock):
        assert marker_registry.start("foo") is True

        assert "foo" in marker_registry.running
        assert len(clock.get_entries_by_name("foo_start", "mark")) == 1
        assert marker_registry.running["foo"].start_time is None

    def test_stop_places_end_mark_and_queues(self, marker_registry, clock):
        marker_registry.start("foo")
        assert marker_registry.stop("foo") is True

        assert "foo" not in marker_registry.running
        assert list(marker_registry.stored) == ["foo"]
        assert len(clock.get_entries_by_name("foo_end", "mark")) == 1

    def test_pop_stored_measures_interval(self, marker_registry, clock):
        clock.advance(3.0)
        marker_registry.start("foo", target_duration=10.0)
        clock.advance(7.5)
        marker_registry.stop("foo")

        record = marker_registry.pop_stored()

        assert record.name == "foo"
        assert record.start_time == 3.0
        assert record.duration == 7.5
        assert record.target_duration == 10.0
        assert record.origin_reference == clock.time_origin
        assert not marker_registry.has_stored()

    def test_stopping_twice_before_flush_queues_once(self, marker_registry, clock):
        marker_registry.start("foo")
        marker_registry.stop("foo")
        marker_registry.start("foo")
        clock.advance(2.0)
        marker_registry.stop("foo")

        assert list(marker_registry.stored) == ["foo"]
        assert marker_registry.stored["foo"].duration == 2.0

    def test_restart_after_stop_keeps_stored_interval(self, marker_registry, clock):
        marker_registry.start("foo", {"attempt": 1}, target_duration=8.0)
        clock.advance(10.0)
        marker_registry.stop("foo")
        clock.advance(5.0)
        marker_registry.start("foo", {"attempt": 2})

        record = marker_registry.pop_stored()

        assert record.start_time == 0.0
        assert record.duration == 10.0
        assert record.target_duration == 8.0
        assert record.metadata == {"attempt": 1}
        assert marker_registry.extra_data.snapshot() == {"foo": {"attempt": 2}}

    def test_stored_queue_is_fifo(self, marker_registry):
        for name in ("a", "b", "c"):
            marker_registry.start(name)
        for name in ("a", "b", "c"):
            marker_registry.stop(name)

        assert [marker_registry.pop_stored().name for _ in range(3)] == ["a", "b", "c"]

    def test_clear_residual_marks(self, marker_registry, clock):
        marker_registry.start("foo")
        marker_registry.clear_residual_marks()

        assert clock.get_entries_by_name("foo_start") == []


class TestWallClockMode:
    """Registry backed by a clock exposing only now()"""

    def test_start_records_start_time(self, wall_registry, clock):
        clock.advance(12.0)
        assert wall_registry.start("foo") is True

        assert wall_registry.running["foo"].name == "foo"
        assert wall_registry.running["foo"].start_time == 12.0

    def test_stop_computes_duration(self, wall_registry, clock):
        wall_registry.start("foo")
        clock.advance(4.25)
        assert wall_registry.stop("foo") is True

        stored = wall_registry.stored["foo"]
        assert stored.name == "foo"
        assert stored.start_time == 0.0
        assert stored.duration == 4.25

    def test_restart_overwrites_start_time(self, wall_registry, clock):
        wall_registry.start("foo", {"attempt": 1})
        clock.advance(5.0)
        wall_registry.start("foo", {"attempt": 2})

        assert len(wall_registry.running) == 1
        assert wall_registry.running["foo"].start_time == 5.0
        assert wall_registry.extra_data.snapshot() == {"foo": {"attempt": 2}}

    def test_stored_queue_is_insertion_ordered(self, wall_registry):
        for name in ("b", "a", "c"):
            wall_registry.start(name)
            wall_registry.stop(name)

        assert [wall_registry.pop_stored().name for _ in range(3)] == ["b", "a", "c"]

    def test_restop_moves_to_queue_end(self, wall_registry, clock):
        for name in ("a", "b"):
            wall_registry.start(name)
            wall_registry.stop(name)
        wall_registry.start("a")
        clock.advance(2.0)
        wall_registry.stop("a")

        assert list(wall_registry.stored) == ["b", "a"]
        assert wall_registry.stored["a"].duration == 2.0

    def test_restart_after_stop_keeps_stored_metadata(self, wall_registry, clock):
        wall_registry.start("foo", {"attempt": 1}, target_duration=8.0)
        clock.advance(3.0)
        wall_registry.stop("foo")
        wall_registry.start("foo")

        record = wall_registry.pop_stored()

        assert record.duration == 3.0
        assert record.target_duration == 8.0
        assert record.metadata == {"attempt": 1}
        assert "foo" in wall_registry.running


def test_stop_without_start_is_noop(marker_registry, clock):
    """Test that an unmatched stop returns False and changes nothing."""
    assert marker_registry.stop("foo") is False

    assert not marker_registry.has_stored()
    assert clock.get_entries_by_name("foo_end") == []


def test_unsupported_clock_refuses_everything():
    """Test that without now() every operation returns False without side effects."""
    clock = MagicMock(spec=["mark"])
    registry = MeasureRegistry(clock, Capabilities(), ExtraDataStore())

    assert registry.start("foo") is False
    assert registry.stop("foo") is False
    assert registry.measure_from_event("foo", "navigationStart") is False
    assert registry.measure_from_navigation_start("foo") is False
    assert registry.running == {}
    assert registry.pending_count() == 0
    clock.mark.assert_not_called()


class TestSpecialMeasures:
    """Measures derived from lifecycle timestamps"""

    def test_measure_from_event(self, marker_registry, clock):
        clock.timing["domInteractive"] = clock.time_origin + 40.0
        clock.advance(100.0)

        assert marker_registry.measure_from_event("interactive", "domInteractive", {"tags": ["x"]}) is True

        special = marker_registry.special["interactive"]
        assert special.event_name == "domInteractive"
        assert special.start_time == 40.0
        assert special.duration == 60.0
        assert special.origin_reference == clock.time_origin
        assert special.metadata == {"tags": ["x", "bar:bar"]}
        assert "interactive" not in marker_registry.running

    def test_measure_from_navigation_start(self, marker_registry, clock):
        clock.advance(250.0)

        assert marker_registry.measure_from_navigation_start("boot") is True

        record = marker_registry.pop_special()
        assert record.event_name == "navigationStart"
        assert record.duration == 250.0
        assert record.start_time == 0.0

    def test_unknown_event_enqueues_nothing(self, marker_registry):
        assert marker_registry.measure_from_event("foo", "neverHappened") is False
        assert not marker_registry.has_special()

    def test_zero_timestamp_means_not_happened(self, marker_registry, clock):
        clock.timing["loadEventEnd"] = 0

        assert marker_registry.measure_from_event("load", "loadEventEnd") is False

    def test_missing_origin_fails(self, clock):
        wall = MagicMock(spec=["now"])
        wall.now.side_effect = clock.now
        registry = MeasureRegistry(wall, detect_capabilities(wall), ExtraDataStore())

        assert registry.measure_from_navigation_start("boot") is False
