"""High-resolution clock provider with named interval markers.

This module provides the default clock used by chronos contexts. It mirrors the
shape hosts are expected to inject: a monotonic ``now()`` in milliseconds since
the clock origin, named marks, measure entries computed from pairs of marks,
and a ``timing`` mapping of lifecycle timestamps in epoch milliseconds.
"""

import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

NAVIGATION_START = "navigationStart"


class IClockProvider(Protocol):
    """Protocol for the clock capability injected into a chronos context.

    Every member is optional from the detector's point of view; a clock that
    only provides ``now()`` runs chronos in wall-clock mode.
    """

    timing: Dict[str, float]

    def now(self) -> float:
        """Milliseconds elapsed since the clock origin."""
        ...

    def mark(self, name: str) -> "PerformanceEntry":
        ...

    def measure(self, name: str, start_mark: str, end_mark: str) -> "PerformanceEntry":
        ...

    def get_entries_by_name(self, name: str, entry_type: Optional[str] = None) -> List["PerformanceEntry"]:
        ...

    def clear_marks(self, name: Optional[str] = None) -> None:
        ...

    def clear_measures(self, name: Optional[str] = None) -> None:
        ...


@dataclass(frozen=True)
class PerformanceEntry:
    """A single mark or measure recorded by the clock."""
    name: str
    entry_type: str  # "mark" or "measure"
    start_time: float
    duration: float = 0.0


class PerformanceClock:
    """Default clock provider backed by ``time.perf_counter_ns``.

    Marks with the same name accumulate; ``measure()`` always pairs the newest
    start and end marks.
    """

    def __init__(self):
        self._origin_ns = time.perf_counter_ns()
        self.time_origin = time.time() * 1000.0
        self.timing: Dict[str, float] = {NAVIGATION_START: self.time_origin}
        self._marks: List[PerformanceEntry] = []
        self._measures: List[PerformanceEntry] = []

    def now(self) -> float:
        return (time.perf_counter_ns() - self._origin_ns) / 1_000_000.0

    def record_event(self, name: str, timestamp: Optional[float] = None) -> float:
        """Record a lifecycle event timestamp (epoch ms) under ``name``.

        Args:
            name: Event name, e.g. 'domContentLoaded'
            timestamp: Epoch milliseconds; defaults to the current instant

        Returns:
            The stored timestamp
        """
        if timestamp is None:
            timestamp = self.time_origin + self.now()
        self.timing[name] = timestamp
        return timestamp

    def mark(self, name: str) -> PerformanceEntry:
        entry = PerformanceEntry(name=name, entry_type="mark", start_time=self.now())
        self._marks.append(entry)
        return entry

    def _latest_mark(self, name: str) -> Optional[PerformanceEntry]:
        for entry in reversed(self._marks):
            if entry.name == name:
                return entry
        return None

    def measure(self, name: str, start_mark: str, end_mark: str) -> PerformanceEntry:
        start = self._latest_mark(start_mark)
        if start is None:
            raise KeyError(f"mark {start_mark} does not exist")
        end = self._latest_mark(end_mark)
        end_time = end.start_time if end is not None else self.now()

        entry = PerformanceEntry(
            name=name,
            entry_type="measure",
            start_time=start.start_time,
            duration=end_time - start.start_time,
        )
        self._measures.append(entry)
        return entry

    def get_entries_by_name(self, name: str, entry_type: Optional[str] = None) -> List[PerformanceEntry]:
        entries = self._marks + self._measures
        return [
            e for e in sorted(entries, key=lambda e: e.start_time)
            if e.name == name and (entry_type is None or e.entry_type == entry_type)
        ]

    def clear_marks(self, name: Optional[str] = None) -> None:
        if name is None:
            self._marks.clear()
        else:
            self._marks = [e for e in self._marks if e.name != name]

    def clear_measures(self, name: Optional[str] = None) -> None:
        if name is None:
            self._measures.clear()
        else:
            self._measures = [e for e in self._measures if e.name != name]


def read_timing(clock, event_name: str) -> Optional[float]:
    """Look up a lifecycle timestamp on a clock's ``timing`` mapping.

    Accepts both mapping-style and attribute-style ``timing`` objects.
    """
    timing = getattr(clock, "timing", None)
    if timing is None:
        return None
    if hasattr(timing, "get"):
        return timing.get(event_name)
    return getattr(timing, event_name, None)
