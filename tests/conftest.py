"""Deterministic clock and idle-scheduler doubles for chronos tests."""

from typing import Callable, List, Optional, Tuple

import pytest

from chronos.services.clock import NAVIGATION_START, PerformanceClock
from chronos.services.context import Chronos
from chronos.services.instance import set_chronos
from chronos.services.null_chronos import NullChronos


class FakeClock(PerformanceClock):
    """PerformanceClock whose time only moves when a test advances it."""

    def __init__(self, origin: float = 1_700_000_000_000.0):
        super().__init__()
        self.current = 0.0
        self.time_origin = origin
        self.timing = {NAVIGATION_START: origin}
        self.now_calls = 0

    def now(self) -> float:
        self.now_calls += 1
        return self.current

    def advance(self, ms: float) -> None:
        self.current += ms


class WallClockOnly:
    """Clock with now() only, forcing wall-clock mode."""

    def __init__(self, clock: FakeClock):
        self._clock = clock
        self.timing = clock.timing

    def now(self) -> float:
        return self._clock.now()


class FakeDeadline:
    """Deadline that reads the fake clock, so sinks can spend budget."""

    did_timeout = False

    def __init__(self, clock: FakeClock, budget_ms: float):
        self._clock = clock
        self._budget_ms = budget_ms
        self._started = clock.current

    def time_remaining(self) -> float:
        return max(0.0, self._budget_ms - (self._clock.current - self._started))


class ManualIdleScheduler:
    """Idle scheduler that only runs slices when the test says so."""

    def __init__(self, clock: FakeClock, budget_ms: float = 50.0):
        self.clock = clock
        self.budget_ms = budget_ms
        self.requests: List[Tuple[Callable, float]] = []
        self.slices_run = 0

    def request_idle_callback(self, callback, timeout_ms: float) -> None:
        self.requests.append((callback, timeout_ms))

    @property
    def pending(self) -> int:
        return len(self.requests)

    def run_next(self, budget_ms: Optional[float] = None) -> None:
        callback, _ = self.requests.pop(0)
        self.slices_run += 1
        callback(FakeDeadline(self.clock, self.budget_ms if budget_ms is None else budget_ms))

    def run_all(self, max_slices: int = 100) -> int:
        ran = 0
        while self.requests and ran < max_slices:
            self.run_next()
            ran += 1
        return ran


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def idle(clock):
    return ManualIdleScheduler(clock)


@pytest.fixture
def records():
    return []


@pytest.fixture
def chronos(clock, idle, records):
    """Marker-mode context with a list sink and manual idle slices."""
    return Chronos(
        sink=records.append,
        auto_save_on_stop=False,
        debug_mode=False,
        clock=clock,
        idle_scheduler=idle,
    )


@pytest.fixture
def wall_chronos(clock, idle, records):
    """Wall-clock-mode context with a list sink and manual idle slices."""
    return Chronos(
        sink=records.append,
        auto_save_on_stop=False,
        debug_mode=False,
        clock=WallClockOnly(clock),
        idle_scheduler=idle,
    )


@pytest.fixture(autouse=True)
def reset_active_chronos():
    yield
    set_chronos(NullChronos())
