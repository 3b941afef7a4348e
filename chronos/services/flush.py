"""FlushScheduler - single-flight delivery of measures in idle slices.

The scheduler drains the registry into the sink one idle slice at a time. At
most one idle request is outstanding; further requests while it is pending are
coalesced. When a slice runs out of budget with measures left, a new request is
issued and the drain resumes in the next slice.
"""

import time
from typing import Any, Callable, Dict, Optional

from chronos.core.config import settings
from chronos.core.errors import MissingSinkError
from chronos.core.logging import get_logger
from .idle import IIdleDeadline, IIdleScheduler, TimeBudgetDeadline
from .registry import MeasureRegistry

logger = get_logger(__name__)

Sink = Callable[[Dict[str, Any]], Any]


class FlushScheduler:
    """Drains stored and special measures into a sink during idle time."""

    def __init__(self, registry: MeasureRegistry, idle_scheduler: IIdleScheduler,
                 sink_getter: Callable[[], Optional[Sink]], timeout_ms: Optional[float] = None):
        """
        Initialize the flush scheduler.

        Args:
            registry: Registry to drain
            idle_scheduler: Host idle-time scheduling capability
            sink_getter: Returns the current sink; read at delivery time so a
                sink swapped between slices takes effect
            timeout_ms: Maximum deferral of each idle request
        """
        self.registry = registry
        self.idle_scheduler = idle_scheduler
        self._sink_getter = sink_getter
        self.timeout_ms = timeout_ms if timeout_ms is not None else settings.IDLE_TIMEOUT_MS
        self._scheduled = False

    @property
    def is_pending(self) -> bool:
        return self._scheduled

    def request(self) -> bool:
        """Ask for an idle slice unless one is already pending.

        Returns:
            True if a new idle request was issued
        """
        if self._scheduled:
            return False
        self._scheduled = True
        try:
            self.idle_scheduler.request_idle_callback(self.run_slice, self.timeout_ms)
        except Exception:
            self._scheduled = False
            raise
        return True

    def _deliver(self, record) -> None:
        sink = self._sink_getter()
        if sink is None:
            raise MissingSinkError()
        sink(record.to_payload())

    def run_slice(self, deadline: IIdleDeadline) -> None:
        """Deliver as many measures as the deadline allows.

        A sink exception aborts the slice and propagates; the measure being
        delivered is dropped and the remaining ones wait for the next flush.
        """
        self._scheduled = False
        self._drain_within(deadline)

    def drain(self) -> None:
        """Deliver every pending measure now, on the caller's stack.

        For hosts shutting down, where an idle request might never run. An
        idle slice still pending afterwards finds an empty queue.
        """
        self._drain_within(TimeBudgetDeadline(budget_ms=float("inf"), started_at=time.monotonic()))

    def _drain_within(self, deadline: IIdleDeadline) -> None:
        registry = self.registry
        delivered = 0

        try:
            while deadline.time_remaining() > 0 and registry.has_stored():
                self._deliver(registry.pop_stored())
                delivered += 1

            while deadline.time_remaining() > 0 and registry.has_special():
                self._deliver(registry.pop_special())
                delivered += 1
        finally:
            registry.clear_measure_entries()

        if registry.has_stored() or registry.has_special():
            logger.debug(f"Slice delivered {delivered} measures, {registry.pending_count()} left, re-queueing")
            self.request()
        elif not registry.has_running():
            registry.clear_residual_marks()
            logger.debug(f"Slice delivered {delivered} measures, queue drained")
        else:
            logger.debug(f"Slice delivered {delivered} measures, mark cleanup deferred while measures run")
