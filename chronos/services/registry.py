"""MeasureRegistry - running, stored and special measure state.

This module holds the measure state machine of a chronos context. Measures are
opened with start(), closed with stop() and wait in the stored queue until the
flush scheduler pops them. Special measures are derived from lifecycle
timestamps and go straight to their own queue.

Two timing strategies are supported, chosen once from the clock capabilities:

- marker mode: start/stop place ``{name}_start`` / ``{name}_end`` marks on the
  clock and stop measures the interval between the newest pair;
- wall-clock mode: start records ``now()`` and stop computes the duration.

Both queues pop in insertion (FIFO) order. A stopped measure carries its own
interval, metadata and target duration, so restarting the name before a flush
leaves it untouched.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from chronos.core.logging import get_logger
from .capabilities import Capabilities
from .clock import NAVIGATION_START, read_timing
from .extra_data import ExtraDataStore
from .models import MeasureRecord, RunningMeasureModel

logger = get_logger(__name__)


def start_mark(name: str) -> str:
    return f"{name}_start"


def end_mark(name: str) -> str:
    return f"{name}_end"


@dataclass
class RunningMeasure:
    """An open measure. start_time is only tracked in wall-clock mode."""
    name: str
    start_time: Optional[float] = None
    target_duration: Optional[float] = None


@dataclass
class StoredMeasure:
    """A completed measure waiting for delivery."""
    name: str
    start_time: float
    duration: float
    target_duration: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SpecialMeasure:
    """A measure synthesized from a lifecycle event timestamp."""
    name: str
    event_name: str
    origin_reference: float
    start_time: float
    duration: float
    metadata: Dict[str, Any] = field(default_factory=dict)


class MeasureRegistry:
    """State machine for the measures of one chronos context.

    Pure in-memory state; the only external calls go to the injected clock.
    """

    def __init__(self, clock: Any, capabilities: Capabilities, extra_data: ExtraDataStore):
        self.clock = clock
        self.capabilities = capabilities
        self.extra_data = extra_data

        # Open measures keyed by name (one entry per name)
        self.running: Dict[str, RunningMeasure] = {}

        # Completed measures in stop order (one entry per name)
        self.stored: Dict[str, StoredMeasure] = {}

        # Event-derived measures keyed by name
        self.special: Dict[str, SpecialMeasure] = {}

    @property
    def uses_markers(self) -> bool:
        return self.capabilities.supports_interval_markers

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def start(self, name: str, metadata: Optional[Mapping[str, Any]] = None,
              target_duration: Optional[float] = None) -> bool:
        """Open a measure. Restarting a running name replaces its state.

        In marker mode a restart places a fresh start mark; the earlier mark
        stays on the clock until residual marks are cleared after a flush.

        Returns:
            False if the clock has no high-resolution ``now()``
        """
        if not self.capabilities.supports_now:
            return False

        if name in self.running:
            logger.debug(f"Measure {name} restarted, previous start discarded")

        start_time = None
        if self.uses_markers:
            self.clock.mark(start_mark(name))
        else:
            start_time = self.clock.now()

        self.running[name] = RunningMeasure(name=name, start_time=start_time, target_duration=target_duration)
        self.extra_data.attach(name, metadata)
        return True

    def stop(self, name: str) -> bool:
        """Close a running measure and queue it for delivery.

        The interval is realized right away and the metadata attached at start
        moves onto the stored entry. Stopping a name that is already stored
        replaces that entry and moves it to the end of the queue.

        Returns:
            False if the clock is unsupported or ``name`` is not running
        """
        if not self.capabilities.supports_now:
            return False

        running = self.running.pop(name, None)
        if running is None:
            return False

        if self.uses_markers:
            self.clock.mark(end_mark(name))
            entry = self.clock.measure(name, start_mark(name), end_mark(name))
            if entry is None:
                entry = self.clock.get_entries_by_name(name, "measure")[-1]
            start_time, duration = entry.start_time, entry.duration
        else:
            start_time = running.start_time
            duration = self.clock.now() - running.start_time

        self.stored.pop(name, None)
        self.stored[name] = StoredMeasure(
            name=name,
            start_time=start_time,
            duration=duration,
            target_duration=running.target_duration,
            metadata=self.extra_data.pop(name),
        )
        return True

    def measure_from_event(self, name: str, event_name: str,
                           metadata: Optional[Mapping[str, Any]] = None) -> bool:
        """Store a special measure spanning from a lifecycle event until now.

        Returns:
            False if the clock is unsupported or the event timestamp is unknown
        """
        if not self.capabilities.supports_now:
            return False

        origin = self.capabilities.origin_timestamp
        event_timestamp = read_timing(self.clock, event_name)
        # A zero timestamp means the event has not happened yet
        if origin is None or not event_timestamp:
            logger.debug(f"No timestamp for event {event_name}, measure {name} skipped")
            return False

        event_offset = event_timestamp - origin
        self.special.pop(name, None)
        self.special[name] = SpecialMeasure(
            name=name,
            event_name=event_name,
            origin_reference=origin,
            start_time=event_offset,
            duration=self.clock.now() - event_offset,
            metadata=self.extra_data.merge(metadata),
        )
        return True

    def measure_from_navigation_start(self, name: str, metadata: Optional[Mapping[str, Any]] = None) -> bool:
        return self.measure_from_event(name, NAVIGATION_START, metadata)

    # ------------------------------------------------------------------
    # Draining
    # ------------------------------------------------------------------

    def has_stored(self) -> bool:
        return bool(self.stored)

    def has_special(self) -> bool:
        return bool(self.special)

    def has_running(self) -> bool:
        return bool(self.running)

    def pending_count(self) -> int:
        return len(self.stored) + len(self.special)

    def pop_stored(self) -> MeasureRecord:
        """Remove the oldest stored measure and build its record."""
        name = next(iter(self.stored))
        stored = self.stored.pop(name)
        return MeasureRecord(
            name=stored.name,
            duration=stored.duration,
            start_time=stored.start_time,
            origin_reference=self.capabilities.origin_timestamp,
            target_duration=stored.target_duration,
            metadata=stored.metadata,
        )

    def pop_special(self) -> MeasureRecord:
        """Remove the oldest special measure and build its record."""
        name = next(iter(self.special))
        special = self.special.pop(name)
        return MeasureRecord(
            name=special.name,
            duration=special.duration,
            start_time=special.start_time,
            origin_reference=special.origin_reference,
            event_name=special.event_name,
            metadata=special.metadata,
        )

    def clear_measure_entries(self) -> None:
        if self.uses_markers:
            self.clock.clear_measures()

    def clear_residual_marks(self) -> None:
        """Drop every mark on the clock. Only safe with nothing running."""
        if self.uses_markers:
            self.clock.clear_marks()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def running_snapshot(self) -> Dict[str, RunningMeasureModel]:
        return {
            name: RunningMeasureModel.model_validate(measure)
            for name, measure in self.running.items()
        }

    def stored_snapshot(self):
        return list(self.stored)

    def special_snapshot(self):
        return list(self.special)

    def reset(self) -> None:
        """Reset all measure state. Used for testing."""
        self.running.clear()
        self.stored.clear()
        self.special.clear()
        self.extra_data.clear()
