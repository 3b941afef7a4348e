"""Chronos - public API of a measure instrumentation context.

A Chronos instance owns its clock capabilities, measure registry, extra-data
store and flush scheduler. Several isolated instances can live side by side;
nothing is kept in module globals.

Usage example:
```python
chronos = Chronos(sink=records.append, global_metadata={"tags": ["app:web"]})
chronos.start("render", {"tags": ["view:home"]})
...
chronos.stop("render")  # delivered during the next idle slice
```
"""

from contextlib import contextmanager
from typing import Any, Iterator, List, Mapping, Optional

from chronos.core.config import settings
from chronos.core.errors import InvalidSinkError, MissingSinkError
from chronos.core.logging import get_logger
from .capabilities import Capabilities, detect_capabilities
from .clock import PerformanceClock
from .extra_data import ExtraDataStore
from .flush import FlushScheduler, Sink
from .idle import AsyncioIdleScheduler, IIdleScheduler
from .models import CapabilitiesModel, ChronosOptions, DebugSnapshotModel
from .registry import MeasureRegistry

logger = get_logger(__name__)

# Sentinel so that clock=None can explicitly mean "no clock available"
DEFAULT_CLOCK = object()


class Chronos:
    """Measure instrumentation context."""

    def __init__(
        self,
        sink: Optional[Sink] = None,
        auto_save_on_stop: Optional[bool] = None,
        debug_mode: Optional[bool] = None,
        clock: Any = DEFAULT_CLOCK,
        global_metadata: Optional[Mapping[str, Any]] = None,
        idle_scheduler: Optional[IIdleScheduler] = None,
    ):
        """
        Initialize a chronos context.

        Args:
            sink: Callable receiving each delivered record as a dict
            auto_save_on_stop: Flush after each completed measure when a sink
                is set (default from CHRONOS_AUTO_SAVE_ON_STOP)
            debug_mode: Log unmatched stops (default from CHRONOS_DEBUG)
            clock: Clock provider; None disables all measures
            global_metadata: Metadata merged into every measure's metadata
            idle_scheduler: Idle-time scheduling capability (default asyncio)

        Raises:
            InvalidSinkError: If ``sink`` is not callable
            pydantic.ValidationError: If another option has the wrong type
        """
        options = ChronosOptions(
            sink=sink,
            auto_save_on_stop=auto_save_on_stop,
            debug_mode=debug_mode,
            global_metadata=global_metadata,
            idle_scheduler=idle_scheduler,
        )
        self._sink: Optional[Sink] = options.sink
        self.auto_save_on_stop = settings.AUTO_SAVE_ON_STOP if options.auto_save_on_stop is None else options.auto_save_on_stop
        self.debug_mode = settings.DEBUG if options.debug_mode is None else options.debug_mode

        self.clock = PerformanceClock() if clock is DEFAULT_CLOCK else clock
        self.capabilities: Capabilities = detect_capabilities(self.clock)
        if not self.capabilities.supports_now:
            logger.info("High resolution clock unavailable, measures are disabled")

        self.extra_data = ExtraDataStore(options.global_metadata)
        self.registry = MeasureRegistry(self.clock, self.capabilities, self.extra_data)
        self.flush_scheduler = FlushScheduler(
            self.registry,
            options.idle_scheduler or AsyncioIdleScheduler(),
            lambda: self._sink,
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def sink(self) -> Optional[Sink]:
        return self._sink

    def set_sink(self, sink: Optional[Sink]) -> None:
        """Set the callable that receives delivered records."""
        if sink is not None and not callable(sink):
            raise InvalidSinkError(f"Chronos sink should be callable, got {type(sink).__name__}")
        self._sink = sink

    def set_debug_mode(self, enabled: bool) -> None:
        self.debug_mode = bool(enabled)

    def is_enabled(self) -> bool:
        return True

    # ------------------------------------------------------------------
    # Measures
    # ------------------------------------------------------------------

    def start(self, name: str, metadata: Optional[Mapping[str, Any]] = None,
              target_duration: Optional[float] = None) -> bool:
        """Start a measure with the provided name.

        Args:
            name: Measure name; starting a running name restarts it
            metadata: Extra data merged with the global metadata
            target_duration: Optional expected duration in ms, reported as is

        Returns:
            False if high resolution timing is not supported
        """
        return self.registry.start(name, metadata, target_duration)

    def stop(self, name: str) -> bool:
        """Stop a running measure with the provided name.

        Returns:
            False if timing is unsupported or the measure is not running
        """
        stopped = self.registry.stop(name)
        if not stopped:
            if self.debug_mode and self.capabilities.supports_now:
                logger.warning(f"Measure {name} is not running")
            return False
        self._auto_save()
        return True

    def measure_from_event(self, name: str, event_name: str,
                           metadata: Optional[Mapping[str, Any]] = None) -> bool:
        """Measure the time elapsed since a lifecycle event of the clock.

        Returns:
            False if timing is unsupported or the event has no timestamp
        """
        measured = self.registry.measure_from_event(name, event_name, metadata)
        if measured:
            self._auto_save()
        return measured

    def measure_from_navigation_start(self, name: str, metadata: Optional[Mapping[str, Any]] = None) -> bool:
        """Measure the time elapsed since the clock's navigation start."""
        measured = self.registry.measure_from_navigation_start(name, metadata)
        if measured:
            self._auto_save()
        return measured

    @contextmanager
    def measure(self, name: str, metadata: Optional[Mapping[str, Any]] = None,
                target_duration: Optional[float] = None) -> Iterator[bool]:
        """Context manager bracketing a block with start/stop.

        Yields:
            Whether the measure was started
        """
        started = self.start(name, metadata, target_duration)
        try:
            yield started
        finally:
            if started:
                self.stop(name)

    def get_running_measures(self) -> List[str]:
        return list(self.registry.running)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def save_to_store(self) -> bool:
        """Send all completed measures to the sink during idle time.

        Delivery removes measures, so a missing sink is reported before any
        work is scheduled.

        Returns:
            True if a new idle request was issued, False if one was pending

        Raises:
            MissingSinkError: If no sink is configured
        """
        if self._sink is None:
            raise MissingSinkError()
        return self.flush_scheduler.request()

    def flush(self) -> None:
        """Deliver every completed measure right away.

        Meant for shutdown, when no idle slice may come. Sink exceptions
        propagate to the caller.

        Raises:
            MissingSinkError: If no sink is configured
        """
        if self._sink is None:
            raise MissingSinkError()
        self.flush_scheduler.drain()

    def _auto_save(self) -> None:
        if self.auto_save_on_stop and self._sink is not None:
            self.save_to_store()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def debug_snapshot(self) -> DebugSnapshotModel:
        """Return an immutable copy of the current internal state."""
        return DebugSnapshotModel(
            running=self.registry.running_snapshot(),
            stored=self.registry.stored_snapshot(),
            special=self.registry.special_snapshot(),
            extra_data=self.extra_data.snapshot(),
            global_extra_data=self.extra_data.global_data,
            capabilities=CapabilitiesModel.model_validate(self.capabilities),
            flush_pending=self.flush_scheduler.is_pending,
            debug_mode=self.debug_mode,
        )

    def reset(self) -> None:
        """Reset all measure state. Used for testing."""
        self.registry.reset()
        self.registry.clear_measure_entries()
        self.registry.clear_residual_marks()
