"""NullChronos - No-op implementation for disabled instrumentation.

This module provides a null object pattern implementation that does nothing
when chronos is disabled, allowing hosts to keep their instrumentation calls
without any overhead or delivered records.
"""

from contextlib import contextmanager
from typing import Any, Iterator, List, Mapping, Optional

from .models import CapabilitiesModel, DebugSnapshotModel


class NullChronos:
    """No-op chronos context for when instrumentation is disabled.

    Every measure operation reports failure the same way an unsupported clock
    does. save_to_store() is a silent no-op since there is nothing to lose.
    """

    debug_mode = False
    auto_save_on_stop = False
    sink = None

    def start(self, name: str, metadata: Optional[Mapping[str, Any]] = None,
              target_duration: Optional[float] = None) -> bool:
        """No-op: start a measure."""
        return False

    def stop(self, name: str) -> bool:
        """No-op: stop a measure."""
        return False

    def measure_from_event(self, name: str, event_name: str,
                           metadata: Optional[Mapping[str, Any]] = None) -> bool:
        """No-op: measure from a lifecycle event."""
        return False

    def measure_from_navigation_start(self, name: str, metadata: Optional[Mapping[str, Any]] = None) -> bool:
        """No-op: measure from navigation start."""
        return False

    @contextmanager
    def measure(self, name: str, metadata: Optional[Mapping[str, Any]] = None,
                target_duration: Optional[float] = None) -> Iterator[bool]:
        yield False

    def get_running_measures(self) -> List[str]:
        return []

    def save_to_store(self) -> bool:
        return False

    def flush(self) -> None:
        pass

    def set_sink(self, sink) -> None:
        pass

    def set_debug_mode(self, enabled: bool) -> None:
        pass

    def debug_snapshot(self) -> DebugSnapshotModel:
        """Return valid empty DebugSnapshotModel."""
        return DebugSnapshotModel(
            running={},
            stored=[],
            special=[],
            extra_data={},
            global_extra_data={},
            capabilities=CapabilitiesModel(
                supports_now=False,
                supports_interval_markers=False,
                origin_timestamp=None,
                mode="unsupported",
            ),
            flush_pending=False,
            debug_mode=False,
            enabled=False,
        )

    def is_enabled(self) -> bool:
        """Always returns False for null chronos."""
        return False
