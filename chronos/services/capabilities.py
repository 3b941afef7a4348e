"""Capability detection for injected clock providers.

Detection runs once per chronos context. Every later branch reads the cached
Capabilities value instead of probing the clock again.
"""

from dataclasses import dataclass
from typing import Any, Optional

from chronos.core.logging import get_logger
from .clock import NAVIGATION_START, read_timing

logger = get_logger(__name__)

_MARKER_METHODS = ("mark", "measure", "get_entries_by_name", "clear_marks", "clear_measures")


@dataclass(frozen=True)
class Capabilities:
    """What the injected clock can do."""
    supports_now: bool = False
    supports_interval_markers: bool = False
    origin_timestamp: Optional[float] = None

    @property
    def mode(self) -> str:
        if not self.supports_now:
            return "unsupported"
        return "marker" if self.supports_interval_markers else "wall_clock"


def _has_method(obj: Any, name: str) -> bool:
    return callable(getattr(obj, name, None))


def detect_capabilities(clock: Any) -> Capabilities:
    """Inspect a clock provider and return its capability flags.

    Args:
        clock: Clock provider object, or None when no clock is available

    Returns:
        Frozen Capabilities describing the clock
    """
    if clock is None:
        logger.debug("No clock provider, measures disabled")
        return Capabilities()

    supports_now = _has_method(clock, "now")
    supports_markers = supports_now and all(_has_method(clock, m) for m in _MARKER_METHODS)

    origin_timestamp = read_timing(clock, NAVIGATION_START)

    capabilities = Capabilities(
        supports_now=supports_now,
        supports_interval_markers=supports_markers,
        origin_timestamp=origin_timestamp,
    )
    logger.debug(f"Detected clock capabilities: mode={capabilities.mode}, origin={origin_timestamp}")
    return capabilities
