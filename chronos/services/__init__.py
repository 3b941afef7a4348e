"""Measure instrumentation services.

This package holds the measure state machine, the extra-data merge engine and
the idle-time flush scheduler that together make up a chronos context.
"""

from .capabilities import Capabilities, detect_capabilities
from .clock import PerformanceClock, PerformanceEntry, NAVIGATION_START
from .context import Chronos
from .idle import AsyncioIdleScheduler, ImmediateIdleScheduler
from .null_chronos import NullChronos
from .instance import create_chronos, get_chronos, set_chronos

__all__ = [
    "Capabilities",
    "detect_capabilities",
    "PerformanceClock",
    "PerformanceEntry",
    "NAVIGATION_START",
    "Chronos",
    "AsyncioIdleScheduler",
    "ImmediateIdleScheduler",
    "NullChronos",
    "create_chronos",
    "get_chronos",
    "set_chronos",
]
