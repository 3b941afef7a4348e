"""Chronos - named timing measures delivered during idle time.

Bracket work with start()/stop(), derive measures from lifecycle timestamps,
attach metadata, and let a sink receive completed records without blocking
interactive work.
"""

from chronos.core.errors import (
    ChronosError,
    InvalidActionError,
    InvalidSinkError,
    MissingSinkError,
)
from chronos.services import (
    AsyncioIdleScheduler,
    Chronos,
    ImmediateIdleScheduler,
    NullChronos,
    PerformanceClock,
    create_chronos,
    get_chronos,
    set_chronos,
)

__all__ = [
    "AsyncioIdleScheduler",
    "Chronos",
    "ChronosError",
    "ImmediateIdleScheduler",
    "InvalidActionError",
    "InvalidSinkError",
    "MissingSinkError",
    "NullChronos",
    "PerformanceClock",
    "create_chronos",
    "get_chronos",
    "set_chronos",
]
