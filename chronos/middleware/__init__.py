from .actions import (
    Action,
    ActionType,
    measure_from_navigation_start,
    measure_from_special_event,
    start_measure,
    stop_measure,
)
from .dispatch import ChronosMiddleware

__all__ = [
    "Action",
    "ActionType",
    "ChronosMiddleware",
    "measure_from_navigation_start",
    "measure_from_special_event",
    "start_measure",
    "stop_measure",
]
