"""Action objects understood by the chronos dispatch middleware.

Hosts that route work through an action dispatcher build these with the
helper constructors below instead of calling a chronos context directly.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ActionType(str, Enum):
    PERFORMANCE_START_MEASURE = "PERFORMANCE_START_MEASURE"
    PERFORMANCE_STOP_MEASURE = "PERFORMANCE_STOP_MEASURE"
    PERFORMANCE_MEASURE_FROM_EVENT = "MEASURE_FROM_EVENT"
    PERFORMANCE_MEASURE_FROM_NAVIGATION_START = "MEASURE_FROM_NAVIGATION_START"


class Action(BaseModel):
    """A dispatched action. Unknown types are allowed and passed through."""
    model_config = ConfigDict(extra="allow")

    type: str
    measure_name: Optional[str] = None
    measure_data: Dict[str, Any] = Field(default_factory=dict)
    event_name: Optional[str] = None
    target_duration: Optional[float] = None


def start_measure(name: str, data: Optional[Dict[str, Any]] = None,
                  target_duration: Optional[float] = None) -> Action:
    return Action(
        type=ActionType.PERFORMANCE_START_MEASURE.value,
        measure_name=name,
        measure_data=data or {},
        target_duration=target_duration,
    )


def stop_measure(name: str) -> Action:
    return Action(type=ActionType.PERFORMANCE_STOP_MEASURE.value, measure_name=name)


def measure_from_special_event(name: str, event_name: str, data: Optional[Dict[str, Any]] = None) -> Action:
    return Action(
        type=ActionType.PERFORMANCE_MEASURE_FROM_EVENT.value,
        measure_name=name,
        measure_data=data or {},
        event_name=event_name,
    )


def measure_from_navigation_start(name: str, data: Optional[Dict[str, Any]] = None) -> Action:
    return Action(
        type=ActionType.PERFORMANCE_MEASURE_FROM_NAVIGATION_START.value,
        measure_name=name,
        measure_data=data or {},
    )
