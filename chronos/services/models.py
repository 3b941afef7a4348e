"""Pydantic V2 models for delivered measure records and debug snapshots.

ChronosOptions validates the constructor options of a Chronos context.
MeasureRecord is what the flush loop builds for every measure before handing a
plain dict to the sink. DebugSnapshotModel is the immutable view returned by
Chronos.debug_snapshot().
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from chronos.core.errors import InvalidSinkError


class ChronosOptions(BaseModel):
    """Constructor options of a chronos context"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    sink: Optional[Any] = None
    auto_save_on_stop: Optional[bool] = None
    debug_mode: Optional[bool] = None
    global_metadata: Dict[str, Any] = Field(default_factory=dict)
    idle_scheduler: Optional[Any] = None

    @field_validator("sink")
    @classmethod
    def sink_must_be_callable(cls, v):
        # TypeError subclasses are not wrapped into a ValidationError
        if v is not None and not callable(v):
            raise InvalidSinkError(f"Chronos sink should be callable, got {type(v).__name__}")
        return v

    @field_validator("global_metadata", mode="before")
    @classmethod
    def none_means_empty(cls, v):
        return {} if v is None else v


class MeasureRecord(BaseModel):
    """A completed measure ready for delivery"""
    model_config = ConfigDict(from_attributes=True)

    name: str
    duration: float
    start_time: Optional[float] = None
    origin_reference: Optional[float] = None
    target_duration: Optional[float] = None
    event_name: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        """Flatten into the dict shape handed to the sink.

        Optional fields are only present when set, and metadata keys never
        overwrite the core fields.
        """
        payload: Dict[str, Any] = dict(self.metadata)
        payload.update(
            name=self.name,
            duration=self.duration,
            start_time=self.start_time,
            origin_reference=self.origin_reference,
        )
        if self.target_duration is not None:
            payload["target_duration"] = self.target_duration
        if self.event_name is not None:
            payload["event_name"] = self.event_name
        return payload


class RunningMeasureModel(BaseModel):
    """A measure that has been started but not stopped"""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    name: str
    start_time: Optional[float] = None
    target_duration: Optional[float] = None


class CapabilitiesModel(BaseModel):
    """Clock capabilities detected at construction"""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    supports_now: bool
    supports_interval_markers: bool
    origin_timestamp: Optional[float] = None
    mode: str


class DebugSnapshotModel(BaseModel):
    """Point-in-time copy of a chronos context's internal state"""
    model_config = ConfigDict(frozen=True)

    running: Dict[str, RunningMeasureModel]
    stored: List[str]
    special: List[str]
    extra_data: Dict[str, Dict[str, Any]]
    global_extra_data: Dict[str, Any]
    capabilities: CapabilitiesModel
    flush_pending: bool
    debug_mode: bool
    enabled: bool = True


class ChronosHealthModel(BaseModel):
    """Lightweight health response for the debug router"""
    model_config = ConfigDict(from_attributes=True)

    enabled: bool
    debug_mode: bool
    mode: str
    running_count: int
    pending_count: int
    version: str
