from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, field_validator

from mbta_board.constants import CARRIER, DEFAULT_STOPS, DEFAULT_TIMEZONE


class ScheduleRecord(BaseModel):
    """A planned departure of one trip from the queried stop."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["schedule"] = "schedule"
    id: str
    departure_time: AwareDatetime
    trip_id: str
    prediction_id: Optional[str] = None


class TripRecord(BaseModel):
    """Trip metadata: rider-facing headsign and train number."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["trip"] = "trip"
    id: str
    head_sign: str
    name: str


class PredictionRecord(BaseModel):
    """Real-time estimate for a schedule. stop_id carries the track after a '-'."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["prediction"] = "prediction"
    id: str
    status: str
    departure_time: Optional[AwareDatetime] = None
    stop_id: str


class EmptyRecord(BaseModel):
    """Sentinel for a failed lookup or an unrecognized included object."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["empty"] = "empty"
    id: Optional[str] = None


Record = Annotated[
    Union[ScheduleRecord, TripRecord, PredictionRecord, EmptyRecord],
    Field(discriminator="kind"),
]


class Entry(BaseModel):
    """Display-ready board row"""
    model_config = ConfigDict(frozen=True)

    carrier: str = CARRIER
    time: datetime
    destination: str
    train_number: str
    track_number: str
    status: str


class BoardSnapshot(BaseModel):
    """Read-only view handed to renderers."""
    selected_stop: str
    current_time: Optional[datetime]
    entries: List[Entry]


class BoardConfig(BaseModel):
    """Configuration model for the departure board"""
    stops: List[str] = Field(default_factory=lambda: list(DEFAULT_STOPS))
    timezone: str = DEFAULT_TIMEZONE

    @field_validator("stops")
    @classmethod
    def validate_stops(cls, v):
        """At least one non-blank stop label is required"""
        if not v:
            raise ValueError("At least one stop must be configured")
        if any(not stop.strip() for stop in v):
            raise ValueError("Stop labels must not be blank")
        return v
