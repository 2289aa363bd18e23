"""Refresh state machine for the departure board.

``transition`` is pure: it takes the current ``BoardState`` and one event and
returns the next state plus the effects the driver must carry out (fetches,
clock reads, error logging). Nothing in this module performs I/O.
"""
from datetime import datetime, tzinfo
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict

from mbta_board.board import assemble_board
from mbta_board.entries import build_entries
from mbta_board.errors import FetchError
from mbta_board.models import Entry, Record


class Phase(str, Enum):
    UNINITIALIZED = "uninitialized"
    TIMEZONE_READY = "timezone_ready"
    RUNNING = "running"


class BoardState(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    stops: Tuple[str, ...]
    timezone: Optional[tzinfo] = None
    current_time: Optional[datetime] = None
    selected_stop_index: int = 0
    entries: Tuple[Entry, ...] = ()

    @property
    def selected_stop(self) -> str:
        return self.stops[self.selected_stop_index]

    @property
    def phase(self) -> Phase:
        if self.timezone is None:
            return Phase.UNINITIALIZED
        if self.current_time is None:
            return Phase.TIMEZONE_READY
        return Phase.RUNNING


# Events

class _Message(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class TimezoneResolved(_Message):
    timezone: tzinfo


class ClockTick(_Message):
    now: datetime


class RefreshTick(_Message):
    pass


class ToggleStop(_Message):
    pass


class FetchSucceeded(_Message):
    package: List[Record]


class FetchFailed(_Message):
    error: FetchError


Event = Union[TimezoneResolved, ClockTick, RefreshTick, ToggleStop, FetchSucceeded, FetchFailed]


# Effects

class RequestCurrentTime(_Message):
    pass


class FetchBoard(_Message):
    stop: str
    time: datetime
    timezone: tzinfo


class LogFetchError(_Message):
    error: FetchError


Effect = Union[RequestCurrentTime, FetchBoard, LogFetchError]


def initial_state(stops: Sequence[str]) -> BoardState:
    """Uninitialized state over the configured stops."""
    if not stops:
        raise ValueError("At least one stop must be configured")
    return BoardState(stops=tuple(stops))


def _fetch_for(state: BoardState) -> List[Effect]:
    if state.current_time is None or state.timezone is None:
        return []
    return [FetchBoard(stop=state.selected_stop, time=state.current_time, timezone=state.timezone)]


def transition(state: BoardState, event: Event) -> Tuple[BoardState, List[Effect]]:
    """Apply one event, returning the new state and the effects to run."""
    if isinstance(event, TimezoneResolved):
        return state.model_copy(update={"timezone": event.timezone}), [RequestCurrentTime()]

    if isinstance(event, ClockTick):
        first_tick = state.current_time is None
        new_state = state.model_copy(update={"current_time": event.now})
        return new_state, _fetch_for(new_state) if first_tick else []

    if isinstance(event, RefreshTick):
        return state, _fetch_for(state)

    if isinstance(event, ToggleStop):
        index = (state.selected_stop_index + 1) % len(state.stops)
        new_state = state.model_copy(update={"selected_stop_index": index})
        return new_state, _fetch_for(new_state)

    if isinstance(event, FetchSucceeded):
        # Applied against the stop selected now, not the one that issued the request
        entries = assemble_board(state.selected_stop, build_entries(event.package))
        return state.model_copy(update={"entries": tuple(entries)}), []

    if isinstance(event, FetchFailed):
        return state, [LogFetchError(error=event.error)]

    raise TypeError(f"Unknown event: {event!r}")
