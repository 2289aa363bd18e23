import logging
from datetime import datetime
from typing import Iterable, List, Tuple

from mbta_board.constants import (
    CARRIER, DEFAULT_STATUS, DEFAULT_TRACK, MISSING_TRIP_FIELD, TRACK_DELIMITER
)
from mbta_board.models import Entry, Record, ScheduleRecord
from mbta_board.records import RecordIndex

logger = logging.getLogger(__name__)


def parse_track(stop_id: str) -> str:
    """Extract the track from a platform stop id such as 'North Station-5'."""
    parts = stop_id.split(TRACK_DELIMITER)
    if len(parts) == 2:
        return parts[1]
    logger.warning(f"Could not read track from stop_id: {stop_id}")
    return DEFAULT_TRACK


def _resolve_trip(index: RecordIndex, schedule: ScheduleRecord) -> Tuple[str, str]:
    trip = index.find(schedule.trip_id, kind="trip")
    if trip.kind != "trip":
        logger.warning(f"Trip {schedule.trip_id} not found for schedule {schedule.id}")
        return MISSING_TRIP_FIELD, MISSING_TRIP_FIELD
    return trip.head_sign, trip.name


def _resolve_prediction(index: RecordIndex, schedule: ScheduleRecord) -> Tuple[str, datetime, str]:
    default = (DEFAULT_STATUS, schedule.departure_time, DEFAULT_TRACK)
    if schedule.prediction_id is None:
        return default

    prediction = index.find(schedule.prediction_id, kind="prediction")
    if prediction.kind != "prediction":
        logger.warning(f"Prediction {schedule.prediction_id} not found for schedule {schedule.id}")
        return default

    # Schedule time is the fallback when the prediction has no departure time
    time = prediction.departure_time or schedule.departure_time
    return prediction.status, time, parse_track(prediction.stop_id)


def build_entry(index: RecordIndex, schedule: ScheduleRecord) -> Entry:
    """Join one schedule with its trip and prediction into a board entry.

    Missing or mistyped references never drop the entry; each field falls back
    to its default display value instead.
    """
    destination, train_number = _resolve_trip(index, schedule)
    status, time, track = _resolve_prediction(index, schedule)
    return Entry(
        carrier=CARRIER,
        time=time,
        destination=destination,
        train_number=train_number,
        track_number=track,
        status=status,
    )


def build_entries(package: Iterable[Record]) -> List[Entry]:
    """Build one entry per schedule in the package, in package order."""
    records = list(package)
    index = RecordIndex(records)
    return [build_entry(index, record) for record in records if record.kind == "schedule"]
