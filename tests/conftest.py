from datetime import datetime, timedelta, timezone

import pytest

from mbta_board.models import PredictionRecord, ScheduleRecord, TripRecord

T0 = datetime(2025, 1, 16, 15, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def use_test_config(tmp_path, monkeypatch):
    """Point the config file at a temporary location for every test."""
    monkeypatch.setattr("mbta_board.constants.CONFIG_FILE", tmp_path / "config" / "config.json")
    yield tmp_path / "config" / "config.json"


@pytest.fixture
def departure_time():
    return T0


@pytest.fixture
def sample_package():
    """Schedule with trip and prediction, as in a typical North Station response."""
    return [
        ScheduleRecord(id="s1", departure_time=T0, trip_id="t1", prediction_id="p1"),
        TripRecord(id="t1", head_sign="Boston", name="101"),
        PredictionRecord(
            id="p1", status="LATE", departure_time=T0 + timedelta(seconds=300), stop_id="X-3"
        ),
    ]


@pytest.fixture
def mock_schedules_response():
    """Mock MBTA API schedules response with included trips and predictions."""
    return {
        "data": [
            {
                "id": "schedule-1",
                "type": "schedule",
                "attributes": {
                    "arrival_time": None,
                    "departure_time": "2025-01-16T10:30:00-05:00",
                    "stop_sequence": 1,
                },
                "relationships": {
                    "trip": {"data": {"id": "trip-1", "type": "trip"}},
                    "prediction": {"data": {"id": "prediction-1", "type": "prediction"}},
                    "stop": {"data": {"id": "North Station", "type": "stop"}},
                },
            },
            {
                "id": "schedule-2",
                "type": "schedule",
                "attributes": {
                    "arrival_time": None,
                    "departure_time": "2025-01-16T10:45:00-05:00",
                    "stop_sequence": 1,
                },
                "relationships": {
                    "trip": {"data": {"id": "trip-2", "type": "trip"}},
                    "prediction": {"data": None},
                },
            },
        ],
        "included": [
            {
                "id": "trip-1",
                "type": "trip",
                "attributes": {"headsign": "Lowell", "name": "305"},
            },
            {
                "id": "trip-2",
                "type": "trip",
                "attributes": {"headsign": "Haverhill", "name": "207"},
            },
            {
                "id": "prediction-1",
                "type": "prediction",
                "attributes": {
                    "departure_time": "2025-01-16T10:34:00-05:00",
                    "status": "All aboard",
                },
                "relationships": {
                    "stop": {"data": {"id": "North Station-5", "type": "stop"}},
                },
            },
        ],
    }


@pytest.fixture
def mock_mbta_error_response():
    """Mock MBTA API error response."""
    return {
        "errors": [
            {
                "status": "400",
                "title": "Bad Request",
                "detail": "Invalid filter",
            }
        ]
    }
