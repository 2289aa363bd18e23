import asyncio
import logging
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from mbta_board.api import build_schedule_url, fetch_schedule_package, parse_package
from mbta_board.entries import build_entries
from mbta_board.errors import (
    BadBodyError, BadStatusError, BadUrlError, FetchError, FetchTimeoutError, NetworkError
)
from mbta_board.models import EmptyRecord, PredictionRecord, ScheduleRecord, TripRecord

EASTERN = timezone(timedelta(hours=-5))
NOW = datetime(2025, 1, 16, 15, 30, tzinfo=timezone.utc)


def _mock_get(mock_get, status=200, json_data=None, text=""):
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.json.return_value = json_data
    mock_response.text.return_value = text
    mock_get.return_value.__aenter__.return_value = mock_response
    return mock_response


def test_build_schedule_url():
    """Test the stop and minimum-time filters."""
    url = build_schedule_url("North Station", NOW, EASTERN)

    assert url.startswith("https://api-v3.mbta.com/schedules?")
    assert "filter[stop]=North%20Station" in url
    assert "filter[min_time]=10:30" in url
    assert "include=trip,prediction" in url


def test_build_schedule_url_zero_pads_hours():
    early = datetime(2025, 1, 16, 12, 5, tzinfo=timezone.utc)

    assert "filter[min_time]=07:05" in build_schedule_url("South Station", early, EASTERN)


def test_parse_package(mock_schedules_response):
    """Test parsing schedules and included trips and predictions."""
    package = parse_package(mock_schedules_response)

    kinds = [record.kind for record in package]
    assert kinds == ["schedule", "schedule", "trip", "trip", "prediction"]

    schedule = package[0]
    assert isinstance(schedule, ScheduleRecord)
    assert schedule.trip_id == "trip-1"
    assert schedule.prediction_id == "prediction-1"
    assert schedule.departure_time == datetime(2025, 1, 16, 15, 30, tzinfo=timezone.utc)
    assert package[1].prediction_id is None

    assert package[2] == TripRecord(id="trip-1", head_sign="Lowell", name="305")
    prediction = package[4]
    assert isinstance(prediction, PredictionRecord)
    assert prediction.stop_id == "North Station-5"
    assert prediction.status == "All aboard"


def test_parse_package_builds_board_entries(mock_schedules_response):
    entries = build_entries(parse_package(mock_schedules_response))

    assert [(e.destination, e.train_number, e.track_number) for e in entries] == [
        ("Lowell", "305", "5"),
        ("Haverhill", "207", "TBD"),
    ]
    assert entries[0].time == datetime(2025, 1, 16, 15, 34, tzinfo=timezone.utc)
    assert entries[1].status == "ON TIME"


def test_parse_package_optional_fields():
    """Test that null optional fields parse to None rather than failing."""
    payload = {
        "data": [],
        "included": [
            {
                "id": "p1",
                "type": "prediction",
                "attributes": {"departure_time": None, "status": None},
                "relationships": {"stop": {"data": {"id": "South Station-12"}}},
            },
            {"id": "place-north", "type": "stop", "attributes": {"name": "North Station"}},
        ],
    }

    package = parse_package(payload)

    assert package[0].departure_time is None
    assert package[0].status == "ON TIME"
    assert package[1] == EmptyRecord(id="place-north")


def test_parse_package_schedule_without_departure_is_skipped():
    payload = {
        "data": [
            {
                "id": "s-arrival",
                "type": "schedule",
                "attributes": {"departure_time": None},
                "relationships": {"trip": {"data": {"id": "t1"}}},
            }
        ]
    }

    package = parse_package(payload)

    assert package == [EmptyRecord(id="s-arrival")]
    assert build_entries(package) == []


@pytest.mark.parametrize(
    "payload",
    [
        None,
        {"errors": []},
        {"data": [{"id": "s1", "attributes": {"departure_time": "not a time"}}]},
        {"data": [], "included": [{"id": "t1", "type": "trip", "attributes": {}}]},
        {
            "data": [
                {
                    "id": "s1",
                    "attributes": {"departure_time": "2025-01-16T10:50:00"},
                    "relationships": {"trip": {"data": {"id": "t1"}}},
                }
            ]
        },
        {
            "data": [],
            "included": [
                {
                    "id": "p1",
                    "type": "prediction",
                    "attributes": {"departure_time": "2025-01-16T10:50:00", "status": "LATE"},
                    "relationships": {"stop": {"data": {"id": "North Station-5"}}},
                }
            ],
        },
    ],
)
def test_parse_package_malformed(payload):
    with pytest.raises(BadBodyError):
        parse_package(payload)


@pytest.mark.asyncio
async def test_fetch_schedule_package(mock_schedules_response):
    """Test fetching and parsing a schedules package."""
    with patch("aiohttp.ClientSession.get") as mock_get:
        _mock_get(mock_get, json_data=mock_schedules_response)

        package = await fetch_schedule_package("North Station", NOW, EASTERN)

        assert len(package) == 5
        url = mock_get.call_args[0][0]
        assert "filter[stop]=North%20Station" in url


@pytest.mark.asyncio
async def test_fetch_schedule_package_bad_status(mock_mbta_error_response):
    with patch("aiohttp.ClientSession.get") as mock_get:
        _mock_get(mock_get, status=400, json_data=mock_mbta_error_response, text="Bad Request")

        with pytest.raises(BadStatusError) as exc_info:
            await fetch_schedule_package("North Station", NOW, EASTERN)

    assert exc_info.value.status == 400
    assert "400" in str(exc_info.value)


@pytest.mark.asyncio
async def test_fetch_schedule_package_bad_body():
    with patch("aiohttp.ClientSession.get") as mock_get:
        mock_response = _mock_get(mock_get)
        mock_response.json.side_effect = ValueError("Invalid JSON")

        with pytest.raises(BadBodyError):
            await fetch_schedule_package("North Station", NOW, EASTERN)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raised, expected",
    [
        (aiohttp.InvalidURL("not a url"), BadUrlError),
        (asyncio.TimeoutError(), FetchTimeoutError),
        (aiohttp.ClientConnectionError("boom"), NetworkError),
    ],
)
async def test_fetch_schedule_package_transport_errors(raised, expected):
    with patch("aiohttp.ClientSession.get", side_effect=raised):
        with pytest.raises(expected) as exc_info:
            await fetch_schedule_package("North Station", NOW, EASTERN)

    assert isinstance(exc_info.value, FetchError)


def test_parse_package_missing_references_fall_back(caplog):
    """Test that a schedule without a trip or a prediction without a stop keeps the batch."""
    payload = {
        "data": [
            {
                "id": "s1",
                "type": "schedule",
                "attributes": {"departure_time": "2025-01-16T10:30:00-05:00"},
                "relationships": {"trip": {"data": None}, "prediction": {"data": {"id": "p1"}}},
            },
            {
                "id": "s2",
                "type": "schedule",
                "attributes": {"departure_time": "2025-01-16T10:45:00-05:00"},
                "relationships": {"trip": {"data": {"id": "t2"}}},
            },
        ],
        "included": [
            {"id": "t2", "type": "trip", "attributes": {"headsign": "Lowell", "name": "305"}},
            {
                "id": "p1",
                "type": "prediction",
                "attributes": {"departure_time": None, "status": "LATE"},
                "relationships": {"stop": {"data": None}},
            },
        ],
    }

    with caplog.at_level(logging.WARNING):
        entries = build_entries(parse_package(payload))

    assert [(e.destination, e.train_number, e.track_number, e.status) for e in entries] == [
        ("-", "-", "TBD", "LATE"),
        ("Lowell", "305", "TBD", "ON TIME"),
    ]
    assert "Schedule s1 has no trip reference" in caplog.text
    assert "Prediction p1 has no stop reference" in caplog.text
