import asyncio
import logging
from datetime import datetime, tzinfo
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic import ValidationError

from mbta_board.constants import (
    DEFAULT_STATUS, HEADERS, MBTA_API_BASE, MISSING_TRIP_FIELD, REQUEST_TIMEOUT_SECONDS
)
from mbta_board.errors import (
    BadBodyError, BadStatusError, BadUrlError, FetchError, FetchTimeoutError, NetworkError
)
from mbta_board.models import EmptyRecord, PredictionRecord, Record, ScheduleRecord, TripRecord

logger = logging.getLogger(__name__)

# API request timeout
REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=REQUEST_TIMEOUT_SECONDS)


def build_schedule_url(stop: str, now: datetime, timezone: tzinfo) -> str:
    """Schedules query for one stop, departing at or after ``now`` in ``timezone``."""
    min_time = now.astimezone(timezone).strftime("%H:%M")
    stop_filter = stop.replace(" ", "%20")
    return (
        f"{MBTA_API_BASE}/schedules"
        f"?filter[stop]={stop_filter}"
        f"&filter[min_time]={min_time}"
        f"&include=trip,prediction"
        f"&sort=departure_time"
    )


def _related_id(item: Dict[str, Any], name: str) -> Optional[str]:
    relationship = (item.get("relationships") or {}).get(name) or {}
    data = relationship.get("data")
    if isinstance(data, dict):
        return data.get("id")
    return None


def _parse_schedule(item: Dict[str, Any]) -> Record:
    attributes = item.get("attributes") or {}
    if attributes.get("departure_time") is None:
        # Trains terminating here have no departure
        logger.debug(f"Skipping schedule {item.get('id')} without a departure time")
        return EmptyRecord(id=item.get("id"))
    trip_id = _related_id(item, "trip")
    if trip_id is None:
        logger.warning(f"Schedule {item.get('id')} has no trip reference")
        trip_id = MISSING_TRIP_FIELD
    return ScheduleRecord(
        id=item["id"],
        departure_time=attributes["departure_time"],
        trip_id=trip_id,
        prediction_id=_related_id(item, "prediction"),
    )


def _parse_included(item: Dict[str, Any]) -> Record:
    attributes = item.get("attributes") or {}
    item_type = item.get("type")
    if item_type == "trip":
        return TripRecord(
            id=item["id"],
            head_sign=attributes["headsign"],
            name=attributes["name"],
        )
    if item_type == "prediction":
        stop_id = _related_id(item, "stop")
        if stop_id is None:
            logger.warning(f"Prediction {item.get('id')} has no stop reference")
            stop_id = ""
        return PredictionRecord(
            id=item["id"],
            status=attributes.get("status") or DEFAULT_STATUS,
            departure_time=attributes.get("departure_time"),
            stop_id=stop_id,
        )
    return EmptyRecord(id=item.get("id"))


def parse_package(payload: Any) -> List[Record]:
    """Turn a JSON:API schedules response into a package of records."""
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        raise BadBodyError("Response is missing the 'data' array")
    try:
        package = [_parse_schedule(item) for item in payload["data"]]
        package.extend(_parse_included(item) for item in payload.get("included") or [])
    except (KeyError, TypeError, AttributeError, ValidationError) as e:
        raise BadBodyError(f"Malformed schedules response: {str(e)}") from e
    return package


async def fetch_schedule_package(stop: str, now: datetime, timezone: tzinfo) -> List[Record]:
    """Fetch and parse the schedules package for a stop.

    Raises a ``FetchError`` subclass for each failure kind: bad URL, timeout,
    network failure, non-2xx status, or an unreadable body.
    """
    url = build_schedule_url(stop, now, timezone)
    logger.debug(f"Fetching schedules: {url}")

    try:
        async with aiohttp.ClientSession(timeout=REQUEST_TIMEOUT) as session:
            async with session.get(url, headers=HEADERS) as response:
                if not 200 <= response.status < 300:
                    try:
                        detail = await response.text()
                    except aiohttp.ClientError:
                        detail = ""
                    raise BadStatusError(response.status, detail)
                try:
                    payload = await response.json()
                except (aiohttp.ContentTypeError, ValueError) as e:
                    raise BadBodyError(f"Response was not valid JSON: {str(e)}") from e
    except FetchError:
        raise
    except aiohttp.InvalidURL as e:
        raise BadUrlError(f"Invalid request URL: {url}") from e
    except asyncio.TimeoutError as e:
        raise FetchTimeoutError(f"Request timed out after {REQUEST_TIMEOUT_SECONDS}s") from e
    except aiohttp.ClientError as e:
        raise NetworkError(f"Request failed: {str(e)}") from e

    package = parse_package(payload)
    logger.info(f"Retrieved {len(package)} records for stop {stop}")
    return package
