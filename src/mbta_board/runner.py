import asyncio
import logging
from datetime import datetime, tzinfo
from typing import Awaitable, Callable, List, Optional, Sequence, Set
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from mbta_board.api import fetch_schedule_package
from mbta_board.constants import CLOCK_INTERVAL_SECONDS, REFRESH_INTERVAL_SECONDS
from mbta_board.errors import BadStatusError, FetchError
from mbta_board.models import BoardSnapshot, Entry, Record
from mbta_board.scheduler import (
    BoardState, ClockTick, Effect, Event, FetchBoard, FetchFailed, FetchSucceeded,
    LogFetchError, RefreshTick, RequestCurrentTime, TimezoneResolved, ToggleStop,
    initial_state, transition,
)

logger = logging.getLogger(__name__)

FetchFunc = Callable[[str, datetime, tzinfo], Awaitable[List[Record]]]


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Resolve an IANA zone name, falling back to the host's local zone."""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone {name}, using local timezone")
    return datetime.now().astimezone().tzinfo


def log_fetch_error(error: FetchError) -> None:
    if isinstance(error, BadStatusError):
        logger.error(f"Schedule fetch failed (bad status {error.status}): {error}")
    else:
        logger.error(f"Schedule fetch failed ({error.category}): {error}")


class BoardRunner:
    """Drives the board state machine from timers, user input and fetch results.

    Every event goes through ``dispatch`` one at a time on the event loop. Fetches
    run as fire-and-forget tasks and their results are applied in the order they
    arrive, so a slow response for an old stop can overwrite a newer one.
    """

    def __init__(
        self,
        stops: Sequence[str],
        timezone_name: Optional[str] = None,
        fetch: FetchFunc = fetch_schedule_package,
        clock: Callable[[tzinfo], datetime] = datetime.now,
        on_update: Optional[Callable[["BoardRunner"], None]] = None,
    ):
        self._state = initial_state(stops)
        self._timezone_name = timezone_name
        self._fetch = fetch
        self._clock = clock
        self._on_update = on_update
        self._timers: List[asyncio.Task] = []
        self._fetches: Set[asyncio.Task] = set()

    @property
    def state(self) -> BoardState:
        return self._state

    @property
    def entries(self) -> List[Entry]:
        return list(self._state.entries)

    @property
    def selected_stop_label(self) -> str:
        return self._state.selected_stop

    @property
    def current_time(self) -> Optional[datetime]:
        return self._state.current_time

    def snapshot(self) -> BoardSnapshot:
        return BoardSnapshot(
            selected_stop=self.selected_stop_label,
            current_time=self.current_time,
            entries=self.entries,
        )

    def dispatch(self, event: Event) -> None:
        """Apply one event and carry out the effects it produces."""
        self._state, effects = transition(self._state, event)
        for effect in effects:
            self._run_effect(effect)
        if self._on_update:
            self._on_update(self)

    def toggle_stop(self) -> str:
        self.dispatch(ToggleStop())
        logger.info(f"Selected stop: {self.selected_stop_label}")
        return self.selected_stop_label

    def _run_effect(self, effect: Effect) -> None:
        if isinstance(effect, RequestCurrentTime):
            self.dispatch(ClockTick(now=self._clock(self._state.timezone)))
        elif isinstance(effect, FetchBoard):
            task = asyncio.create_task(self._fetch_board(effect))
            self._fetches.add(task)
            task.add_done_callback(self._fetches.discard)
        elif isinstance(effect, LogFetchError):
            log_fetch_error(effect.error)

    async def _fetch_board(self, request: FetchBoard) -> None:
        try:
            package = await self._fetch(request.stop, request.time, request.timezone)
        except FetchError as e:
            self.dispatch(FetchFailed(error=e))
            return
        self.dispatch(FetchSucceeded(package=package))

    async def _clock_loop(self) -> None:
        while True:
            await asyncio.sleep(CLOCK_INTERVAL_SECONDS)
            self.dispatch(ClockTick(now=self._clock(self._state.timezone)))

    async def _refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(REFRESH_INTERVAL_SECONDS)
            self.dispatch(RefreshTick())

    def start(self) -> None:
        """Resolve the timezone, which triggers the bootstrap fetch, then start the timers."""
        self.dispatch(TimezoneResolved(timezone=resolve_timezone(self._timezone_name)))
        self._timers = [
            asyncio.create_task(self._clock_loop()),
            asyncio.create_task(self._refresh_loop()),
        ]

    async def wait_for_fetches(self) -> None:
        """Wait until no fetch is in flight."""
        while self._fetches:
            await asyncio.gather(*list(self._fetches), return_exceptions=True)

    async def stop(self) -> None:
        """Cancel the timers and any fetch still in flight."""
        tasks = self._timers + list(self._fetches)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._timers = []

    async def run_forever(self) -> None:
        self.start()
        try:
            await asyncio.gather(*self._timers)
        finally:
            await self.stop()

    async def run_once(self) -> List[Entry]:
        """Bootstrap, wait for the first fetch to land, and return the board."""
        self.dispatch(TimezoneResolved(timezone=resolve_timezone(self._timezone_name)))
        await self.wait_for_fetches()
        return self.entries
