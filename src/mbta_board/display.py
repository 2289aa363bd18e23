import logging
from datetime import datetime, tzinfo
from typing import Optional

from rich.console import Console
from rich.table import Table

from mbta_board.models import BoardSnapshot

logger = logging.getLogger(__name__)

console = Console()


def format_time(value: Optional[datetime], timezone: Optional[tzinfo]) -> str:
    """Format a departure time as e.g. '09:05 PM' in the board's timezone."""
    if value is None:
        return "--:--"
    if timezone is not None:
        value = value.astimezone(timezone)
    return value.strftime("%I:%M %p")


def build_board_table(snapshot: BoardSnapshot, timezone: Optional[tzinfo] = None) -> Table:
    """Build a console table for the debug board."""
    table = Table(
        title=f"{snapshot.selected_stop} departures",
        caption=f"Updated {format_time(snapshot.current_time, timezone)}",
    )
    for column in ("Carrier", "Time", "Destination", "Train", "Track", "Status"):
        table.add_column(column)

    for entry in snapshot.entries:
        table.add_row(
            entry.carrier,
            format_time(entry.time, timezone),
            entry.destination,
            entry.train_number,
            entry.track_number,
            entry.status,
        )
    return table


def snapshot_hash(snapshot: BoardSnapshot) -> int:
    """Hash of the stop and entries, for change detection."""
    entry_tuples = [
        (e.time.isoformat(), e.destination, e.train_number, e.track_number, e.status)
        for e in snapshot.entries
    ]
    return hash((snapshot.selected_stop, str(entry_tuples)))


class ConsoleBoard:
    """Prints the board to the console whenever the stop or entries change."""

    def __init__(self, output: Console = console):
        self._output = output
        self._last_hash = None

    def __call__(self, runner) -> None:
        snapshot = runner.snapshot()
        current_hash = snapshot_hash(snapshot)
        if current_hash == self._last_hash:
            return
        self._last_hash = current_hash
        logger.debug(f"Rendering {len(snapshot.entries)} entries for {snapshot.selected_stop}")
        self._output.print(build_board_table(snapshot, runner.state.timezone))
