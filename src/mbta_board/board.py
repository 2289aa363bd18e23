from typing import Iterable, List

from mbta_board.constants import MAX_BOARD_ENTRIES
from mbta_board.models import Entry


def assemble_board(selected_stop_label: str, entries: Iterable[Entry]) -> List[Entry]:
    """Filter, order and truncate entries into the final board.

    Entries whose destination equals the selected stop are dropped. Destination
    holds a trip headsign rather than a station name, so this rarely removes
    anything; the comparison is kept literal.
    """
    remaining = [entry for entry in entries if entry.destination != selected_stop_label]
    # sorted() is stable, equal times keep package order
    remaining = sorted(remaining, key=lambda entry: entry.time)
    return remaining[:MAX_BOARD_ENTRIES]
