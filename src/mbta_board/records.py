from typing import Dict, Iterable, Optional, Tuple

from mbta_board.models import EmptyRecord, Record


class RecordIndex:
    """Identifier lookup over one fetched package of mixed records.

    Each record kind has its own id space. When ids repeat, the first record in
    package order wins. Misses return an ``EmptyRecord`` carrying the requested
    id; reporting the miss is left to the caller.
    """

    def __init__(self, package: Iterable[Record]):
        self._by_kind: Dict[Tuple[str, str], Record] = {}
        self._by_id: Dict[str, Record] = {}
        for record in package:
            if record.id is None:
                continue
            self._by_kind.setdefault((record.kind, record.id), record)
            self._by_id.setdefault(record.id, record)

    def find(self, record_id: str, kind: Optional[str] = None) -> Record:
        """Return the record for ``record_id``, or an ``EmptyRecord`` on a miss."""
        if kind is None:
            found = self._by_id.get(record_id)
        else:
            found = self._by_kind.get((kind, record_id))
        if found is None:
            return EmptyRecord(id=record_id)
        return found

    def __contains__(self, record_id: str) -> bool:
        return record_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_kind)
