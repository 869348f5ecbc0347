"""Session-scoped deletion mask.

The record store's read path may keep returning a deleted record for a while
after the delete call returns. Ids are added to the mask as soon as a delete
is requested, before the store confirms it, and every aggregation entry point
filters its input through the mask first, so deleted records never reappear
during the session.

The mask only grows. It is created empty per session and discarded with it;
pass a fresh instance to start a new session.

Example:
    >>> from pos_kpi.masking import DeletionMask
    >>> mask = DeletionMask()
    >>> mask.add("rec-1")
    >>> mask.filter([{"id": "rec-1"}, {"id": "rec-2"}])
    [{'id': 'rec-2'}]
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

R = TypeVar("R")


def record_id_of(record: Any) -> str | None:
    """Id of a raw mapping or a typed event; None when it has none."""
    if isinstance(record, Mapping):
        value = record.get("id")
    else:
        value = getattr(record, "id", None)
    if value is None or value == "":
        return None
    return str(value)


class DeletionMask:
    """Thread-safe, grow-only set of tombstoned record ids."""

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._ids: set[str] = {str(i) for i in ids}

    def add(self, record_id: str) -> None:
        """Tombstone one id."""
        with self._lock:
            self._ids.add(str(record_id))
        logger.debug("Tombstoned record %s", record_id)

    def add_many(self, record_ids: Iterable[str]) -> None:
        """Tombstone several ids at once."""
        new_ids = {str(i) for i in record_ids}
        with self._lock:
            self._ids.update(new_ids)
        logger.debug("Tombstoned %d record(s)", len(new_ids))

    def __contains__(self, record_id: object) -> bool:
        with self._lock:
            return str(record_id) in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())

    def snapshot(self) -> frozenset[str]:
        """Immutable copy of the current ids."""
        with self._lock:
            return frozenset(self._ids)

    def filter(self, records: Iterable[R]) -> list[R]:
        """Drop records whose id is tombstoned.

        Works on raw store mappings and typed events alike. Records without an
        id pass through; classification rejects them later.
        """
        masked = self.snapshot()
        kept = [r for r in records if record_id_of(r) not in masked]
        return kept

    def __repr__(self) -> str:
        return f"DeletionMask({len(self)} id(s))"
