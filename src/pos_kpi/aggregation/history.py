"""First-write-wins deduplication for historical records.

Older data may hold several full-day records for the same employee and day.
These reducers keep the first record seen for a key and drop the rest. They
never compare dates: callers wanting "most recent wins" sort the input newest
first before calling.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Mapping
from datetime import date
from typing import Any, Callable, TypeVar

from pos_kpi.exceptions import ClassificationError
from pos_kpi.masking import record_id_of
from pos_kpi.utils import to_calendar_day

logger = logging.getLogger(__name__)

R = TypeVar("R")


def record_employee(record: Any) -> Any:
    """Employee of a raw mapping (``empleada``) or a typed event."""
    if isinstance(record, Mapping):
        return record.get("empleada")
    return record.employee


def record_day(record: Any) -> date:
    """Calendar day of a raw mapping (``fecha``) or a typed event.

    Raises:
        ClassificationError: If a raw record's date cannot be parsed.
    """
    if not isinstance(record, Mapping):
        return record.day
    try:
        return to_calendar_day(record.get("fecha"))
    except ValueError as e:
        record_id = record_id_of(record)
        raise ClassificationError(f"Record {record_id!r}: {e}", record_id=record_id) from e


def first_per_key(records: Iterable[R], key: Callable[[R], Hashable]) -> list[R]:
    """Keep the first record for each key, preserving input order."""
    seen: set[Hashable] = set()
    kept: list[R] = []
    dropped = 0
    for record in records:
        k = key(record)
        if k in seen:
            dropped += 1
            continue
        seen.add(k)
        kept.append(record)
    if dropped:
        logger.debug("Dropped %d duplicate record(s)", dropped)
    return kept


def deduplicate_history(records: Iterable[R]) -> list[R]:
    """Keep at most one record per (employee, calendar day): the first one.

    Args:
        records: Legacy full-day records spanning many days, raw mappings or
            typed LegacyTotal events, in the caller's priority order.

    Returns:
        The surviving records in input order.

    Examples:
        >>> rows = [
        ...     {"id": "a", "empleada": "Ingrid", "fecha": "2024-03-01"},
        ...     {"id": "b", "empleada": "Ingrid", "fecha": "2024-03-01T19:00:00"},
        ... ]
        >>> [r["id"] for r in deduplicate_history(rows)]
        ['a']

    """
    return first_per_key(records, lambda r: (record_employee(r), record_day(r)))


def unify_daily_records(records: Iterable[R]) -> list[R]:
    """Keep the first record per employee, for a list that covers one day."""
    return first_per_key(records, record_employee)
