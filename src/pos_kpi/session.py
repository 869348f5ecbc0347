"""Session glue between the record store and the aggregation engine.

The store is an external collaborator; only its contract is defined here. A
KPISession owns the session's DeletionMask: deleting through the session
tombstones the id before the store is asked to delete, so a refresh that
races the store's consistency window cannot bring the record back.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any, Optional, Protocol

from pos_kpi.aggregation.types import DailyAggregation, DayHistory
from pos_kpi.api import aggregate_day, build_daily_history
from pos_kpi.config import EngineConfig, resolve_config
from pos_kpi.exceptions import ClassificationError
from pos_kpi.masking import DeletionMask
from pos_kpi.ratios import RatioSet, validate_full_day_entry
from pos_kpi.records.classify import parse_record
from pos_kpi.records.types import LegacyTotal

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """Contract of the persistent record store.

    ``delete`` is eventually visible: ``query`` may keep returning a deleted
    record for a while after ``delete`` returns.
    """

    def append(self, record: Mapping[str, Any]) -> str:
        ...

    def query(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        employee: Optional[str] = None,
    ) -> list[Mapping[str, Any]]:
        ...

    def delete(self, record_id: str) -> None:
        ...


class KPISession:
    """One user session: a record store, a deletion mask and a config.

    Example:
        >>> session = KPISession(store)
        >>> session.delete("rec-42")
        >>> session.refresh_day(date(2024, 3, 1)).total.net_sales
        120.0

    """

    def __init__(
        self,
        store: RecordStore,
        mask: DeletionMask | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.store = store
        self.mask = mask if mask is not None else DeletionMask()
        self.config = resolve_config(config)

    def record(self, record: Mapping[str, Any]) -> str:
        """Validate a record's shape and append it to the store.

        Raises:
            ClassificationError: If the record is malformed; nothing is written.
        """
        event = parse_record(record, self.config)
        record_id = self.store.append(record)
        logger.info("Recorded %s for %s on %s as %s", type(event).__name__, event.employee, event.day, record_id)
        return record_id

    def record_full_day(self, record: Mapping[str, Any]) -> tuple[str, RatioSet]:
        """Validate and append a manually entered full-day total.

        Returns:
            The new record id and the strictly computed ratios.

        Raises:
            ClassificationError: If the record is not a legacy full-day total.
            ValidationError: If visitors, operations, units or hours is not
                positive; nothing is written.
        """
        event = parse_record(record, self.config)
        if not isinstance(event, LegacyTotal):
            raise ClassificationError(
                f"Record {event.id!r} is a {type(event).__name__}, not a full-day total",
                record_id=event.id,
            )
        ratios = validate_full_day_entry(
            visitors=event.visitor_count,
            operations=event.operation_count,
            units=event.unit_count,
            net_sales=event.gross_sales,
            hours_worked=event.hours_worked,
            decimals=self.config.decimals,
        )
        return self.store.append(record), ratios

    def delete(self, record_id: str) -> None:
        """Tombstone a record, then ask the store to delete it.

        Store errors propagate; the id stays masked for the session either way.
        """
        self.mask.add(record_id)
        self.store.delete(record_id)
        logger.info("Deleted record %s", record_id)

    def delete_day(self, entry: DayHistory) -> None:
        """Delete every record behind one history row."""
        self.mask.add_many(entry.source_record_ids)
        for record_id in entry.source_record_ids:
            self.store.delete(record_id)
        logger.info("Deleted %d record(s) for %s", len(entry.source_record_ids), entry.day)

    def refresh_day(self, day: date) -> DailyAggregation:
        """Query one day from the store and aggregate it."""
        records = self.store.query(start=day, end=day)
        return aggregate_day(records, day=day, mask=self.mask, config=self.config)

    def history(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[DayHistory]:
        """Query a date range from the store and build the history view."""
        records = self.store.query(start=start, end=end)
        return build_daily_history(records, mask=self.mask, config=self.config)
