"""Public API for the KPI aggregation engine.

This module provides the entry points the presentation layer calls with the
records fetched from the store. Both entry points:

- filter the input through the DeletionMask first,
- treat the input as a set (a record id seen twice counts once; two
  differing versions of one id are a ClassificationError),
- raise ClassificationError for malformed records,
- do NOT read or write anything: all I/O belongs to the record store.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any, Union

import pandas as pd

from pos_kpi.aggregation.combine import combine_daily_totals
from pos_kpi.aggregation.employee import aggregate_employee_day
from pos_kpi.aggregation.history import deduplicate_history, first_per_key
from pos_kpi.aggregation.types import (
    ADDITIVE_FIELDS,
    RATIO_FIELDS,
    DailyAggregation,
    DayHistory,
)
from pos_kpi.config import EngineConfig, resolve_config
from pos_kpi.exceptions import ClassificationError
from pos_kpi.masking import DeletionMask
from pos_kpi.records.classify import parse_record
from pos_kpi.records.types import LegacyTotal, SaleEvent, kind_of

logger = logging.getLogger(__name__)

HISTORY_COLUMNS = ["day", "scope", *ADDITIVE_FIELDS, "has_close", *RATIO_FIELDS, "n_records"]

Record = Union[Mapping[str, Any], SaleEvent]


def prepare_events(
    records: Iterable[Record],
    mask: DeletionMask | None = None,
    config: EngineConfig | None = None,
) -> list[SaleEvent]:
    """Mask, de-duplicate by id, and classify records.

    Args:
        records: Raw store mappings and/or already typed events.
        mask: Session deletion mask. None means nothing is masked.
        config: Engine configuration.

    Returns:
        Typed events in input order.

    Raises:
        ClassificationError: If any surviving record is malformed, or the
            same id appears with different contents.

    """
    config = resolve_config(config)
    records = list(records)
    if mask is not None:
        visible = mask.filter(records)
        if len(visible) != len(records):
            logger.debug("Masked %d deleted record(s)", len(records) - len(visible))
        records = visible

    events = [r if not isinstance(r, Mapping) else parse_record(r, config) for r in records]

    by_id: dict[str, SaleEvent] = {}
    for event in events:
        seen = by_id.setdefault(event.id, event)
        if seen != event:
            raise ClassificationError(
                f"Record {event.id} was returned in two different versions "
                f"({kind_of(seen).value} and {kind_of(event).value})",
                record_id=event.id,
            )

    unique = first_per_key(events, lambda e: e.id)
    if len(unique) != len(events):
        logger.warning("Ignoring %d repeated record id(s)", len(events) - len(unique))
    return unique


def _aggregate_events_for_day(
    events: list[SaleEvent],
    day: date,
    config: EngineConfig,
) -> DailyAggregation:
    first, second = (aggregate_employee_day(events, emp, day, config) for emp in config.employees)
    total = combine_daily_totals(first, second, decimals=config.decimals)
    return DailyAggregation(day=day, employees=(first, second), total=total)


def aggregate_day(
    records: Iterable[Record],
    day: date | None = None,
    mask: DeletionMask | None = None,
    config: EngineConfig | None = None,
) -> DailyAggregation:
    """Aggregate one calendar day for both employees and combined.

    Args:
        records: The day's records as returned by the store.
        day: Day to aggregate. Records of other days are ignored. If None,
            the records must all fall on a single day.
        mask: Session deletion mask.
        config: Engine configuration.

    Returns:
        DailyAggregation with both employee aggregates (roster order) and the
        combined total.

    Raises:
        ClassificationError: If a record is malformed.
        ValueError: If ``day`` is None and the records span zero or several
            days.

    Examples:
        >>> from pos_kpi import aggregate_day
        >>> result = aggregate_day([
        ...     {"id": "1", "tipo": "unitaria", "empleada": "Ingrid",
        ...      "fecha": "2024-03-01", "articulos": 2, "venta": 30},
        ... ])
        >>> result.total.net_sales
        30.0

    """
    config = resolve_config(config)
    events = prepare_events(records, mask, config)

    if day is None:
        days = sorted({e.day for e in events})
        if len(days) != 1:
            raise ValueError(
                f"Records span {len(days)} day(s); pass 'day' explicitly "
                f"or use build_daily_history()"
            )
        day = days[0]

    logger.info("Aggregating %d record(s) for %s", len(events), day)
    return _aggregate_events_for_day(events, day, config)


def build_daily_history(
    records: Iterable[Record],
    mask: DeletionMask | None = None,
    config: EngineConfig | None = None,
    *,
    deduplicate_legacy: bool = True,
) -> list[DayHistory]:
    """Group records by calendar day and aggregate each day.

    Args:
        records: Records spanning any number of days, in the caller's
            priority order (the store returns newest first).
        mask: Session deletion mask.
        config: Engine configuration.
        deduplicate_legacy: Keep only the first legacy total per
            (employee, day) before grouping.

    Returns:
        One DayHistory per day, newest day first. ``source_record_ids``
        lists every unmasked record of the day, including legacy duplicates
        dropped from the computation, so deleting a day removes them too.

    Raises:
        ClassificationError: If a record is malformed.

    """
    config = resolve_config(config)
    events = prepare_events(records, mask, config)

    ids_by_day: dict[date, list[str]] = {}
    for event in events:
        ids_by_day.setdefault(event.day, []).append(event.id)

    if deduplicate_legacy:
        legacy = [e for e in events if isinstance(e, LegacyTotal)]
        kept_legacy = {e.id for e in deduplicate_history(legacy)}
        computed = [e for e in events if not isinstance(e, LegacyTotal) or e.id in kept_legacy]
        if len(computed) != len(events):
            logger.info("Dropped %d duplicate legacy total(s)", len(events) - len(computed))
    else:
        computed = events

    events_by_day: dict[date, list[SaleEvent]] = {day: [] for day in ids_by_day}
    for event in computed:
        events_by_day[event.day].append(event)

    history = []
    for day in sorted(events_by_day, reverse=True):
        aggregation = _aggregate_events_for_day(events_by_day[day], day, config)
        history.append(
            DayHistory(
                day=day,
                per_employee=tuple(a for a in aggregation.employees if a.has_activity),
                total=aggregation.total,
                source_record_ids=tuple(ids_by_day[day]),
            )
        )

    logger.info("Built history for %d day(s) from %d record(s)", len(history), len(events))
    return history


def history_frame(history: Iterable[DayHistory]) -> pd.DataFrame:
    """Flatten a history view into a DataFrame for export collaborators.

    One row per day for the total (``scope="total"``) followed by one row per
    active employee (``scope=<employee>``).

    Returns:
        DataFrame with columns HISTORY_COLUMNS.

    """
    rows = []
    for entry in history:
        for scope, aggregate in [("total", entry.total)] + [
            (a.employee, a) for a in entry.per_employee
        ]:
            row = {name: getattr(aggregate, name) for name in HISTORY_COLUMNS[2:-1]}
            row.update(day=entry.day, scope=scope, n_records=len(entry.source_record_ids))
            rows.append(row)

    if not rows:
        return pd.DataFrame(columns=HISTORY_COLUMNS)

    df = pd.DataFrame(rows, columns=HISTORY_COLUMNS)
    df["day"] = pd.to_datetime(df["day"])
    return df
