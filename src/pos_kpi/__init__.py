"""POS KPI - Daily sales KPIs for a two-person retail corner.

This package turns raw sale records from the record store into per-employee
and combined daily metrics:

- **Conversion**: operations as a percentage of visitors
- **APO**: units per operation
- **PMV**: average unit price
- **Average ticket**: net sales per operation
- **Productivity**: net sales per hour worked

Module Structure:
    pos_kpi.records: Record classification into typed sale events
    pos_kpi.ratios: Ratio calculation (strict and partial modes)
    pos_kpi.aggregation: Per-employee, daily total and history aggregation
    pos_kpi.masking: Session-scoped deletion mask
    pos_kpi.session: Record store contract and session glue

Quick Start:
    >>> from pos_kpi import DeletionMask, aggregate_day, build_daily_history
    >>>
    >>> mask = DeletionMask()
    >>> today = aggregate_day(records_for_today, mask=mask)
    >>> print(today.total.conversion, today.for_employee("Ingrid").avg_ticket)
    >>>
    >>> # History view, newest day first
    >>> history = build_daily_history(last_30_records, mask=mask)
    >>> history[0].source_record_ids  # ids to delete a whole day
"""

__version__ = "0.3.0"

from pos_kpi.aggregation.types import (
    DailyAggregation,
    DailyEmployeeAggregate,
    DailyTotalAggregate,
    DayHistory,
)
from pos_kpi.api import aggregate_day, build_daily_history, history_frame
from pos_kpi.config import EngineConfig
from pos_kpi.exceptions import ClassificationError, ConfigError, PosKPIError, ValidationError
from pos_kpi.masking import DeletionMask
from pos_kpi.ratios import RatioSet, ZeroDenominatorPolicy, calculate_ratios
from pos_kpi.session import KPISession, RecordStore

__all__ = [
    "ClassificationError",
    "ConfigError",
    "DailyAggregation",
    "DailyEmployeeAggregate",
    "DailyTotalAggregate",
    "DayHistory",
    "DeletionMask",
    "EngineConfig",
    "KPISession",
    "PosKPIError",
    "RatioSet",
    "RecordStore",
    "ValidationError",
    "ZeroDenominatorPolicy",
    "__version__",
    "aggregate_day",
    "build_daily_history",
    "calculate_ratios",
    "history_frame",
]
