"""Multi-day summaries over aggregated history.

These helpers feed the dashboard: period totals with recomputed ratios,
avg/min/max/total statistics per metric, period-over-period trends and
month-to-date progress against a sales goal.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

import pandas as pd

from pos_kpi.aggregation.combine import sum_aggregates
from pos_kpi.aggregation.types import ADDITIVE_FIELDS, RATIO_FIELDS, DailyAggregate, DayHistory
from pos_kpi.config import RATIO_DECIMALS
from pos_kpi.utils import round_half_away

logger = logging.getLogger(__name__)

SUMMARY_FIELDS = ADDITIVE_FIELDS + RATIO_FIELDS


@dataclass(frozen=True)
class SummaryStats:
    """Average, minimum, maximum and total of one metric, rounded."""

    avg: float = 0.0
    min: float = 0.0
    max: float = 0.0
    total: float = 0.0


@dataclass(frozen=True)
class Trend:
    """Change between two values.

    Attributes:
        percentage: Absolute percentage change, one decimal.
        direction: "positive", "negative" or "neutral".
    """

    percentage: float
    direction: str


def summarize_period(
    aggregates: Sequence[DailyAggregate],
    decimals: int = RATIO_DECIMALS,
) -> DailyAggregate:
    """Sum daily aggregates over a period and recompute the ratios.

    Ratios come from the summed totals with zero-guards, so a period with no
    visitors or operations yields zeros instead of failing.
    """
    return sum_aggregates(list(aggregates), decimals=decimals)


def summary_stats(
    aggregates: Sequence[DailyAggregate],
    field: str,
    decimals: int = RATIO_DECIMALS,
) -> SummaryStats:
    """Average, minimum, maximum and total of one field across aggregates.

    Args:
        aggregates: Daily aggregates, typically the daily totals of a period.
        field: One of the additive or ratio field names.
        decimals: Decimal places kept.

    Returns:
        SummaryStats; all zero when ``aggregates`` is empty.

    Raises:
        ValueError: If ``field`` is not an aggregate metric.

    """
    if field not in SUMMARY_FIELDS:
        raise ValueError(f"Unknown metric '{field}'. Must be one of {list(SUMMARY_FIELDS)}")
    if not aggregates:
        return SummaryStats()

    values = pd.Series([getattr(a, field) or 0 for a in aggregates], dtype="float64")
    return SummaryStats(
        avg=round_half_away(float(values.mean()), decimals),
        min=round_half_away(float(values.min()), decimals),
        max=round_half_away(float(values.max()), decimals),
        total=round_half_away(float(values.sum()), decimals),
    )


def calculate_trend(current: float, previous: float) -> Trend:
    """Percentage change from ``previous`` to ``current``.

    Examples:
        >>> calculate_trend(110, 100)
        Trend(percentage=10.0, direction='positive')
        >>> calculate_trend(5, 0)
        Trend(percentage=0, direction='neutral')

    """
    if previous == 0:
        return Trend(percentage=0, direction="neutral")

    change = (current - previous) / previous * 100
    if change > 0:
        direction = "positive"
    elif change < 0:
        direction = "negative"
    else:
        direction = "neutral"
    return Trend(percentage=round_half_away(abs(change), 1), direction=direction)


def month_to_date_net_sales(history: Iterable[DayHistory], today: date) -> float:
    """Net sales of the days in ``today``'s calendar month."""
    return sum(
        entry.total.net_sales
        for entry in history
        if entry.day.year == today.year and entry.day.month == today.month
    )


def goal_percentage(amount: float, goal: float) -> int:
    """Progress towards a sales goal as a whole percentage; 0 without a goal."""
    if goal <= 0:
        return 0
    return int(round_half_away(amount / goal * 100, 0))


def net_sales_by_employee(history: Iterable[DayHistory]) -> dict[str, float]:
    """Net sales per employee across the history view."""
    totals: dict[str, float] = {}
    for entry in history:
        for aggregate in entry.per_employee:
            totals[aggregate.employee] = totals.get(aggregate.employee, 0.0) + aggregate.net_sales
    logger.debug("Net sales by employee: %s", totals)
    return totals
