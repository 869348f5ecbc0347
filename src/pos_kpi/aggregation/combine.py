"""Combine the two per-employee aggregates of a day into a daily total."""

from __future__ import annotations

import logging
import math

from pos_kpi.aggregation.types import DailyAggregate, DailyEmployeeAggregate, DailyTotalAggregate
from pos_kpi.config import RATIO_DECIMALS
from pos_kpi.ratios import ZeroDenominatorPolicy, calculate_ratios

logger = logging.getLogger(__name__)


def combine_daily_totals(
    first: DailyEmployeeAggregate,
    second: DailyEmployeeAggregate,
    decimals: int = RATIO_DECIMALS,
) -> DailyTotalAggregate:
    """Sum two employee aggregates and recompute the ratios from the sums.

    Ratios are never averaged: two conversion rates over different visitor
    counts do not average into the combined rate.

    Args:
        first: Aggregate of the first employee.
        second: Aggregate of the second employee.
        decimals: Decimal places kept on the ratios.

    Returns:
        DailyTotalAggregate whose additive fields equal the sum of both
        inputs' fields; ``has_close`` only when both employees closed.

    Raises:
        ValueError: If the aggregates belong to different days.

    """
    if first.day != second.day:
        raise ValueError(f"Cannot combine aggregates of different days: {first.day} and {second.day}")

    operations = first.operations + second.operations
    units = first.units + second.units
    net_sales = first.net_sales + second.net_sales
    visitors = first.visitors + second.visitors
    hours_worked = first.hours_worked + second.hours_worked

    ratios = calculate_ratios(
        visitors=visitors,
        operations=operations,
        units=units,
        net_sales=net_sales,
        hours_worked=hours_worked,
        on_zero_denominator=ZeroDenominatorPolicy.ZERO,
        decimals=decimals,
    )
    return DailyTotalAggregate(
        day=first.day,
        operations=operations,
        units=units,
        gross_sales=first.gross_sales + second.gross_sales,
        refunds=first.refunds + second.refunds,
        net_sales=net_sales,
        visitors=visitors,
        hours_worked=hours_worked,
        has_close=first.has_close and second.has_close,
        **ratios.to_dict(),
    )


def sum_aggregates(
    aggregates: list[DailyAggregate],
    decimals: int = RATIO_DECIMALS,
) -> DailyTotalAggregate:
    """Sum any number of aggregates (typically several days) into one.

    The result has ``day=None`` unless every input shares the same day.
    ``has_close`` is true only if every input has it. An empty list yields an
    all-zero aggregate.
    """
    days = {a.day for a in aggregates}
    day = days.pop() if len(days) == 1 else None

    operations = sum(a.operations for a in aggregates)
    units = sum(a.units for a in aggregates)
    net_sales = math.fsum(a.net_sales for a in aggregates)
    visitors = sum(a.visitors for a in aggregates)
    hours_worked = math.fsum(a.hours_worked for a in aggregates)

    ratios = calculate_ratios(
        visitors=visitors,
        operations=operations,
        units=units,
        net_sales=net_sales,
        hours_worked=hours_worked,
        on_zero_denominator=ZeroDenominatorPolicy.ZERO,
        decimals=decimals,
    )
    logger.debug("Summed %d aggregate(s)", len(aggregates))
    return DailyTotalAggregate(
        day=day,
        operations=operations,
        units=units,
        gross_sales=math.fsum(a.gross_sales for a in aggregates),
        refunds=math.fsum(a.refunds for a in aggregates),
        net_sales=net_sales,
        visitors=visitors,
        hours_worked=hours_worked,
        has_close=bool(aggregates) and all(a.has_close for a in aggregates),
        **ratios.to_dict(),
    )
