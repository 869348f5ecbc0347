"""Per-employee daily aggregation.

Folds one calendar day's sale events for one employee into a
DailyEmployeeAggregate. Two paths exist:

- **Legacy path**: a LegacyTotal for the employee/day is authoritative for
  visitors, operations, units, gross sales and hours. Refund events recorded
  separately for the same pair are still merged in additively. This bridges
  historical data migrated from the one-row-per-day format.
- **Event-sourced path**: totals are folded from unit sales, refunds,
  adjustments and the shift close.

Every total is a fresh fold over the input (``math.fsum`` for money), so the
result does not depend on input order.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from datetime import date
from typing import TypeVar

from pos_kpi.aggregation.types import DailyEmployeeAggregate
from pos_kpi.config import EngineConfig, resolve_config
from pos_kpi.ratios import RatioSet, ZeroDenominatorPolicy, calculate_ratios
from pos_kpi.records.types import (
    Adjustment,
    LegacyTotal,
    Refund,
    SaleEvent,
    TurnClose,
    UnitSale,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", LegacyTotal, TurnClose)


def _pick_single(events: Sequence[E], employee: str, day: date) -> E:
    """Choose one of several records that should be unique per employee/day.

    The lowest id wins so the choice does not depend on input order.
    """
    chosen = min(events, key=lambda e: e.id)
    if len(events) > 1:
        logger.warning(
            "%d %s records for %s on %s; using %s",
            len(events),
            type(chosen).__name__,
            employee,
            day,
            chosen.id,
        )
    return chosen


def _build(
    employee: str,
    day: date,
    *,
    operations: int,
    units: int,
    gross_sales: float,
    refunds: float,
    net_sales: float,
    visitors: int,
    hours_worked: float,
    has_close: bool,
    ratios: RatioSet,
) -> DailyEmployeeAggregate:
    return DailyEmployeeAggregate(
        day=day,
        operations=operations,
        units=units,
        gross_sales=gross_sales,
        refunds=refunds,
        net_sales=net_sales,
        visitors=visitors,
        hours_worked=hours_worked,
        has_close=has_close,
        employee=employee,
        **ratios.to_dict(),
    )


def _aggregate_legacy(
    legacy: LegacyTotal,
    refunds: Sequence[Refund],
    employee: str,
    day: date,
    decimals: int,
) -> DailyEmployeeAggregate:
    """Legacy total plus separately recorded refunds.

    The legacy ``gross_sales`` is stored already net of the record's own
    refunds, so only the separate refund events are subtracted from it.
    """
    extra_refunds = math.fsum(r.amount for r in refunds)
    net_sales = legacy.gross_sales - extra_refunds
    ratios = calculate_ratios(
        visitors=legacy.visitor_count,
        operations=legacy.operation_count,
        units=legacy.unit_count,
        net_sales=net_sales,
        hours_worked=legacy.hours_worked,
        on_zero_denominator=ZeroDenominatorPolicy.ZERO,
        decimals=decimals,
    )
    return _build(
        employee,
        day,
        operations=legacy.operation_count,
        units=legacy.unit_count,
        gross_sales=legacy.reported_gross or legacy.gross_sales,
        refunds=legacy.refunds + extra_refunds,
        net_sales=net_sales,
        visitors=legacy.visitor_count,
        hours_worked=legacy.hours_worked,
        has_close=True,
        ratios=ratios,
    )


def _aggregate_events(
    sales: Sequence[UnitSale],
    refunds: Sequence[Refund],
    adjustments: Sequence[Adjustment],
    close: TurnClose | None,
    employee: str,
    day: date,
    decimals: int,
) -> DailyEmployeeAggregate:
    operations = len(sales)
    units = sum(s.item_count for s in sales)
    gross_sales = math.fsum(s.amount for s in sales)
    event_refunds = math.fsum(r.amount for r in refunds)
    sales_delta = math.fsum(a.sales_delta for a in adjustments)
    refund_delta = math.fsum(a.refund_delta for a in adjustments)

    net_sales = gross_sales - event_refunds + sales_delta - refund_delta
    visitors = close.visitor_count if close is not None else 0
    hours_worked = close.hours_worked if close is not None else 0.0

    if operations > 0 and units > 0 and visitors > 0 and hours_worked > 0:
        policy = ZeroDenominatorPolicy.FAIL
    else:
        policy = ZeroDenominatorPolicy.ZERO
    ratios = calculate_ratios(
        visitors=visitors,
        operations=operations,
        units=units,
        net_sales=net_sales,
        hours_worked=hours_worked,
        on_zero_denominator=policy,
        decimals=decimals,
    )
    return _build(
        employee,
        day,
        operations=operations,
        units=units,
        gross_sales=gross_sales,
        refunds=event_refunds + refund_delta,
        net_sales=net_sales,
        visitors=visitors,
        hours_worked=hours_worked,
        has_close=close is not None,
        ratios=ratios,
    )


def aggregate_employee_day(
    events: Iterable[SaleEvent],
    employee: str,
    day: date,
    config: EngineConfig | None = None,
) -> DailyEmployeeAggregate:
    """Aggregate one employee's sale events for one calendar day.

    Events of other employees or other days are ignored, so a whole day's
    event list can be passed for each employee in turn. Tombstoned records
    must already have been removed.

    Args:
        events: Typed sale events.
        employee: The employee to aggregate.
        day: The calendar day to aggregate.
        config: Engine configuration (ratio decimals).

    Returns:
        DailyEmployeeAggregate for the employee and day. Missing denominators
        never raise: the affected ratios are 0.

    """
    config = resolve_config(config)

    sales: list[UnitSale] = []
    refunds: list[Refund] = []
    adjustments: list[Adjustment] = []
    closes: list[TurnClose] = []
    legacy: list[LegacyTotal] = []

    for event in events:
        if event.employee != employee or event.day != day:
            continue
        if isinstance(event, UnitSale):
            sales.append(event)
        elif isinstance(event, Refund):
            refunds.append(event)
        elif isinstance(event, Adjustment):
            adjustments.append(event)
        elif isinstance(event, TurnClose):
            closes.append(event)
        elif isinstance(event, LegacyTotal):
            legacy.append(event)
        else:
            raise TypeError(f"not a sale event: {event!r}")

    if not (sales or refunds or adjustments or closes or legacy):
        return DailyEmployeeAggregate.empty(employee, day)

    if legacy:
        record = _pick_single(legacy, employee, day)
        ignored = len(sales) + len(adjustments) + len(closes)
        if ignored:
            logger.debug(
                "Legacy total %s supersedes %d event record(s) for %s on %s",
                record.id,
                ignored,
                employee,
                day,
            )
        return _aggregate_legacy(record, refunds, employee, day, config.decimals)

    close = _pick_single(closes, employee, day) if closes else None
    return _aggregate_events(sales, refunds, adjustments, close, employee, day, config.decimals)
