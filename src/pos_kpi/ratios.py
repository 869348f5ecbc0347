"""Derived KPI ratios.

The five ratios are computed by one function. How a zero denominator is
handled is an explicit policy:

- ``ZeroDenominatorPolicy.FAIL`` (strict): raise ValidationError when any of
  visitors, operations, units or hours worked is not positive. Used to
  validate a manually entered full-day record.
- ``ZeroDenominatorPolicy.ZERO`` (partial): each ratio falls back to 0 on its
  own when its denominator is not positive. Used during daily aggregation so
  a day stays displayable before the shift close arrives.

Examples:
    >>> from pos_kpi.ratios import calculate_ratios
    >>> calculate_ratios(visitors=20, operations=3, units=4, net_sales=40, hours_worked=8)
    RatioSet(conversion=15.0, units_per_operation=1.33, avg_unit_price=10.0, avg_ticket=13.33, revenue_per_hour=5.0)

"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import Enum

from pos_kpi.config import CROSS_CHECK_TOLERANCE, RATIO_DECIMALS
from pos_kpi.exceptions import ValidationError
from pos_kpi.utils import round_half_away

logger = logging.getLogger(__name__)


class ZeroDenominatorPolicy(str, Enum):
    """What calculate_ratios does with a non-positive denominator."""

    FAIL = "fail"
    ZERO = "zero"


@dataclass(frozen=True)
class RatioSet:
    """The five derived KPIs, rounded.

    Attributes:
        conversion: Operations as a percentage of visitors.
        units_per_operation: Average items per ticket (APO).
        avg_unit_price: Net sales per unit sold (PMV).
        avg_ticket: Net sales per operation.
        revenue_per_hour: Net sales per hour worked.
    """

    conversion: float = 0.0
    units_per_operation: float = 0.0
    avg_unit_price: float = 0.0
    avg_ticket: float = 0.0
    revenue_per_hour: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


ZERO_RATIOS = RatioSet()


def _ratio(numerator: float, denominator: float, decimals: int) -> float:
    if denominator <= 0:
        return 0.0
    return round_half_away(numerator / denominator, decimals)


def calculate_ratios(
    visitors: float,
    operations: float,
    units: float,
    net_sales: float,
    hours_worked: float,
    on_zero_denominator: ZeroDenominatorPolicy = ZeroDenominatorPolicy.ZERO,
    decimals: int = RATIO_DECIMALS,
) -> RatioSet:
    """Compute conversion, APO, PMV, average ticket and revenue per hour.

    Args:
        visitors: Visitor count for the period.
        operations: Number of tickets.
        units: Number of items sold.
        net_sales: Net revenue.
        hours_worked: Hours worked.
        on_zero_denominator: FAIL to raise on a non-positive denominator,
            ZERO to default each affected ratio to 0.
        decimals: Decimal places kept, rounding ties away from zero.

    Returns:
        RatioSet with every value rounded.

    Raises:
        ValidationError: In FAIL mode, if any of visitors, operations, units or
            hours_worked is <= 0.

    """
    if on_zero_denominator is ZeroDenominatorPolicy.FAIL:
        invalid = {
            name: value
            for name, value in (
                ("visitors", visitors),
                ("operations", operations),
                ("units", units),
                ("hours_worked", hours_worked),
            )
            if value <= 0
        }
        if invalid:
            raise ValidationError(
                f"All of visitors, operations, units and hours_worked must be greater "
                f"than 0, got {invalid}"
            )

    return RatioSet(
        conversion=_ratio(operations * 100, visitors, decimals),
        units_per_operation=_ratio(units, operations, decimals),
        avg_unit_price=_ratio(net_sales, units, decimals),
        avg_ticket=_ratio(net_sales, operations, decimals),
        revenue_per_hour=_ratio(net_sales, hours_worked, decimals),
    )


def validate_calculations(ratios: RatioSet, tolerance: float = CROSS_CHECK_TOLERANCE) -> bool:
    """Cross-check that avg_ticket ~= units_per_operation * avg_unit_price.

    The identity holds exactly before rounding. After rounding to two
    decimals it can drift past the tolerance when avg_unit_price is large,
    and it is not expected to hold for a legacy total mixed with partial
    fallback ratios. Callers use the result as a flag, not as a gate.

    Args:
        ratios: A computed RatioSet.
        tolerance: Maximum absolute difference accepted.

    Returns:
        True if the difference is below tolerance.

    """
    expected = ratios.units_per_operation * ratios.avg_unit_price
    ok = abs(ratios.avg_ticket - expected) < tolerance
    if not ok:
        logger.debug(
            "Cross-check failed: avg_ticket=%s, units_per_operation*avg_unit_price=%s",
            ratios.avg_ticket,
            expected,
        )
    return ok


def validate_full_day_entry(
    visitors: float,
    operations: float,
    units: float,
    net_sales: float,
    hours_worked: float,
    decimals: int = RATIO_DECIMALS,
) -> RatioSet:
    """Strict ratios for a manually entered full-day record.

    Raises:
        ValidationError: If any denominator is not positive.

    """
    return calculate_ratios(
        visitors=visitors,
        operations=operations,
        units=units,
        net_sales=net_sales,
        hours_worked=hours_worked,
        on_zero_denominator=ZeroDenominatorPolicy.FAIL,
        decimals=decimals,
    )
