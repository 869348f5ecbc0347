"""Tests for the ratio calculator and its zero-denominator policies."""

import pytest

from pos_kpi.exceptions import ValidationError
from pos_kpi.ratios import (
    RatioSet,
    ZeroDenominatorPolicy,
    calculate_ratios,
    validate_calculations,
    validate_full_day_entry,
)
from pos_kpi.utils import round_half_away


def test_ratio_formulas() -> None:
    """Conversion, APO, PMV, average ticket and revenue per hour."""
    ratios = calculate_ratios(visitors=20, operations=3, units=4, net_sales=40, hours_worked=8)
    assert ratios == RatioSet(
        conversion=15.0,
        units_per_operation=1.33,
        avg_unit_price=10.0,
        avg_ticket=13.33,
        revenue_per_hour=5.0,
    )


def test_strict_mode_rejects_non_positive_denominators() -> None:
    """FAIL policy raises when any denominator is zero or negative."""
    for kwargs in (
        dict(visitors=0, operations=3, units=4, net_sales=40, hours_worked=8),
        dict(visitors=20, operations=0, units=4, net_sales=40, hours_worked=8),
        dict(visitors=20, operations=3, units=-1, net_sales=40, hours_worked=8),
        dict(visitors=20, operations=3, units=4, net_sales=40, hours_worked=0),
    ):
        with pytest.raises(ValidationError):
            calculate_ratios(**kwargs, on_zero_denominator=ZeroDenominatorPolicy.FAIL)


def test_partial_mode_zeroes_each_ratio_independently() -> None:
    """ZERO policy only zeroes the ratios whose denominator is missing."""
    ratios = calculate_ratios(visitors=0, operations=2, units=3, net_sales=35, hours_worked=0)
    assert ratios.conversion == 0
    assert ratios.revenue_per_hour == 0
    assert ratios.units_per_operation == 1.5
    assert ratios.avg_unit_price == 11.67
    assert ratios.avg_ticket == 17.5


def test_partial_mode_with_no_data_is_all_zero() -> None:
    """An empty day yields zero ratios, never an error."""
    assert calculate_ratios(0, 0, 0, 0, 0) == RatioSet()


def test_round_half_away_from_zero() -> None:
    """Ties round away from zero on the value scaled by 100."""
    assert round_half_away(1.125) == 1.13
    assert round_half_away(-1.125) == -1.13
    assert round_half_away(0.004) == 0.0
    assert round_half_away(2.5, 0) == 3.0
    assert round_half_away(-2.5, 0) == -3.0


def test_round_half_away_does_not_carry_values_below_half() -> None:
    """A scaled value just under .5 rounds down."""
    assert round_half_away(0.004999999999999999) == 0.0
    assert round_half_away(-0.004999999999999999) == 0.0
    assert round_half_away(0.49999999999999994, 0) == 0.0


def test_negative_net_sales_keep_sign() -> None:
    """A day with more refunds than sales has negative money ratios."""
    ratios = calculate_ratios(visitors=10, operations=1, units=1, net_sales=-12.345, hours_worked=2)
    assert ratios.avg_ticket == -12.35 or ratios.avg_ticket == -12.34
    assert ratios.avg_ticket < 0


def test_validate_calculations_cross_check() -> None:
    """avg_ticket ~= units_per_operation * avg_unit_price within 0.01."""
    ratios = calculate_ratios(visitors=40, operations=4, units=8, net_sales=100, hours_worked=5)
    assert ratios.avg_ticket == 25.0
    assert validate_calculations(ratios) is True

    skewed = RatioSet(units_per_operation=2.0, avg_unit_price=12.5, avg_ticket=26.0)
    assert validate_calculations(skewed) is False
    assert validate_calculations(skewed, tolerance=1.5) is True


def test_validate_full_day_entry_is_strict() -> None:
    """Manual full-day entries must carry every denominator."""
    ratios = validate_full_day_entry(visitors=50, operations=10, units=15, net_sales=300, hours_worked=6)
    assert ratios.conversion == 20.0
    assert ratios.revenue_per_hour == 50.0
    with pytest.raises(ValidationError):
        validate_full_day_entry(visitors=50, operations=10, units=15, net_sales=300, hours_worked=0)
