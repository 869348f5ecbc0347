"""Tests for the daily total combiner and the aggregate_day entry point."""

import random
from datetime import date

import pytest

from pos_kpi import aggregate_day
from pos_kpi.aggregation import DailyEmployeeAggregate, combine_daily_totals
from pos_kpi.aggregation.types import ADDITIVE_FIELDS
from pos_kpi.exceptions import ClassificationError
from tests.test_utils import (
    legacy_total,
    refund,
    scenario_a_records,
    scenario_b_records,
    turn_close,
    unit_sale,
)

DAY = date(2024, 3, 1)


class TestCombineDailyTotals:
    """Combining Ingrid (scenario A) and Marta (scenario B) on one day."""

    @pytest.fixture
    def mixed_day_records(self) -> list[dict]:
        return scenario_a_records() + scenario_b_records()

    def test_additive_fields_are_summed(self, mixed_day_records: list[dict]) -> None:
        """Every additive field of the total equals the sum of both employees'."""
        result = aggregate_day(mixed_day_records)
        ingrid, marta = result.employees
        for name in ADDITIVE_FIELDS:
            assert getattr(result.total, name) == getattr(ingrid, name) + getattr(marta, name), name

        assert result.total.operations == 15
        assert result.total.units == 24
        assert result.total.net_sales == 500
        assert result.total.refunds == 75
        assert result.total.visitors == 60
        assert result.total.hours_worked == 16

    def test_ratios_come_from_sums_not_averages(self, mixed_day_records: list[dict]) -> None:
        """Combined conversion is 15 ops over 60 visitors, not the mean of 15% and 30%."""
        total = aggregate_day(mixed_day_records).total
        assert total.conversion == 25.0
        assert total.units_per_operation == 1.6
        assert total.avg_unit_price == 20.83
        assert total.avg_ticket == 33.33
        assert total.revenue_per_hour == 31.25

    def test_has_close_requires_both_employees(self) -> None:
        """The day is closed only once both employees have closed."""
        one_closed = aggregate_day(scenario_a_records() + [unit_sale("m1", employee="Marta")])
        assert one_closed.for_employee("Ingrid").has_close is True
        assert one_closed.for_employee("Marta").has_close is False
        assert one_closed.total.has_close is False

        both_closed = aggregate_day(scenario_a_records() + [turn_close("m2", employee="Marta")])
        assert both_closed.total.has_close is True

    def test_employees_follow_roster_order(self, mixed_day_records: list[dict]) -> None:
        result = aggregate_day(mixed_day_records[::-1])
        assert [a.employee for a in result.employees] == ["Ingrid", "Marta"]
        with pytest.raises(KeyError):
            result.for_employee("Laura")


def test_combine_rejects_different_days() -> None:
    """Aggregates of different days cannot be combined."""
    first = DailyEmployeeAggregate.empty("Ingrid", date(2024, 3, 1))
    second = DailyEmployeeAggregate.empty("Marta", date(2024, 3, 2))
    with pytest.raises(ValueError):
        combine_daily_totals(first, second)


def test_combine_empty_day() -> None:
    """Two empty aggregates combine into an all-zero, unclosed total."""
    total = combine_daily_totals(
        DailyEmployeeAggregate.empty("Ingrid", DAY),
        DailyEmployeeAggregate.empty("Marta", DAY),
    )
    assert total.day == DAY
    assert total.operations == 0
    assert total.conversion == 0
    assert total.has_close is False


def test_aggregate_day_is_idempotent_under_shuffle() -> None:
    """aggregate(R) == aggregate(shuffle(R)) for the full two-employee day."""
    records = (
        scenario_a_records()
        + scenario_b_records()
        + [refund("x1", employee="Ingrid", amount=0.1), unit_sale("x2", amount=0.2)]
    )
    expected = aggregate_day(records)
    rng = random.Random(7)
    for _ in range(20):
        shuffled = records[:]
        rng.shuffle(shuffled)
        assert aggregate_day(shuffled) == expected
    assert aggregate_day(records) == expected


def test_repeated_record_counts_once() -> None:
    """The same record returned twice by the store is aggregated once."""
    records = scenario_a_records()
    result = aggregate_day(records + [records[0]])
    assert result.for_employee("Ingrid").operations == 3


@pytest.mark.parametrize(
    "records",
    [
        [unit_sale("dup", amount=10), unit_sale("dup", amount=20)],
        [unit_sale("dup", amount=20), unit_sale("dup", amount=10)],
        [unit_sale("dup", amount=10), refund("dup", amount=10)],
    ],
)
def test_conflicting_versions_of_one_id_are_rejected(records: list[dict]) -> None:
    """Two different versions of one record fail whatever their order."""
    with pytest.raises(ClassificationError) as excinfo:
        aggregate_day(records)
    assert excinfo.value.record_id == "dup"


def test_aggregate_day_requires_single_day_or_explicit_day() -> None:
    """Without an explicit day the records must share one day."""
    records = [unit_sale("s1"), unit_sale("s2", day="2024-03-02", amount=40)]
    with pytest.raises(ValueError):
        aggregate_day(records)
    with pytest.raises(ValueError):
        aggregate_day([])

    second_day = aggregate_day(records, day=date(2024, 3, 2))
    assert second_day.total.net_sales == 40

    empty = aggregate_day([], day=DAY)
    assert empty.total.operations == 0


def test_classification_errors_propagate() -> None:
    """A malformed record fails the aggregation call."""
    records = scenario_a_records() + [{"id": "bad", "tipo": "regalo", "empleada": "Ingrid", "fecha": "2024-03-01"}]
    with pytest.raises(ClassificationError) as excinfo:
        aggregate_day(records)
    assert excinfo.value.record_id == "bad"


def test_legacy_and_events_mixed_across_employees() -> None:
    """One employee on the legacy path, the other event-sourced, same day."""
    result = aggregate_day([legacy_total("l1", employee="Ingrid", sales=200, refunds=0)] + scenario_b_records())
    assert result.for_employee("Ingrid").net_sales == 200
    assert result.for_employee("Marta").net_sales == 460
    assert result.total.net_sales == 660
    assert result.total.has_close is True
