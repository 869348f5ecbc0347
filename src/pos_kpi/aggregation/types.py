"""Aggregate result types.

Aggregates are derived values: immutable, with no identity of their own, and
recomputed from the record set on every call.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any

from pos_kpi.ratios import RatioSet

# Fields summed when combining aggregates
ADDITIVE_FIELDS = (
    "operations",
    "units",
    "gross_sales",
    "refunds",
    "net_sales",
    "visitors",
    "hours_worked",
)

RATIO_FIELDS = (
    "conversion",
    "units_per_operation",
    "avg_unit_price",
    "avg_ticket",
    "revenue_per_hour",
)


@dataclass(frozen=True)
class DailyAggregate:
    """Totals and ratios for one calendar day.

    Attributes:
        day: The calendar day, or None for a multi-day period summary.
        operations: Number of tickets.
        units: Items sold.
        gross_sales: Sales before refunds.
        refunds: Refunds, including adjustment refund deltas.
        net_sales: Revenue after refunds and adjustments.
        visitors: Visitor count from the shift close.
        hours_worked: Hours from the shift close.
        has_close: Whether the shift close is in (for a total: both closes).
    """

    day: date | None
    operations: int
    units: int
    gross_sales: float
    refunds: float
    net_sales: float
    visitors: int
    hours_worked: float
    has_close: bool
    conversion: float
    units_per_operation: float
    avg_unit_price: float
    avg_ticket: float
    revenue_per_hour: float

    @property
    def ratios(self) -> RatioSet:
        return RatioSet(**{name: getattr(self, name) for name in RATIO_FIELDS})

    @property
    def has_activity(self) -> bool:
        """True once there is at least one operation or a shift close."""
        return self.operations > 0 or self.has_close

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DailyTotalAggregate(DailyAggregate):
    """Both employees combined; ratios recomputed from the summed fields."""


@dataclass(frozen=True)
class DailyEmployeeAggregate(DailyAggregate):
    """One employee's day."""

    employee: str

    @classmethod
    def empty(cls, employee: str, day: date | None) -> DailyEmployeeAggregate:
        """Aggregate of an employee with no records for the day."""
        return cls(
            day=day,
            operations=0,
            units=0,
            gross_sales=0.0,
            refunds=0.0,
            net_sales=0.0,
            visitors=0,
            hours_worked=0.0,
            has_close=False,
            employee=employee,
            **RatioSet().to_dict(),
        )


@dataclass(frozen=True)
class DailyAggregation:
    """Result of aggregating one day: both employees plus the combined total.

    Attributes:
        day: The calendar day.
        employees: Per-employee aggregates, in roster order.
        total: Combined aggregate.
    """

    day: date
    employees: tuple[DailyEmployeeAggregate, DailyEmployeeAggregate]
    total: DailyTotalAggregate

    def for_employee(self, employee: str) -> DailyEmployeeAggregate:
        for aggregate in self.employees:
            if aggregate.employee == employee:
                return aggregate
        raise KeyError(employee)


@dataclass(frozen=True)
class DayHistory:
    """One row of the multi-day history view.

    Attributes:
        day: The calendar day.
        per_employee: Aggregates of the employees with activity that day.
        total: Combined aggregate for the day.
        source_record_ids: Ids of every unmasked record of the day, used to
            delete a whole day.
    """

    day: date
    per_employee: tuple[DailyEmployeeAggregate, ...]
    total: DailyTotalAggregate
    source_record_ids: tuple[str, ...] = field(default_factory=tuple)
