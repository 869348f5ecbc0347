"""Aggregation of sale events into daily KPIs.

- **aggregate_employee_day**: one employee, one calendar day
- **combine_daily_totals**: both employees, ratios recomputed from sums
- **deduplicate_history**: first-write-wins per (employee, day)
- **summarize_period** / **summary_stats**: multi-day summaries
"""

from pos_kpi.aggregation.combine import combine_daily_totals, sum_aggregates
from pos_kpi.aggregation.employee import aggregate_employee_day
from pos_kpi.aggregation.history import deduplicate_history, unify_daily_records
from pos_kpi.aggregation.summary import (
    SummaryStats,
    Trend,
    calculate_trend,
    goal_percentage,
    month_to_date_net_sales,
    net_sales_by_employee,
    summarize_period,
    summary_stats,
)
from pos_kpi.aggregation.types import (
    DailyAggregate,
    DailyAggregation,
    DailyEmployeeAggregate,
    DailyTotalAggregate,
    DayHistory,
)

__all__ = [
    "DailyAggregate",
    "DailyAggregation",
    "DailyEmployeeAggregate",
    "DailyTotalAggregate",
    "DayHistory",
    "SummaryStats",
    "Trend",
    "aggregate_employee_day",
    "calculate_trend",
    "combine_daily_totals",
    "deduplicate_history",
    "goal_percentage",
    "month_to_date_net_sales",
    "net_sales_by_employee",
    "sum_aggregates",
    "summarize_period",
    "summary_stats",
    "unify_daily_records",
]
