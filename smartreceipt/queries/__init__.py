"""Aggregation and history query package."""

from smartreceipt.queries.aggregation import (
    daily_total,
    is_over_limit,
    last_7_days_series,
    limit_progress,
    month_total,
    over_limit_percent,
    range_summary,
    summarize_dashboard,
    week_total,
)
from smartreceipt.queries.dates import (
    MONDAY,
    SUNDAY,
    describe_range,
    parse_date_bound,
    start_of_month,
    start_of_week,
)
from smartreceipt.queries.history import filter_history, matches_search

__all__ = [
    "MONDAY",
    "SUNDAY",
    "daily_total",
    "describe_range",
    "filter_history",
    "is_over_limit",
    "last_7_days_series",
    "limit_progress",
    "matches_search",
    "month_total",
    "over_limit_percent",
    "parse_date_bound",
    "range_summary",
    "start_of_month",
    "start_of_week",
    "summarize_dashboard",
    "week_total",
]
