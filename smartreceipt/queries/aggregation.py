"""
Spending Aggregation Engine

DESIGN DECISION: Every aggregation is a pure filter + sum over the
full in-memory snapshot. There is no index or running total: one
person's expenses never justify the bookkeeping, and a pure function
of (expenses, today) is trivial to test.

GUARANTEES:
- Inputs are never modified
- Results do not depend on list order
- Sums are Decimal; an empty selection sums to Decimal("0")
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from smartreceipt.models.expense import (
    BudgetSettings,
    DailyPoint,
    DashboardSummary,
    Expense,
    RangeSummary,
)
from smartreceipt.queries.dates import (
    SUNDAY,
    DateInput,
    days_ending,
    in_range,
    parse_date_bound,
    start_of_month,
    start_of_week,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _sum_amounts(expenses: Iterable[Expense]) -> Decimal:
    return sum((expense.amount for expense in expenses), ZERO)


def _total_between(expenses: Iterable[Expense], start: date, end: date) -> Decimal:
    return _sum_amounts(e for e in expenses if in_range(e.date, start, end))


def daily_total(expenses: Iterable[Expense], today: date) -> Decimal:
    """Sum of the expenses dated on `today`."""
    return _sum_amounts(e for e in expenses if e.date == today)


def week_total(
    expenses: Iterable[Expense],
    today: date,
    week_start: int = SUNDAY,
) -> Decimal:
    """
    Sum from the start of the current week through `today`.

    The week starts on Sunday unless another weekday is given
    (`date.weekday()` numbering, Monday is 0).
    """
    return _total_between(expenses, start_of_week(today, week_start), today)


def month_total(expenses: Iterable[Expense], today: date) -> Decimal:
    """Sum from the first of the current month through `today`."""
    return _total_between(expenses, start_of_month(today), today)


def range_summary(
    expenses: Iterable[Expense],
    start_date: DateInput,
    end_date: DateInput,
) -> Optional[RangeSummary]:
    """
    Total and count over the inclusive range [start_date, end_date].

    Returns None when either bound is missing or unparseable; the
    custom range is then simply not active.
    """
    start = parse_date_bound(start_date)
    end = parse_date_bound(end_date)
    if start is None or end is None:
        return None

    selected = [e for e in expenses if in_range(e.date, start, end)]
    return RangeSummary(total=_sum_amounts(selected), count=len(selected))


def last_7_days_series(
    expenses: Iterable[Expense],
    today: date,
    daily_limit: Optional[Decimal] = None,
) -> list[DailyPoint]:
    """
    One point per day from `today - 6` through `today`, oldest first.

    Days without expenses are included with a zero amount. When a
    daily limit is given, each point is flagged if it exceeds it.
    """
    snapshot = list(expenses)
    points = []
    for day in days_ending(today, 7):
        amount = daily_total(snapshot, day)
        points.append(DailyPoint(
            label=day.strftime("%b %d"),
            day=day,
            amount=amount,
            over_limit=(
                daily_limit is not None and is_over_limit(amount, daily_limit)
            ),
        ))
    return points


def is_over_limit(total: Decimal, daily_limit: Decimal) -> bool:
    """Strictly above the limit; spending exactly the limit is on track."""
    return total > daily_limit


def over_limit_percent(total: Decimal, daily_limit: Decimal) -> Optional[Decimal]:
    """
    How far `total` is above the limit, in percent.

    Only meaningful once `is_over_limit` holds. A zero limit has no
    percentage (any spend is "over"), so None is returned and the view
    shows "Over" without a number.
    """
    if daily_limit <= 0:
        return None
    return (Decimal(total) / Decimal(daily_limit) - 1) * HUNDRED


def limit_progress(total: Decimal, daily_limit: Decimal) -> Decimal:
    """Progress bar fill, capped at 100."""
    if daily_limit <= 0:
        return HUNDRED if total > 0 else ZERO
    return min(Decimal(total) / Decimal(daily_limit) * HUNDRED, HUNDRED)


def summarize_dashboard(
    expenses: Iterable[Expense],
    settings: BudgetSettings,
    today: date,
    range_start: DateInput = None,
    range_end: DateInput = None,
    week_start: int = SUNDAY,
) -> DashboardSummary:
    """Compute every dashboard figure from one snapshot."""
    snapshot = list(expenses)
    limit = settings.daily_limit
    spent_today = daily_total(snapshot, today)
    over = is_over_limit(spent_today, limit)

    return DashboardSummary(
        today=today,
        daily_total=spent_today,
        daily_limit=limit,
        is_over_limit=over,
        over_limit_percent=over_limit_percent(spent_today, limit) if over else None,
        limit_progress=limit_progress(spent_today, limit),
        week_total=week_total(snapshot, today, week_start),
        month_total=month_total(snapshot, today),
        last_7_days=last_7_days_series(snapshot, today, daily_limit=limit),
        custom_range=range_summary(snapshot, range_start, range_end),
    )
