"""
History Filter Engine

Produces the History view from raw filter inputs: a free-text search
over merchant and category, an optional inclusive date range, newest
first.
"""

from decimal import Decimal
from typing import Iterable

from smartreceipt.models.expense import Expense, HistoryResult
from smartreceipt.queries.dates import DateInput, in_range, parse_date_bound


def matches_search(expense: Expense, search_term: str) -> bool:
    """
    Case-insensitive substring match on merchant or category.

    The term is used as typed (not trimmed); an empty term matches.
    """
    needle = search_term.lower()
    return needle in expense.merchant.lower() or needle in expense.category.lower()


def filter_history(
    expenses: Iterable[Expense],
    search_term: str = "",
    start_date: DateInput = None,
    end_date: DateInput = None,
) -> HistoryResult:
    """
    Filter and sort expenses for the History view.

    The date range only applies when both bounds parse; a missing or
    malformed bound switches the date filter off instead of raising.
    Results are sorted by date descending. Python's sort is stable,
    so expenses on the same day keep their stored order.
    """
    term = search_term or ""
    start = parse_date_bound(start_date)
    end = parse_date_bound(end_date)
    date_filter_active = start is not None and end is not None

    selected = [
        expense for expense in expenses
        if matches_search(expense, term)
        and (not date_filter_active or in_range(expense.date, start, end))
    ]
    selected.sort(key=lambda expense: expense.date, reverse=True)

    return HistoryResult(
        expenses=selected,
        count=len(selected),
        total=sum((expense.amount for expense in selected), Decimal("0")),
    )
