"""
Expense Statistics

DESIGN DECISION: Aggregation is PURE.
Every function here takes an expense collection and returns a new value.
Nothing here touches a backend or mutates its input, so the same
collection always gives the same answer, whichever backend it came from.

Months are `YYYY-MM` keys taken from the expense date.
"""

import datetime as dt
from decimal import Decimal
from typing import Iterable, Literal, Optional

from expense_tracker.models.expense import Expense
from expense_tracker.models.results import MonthComparison, Statistics


SortKey = Literal["date", "amount", "category"]
SortOrder = Literal["asc", "desc"]


def calculate_statistics(expenses: Iterable[Expense]) -> Statistics:
    """Total, count, average and per-category / per-month sums."""
    total = Decimal("0")
    count = 0
    by_category: dict[str, Decimal] = {}
    by_month: dict[str, Decimal] = {}

    for expense in expenses:
        total += expense.amount
        count += 1
        by_category[expense.category] = by_category.get(expense.category, Decimal("0")) + expense.amount
        by_month[expense.month_key] = by_month.get(expense.month_key, Decimal("0")) + expense.amount

    average = total / count if count > 0 else Decimal("0")

    return Statistics(
        total=total,
        average=average,
        count=count,
        by_category=by_category,
        by_month=by_month,
    )


def monthly_totals(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    return calculate_statistics(expenses).by_month


def filter_by_month(expenses: list[Expense], month: Optional[str]) -> list[Expense]:
    """Expenses in `month` (YYYY-MM); everything when month is None."""
    if not month:
        return expenses
    return [e for e in expenses if e.date.isoformat().startswith(month)]


def filter_by_date_range(
    expenses: list[Expense],
    start: Optional[dt.date] = None,
    end: Optional[dt.date] = None,
) -> list[Expense]:
    """Expenses within [start, end]; open ends are unbounded."""
    if start is None and end is None:
        return expenses
    return [
        e for e in expenses
        if (start is None or e.date >= start) and (end is None or e.date <= end)
    ]


def filter_by_category(expenses: list[Expense], category: Optional[str]) -> list[Expense]:
    if not category:
        return expenses
    return [e for e in expenses if e.category == category]


def filter_by_search(expenses: list[Expense], term: str) -> list[Expense]:
    """Case-insensitive match on description or category."""
    if not term:
        return expenses
    term = term.lower()
    return [
        e for e in expenses
        if term in e.description.lower() or term in e.category.lower()
    ]


def available_months(expenses: Iterable[Expense]) -> list[str]:
    """Distinct months, most recent first."""
    return sorted({e.month_key for e in expenses}, reverse=True)


def sort_expenses(
    expenses: Iterable[Expense],
    key: SortKey = "date",
    order: SortOrder = "desc",
) -> list[Expense]:
    """
    Stable sort into a new list.

    Dates compare as calendar dates, amounts numerically and categories
    case-insensitively (ties broken by the exact name). Equal elements keep
    their input order in both directions.
    """
    if key == "date":
        sort_key = lambda e: e.date
    elif key == "amount":
        sort_key = lambda e: e.amount
    elif key == "category":
        sort_key = lambda e: (e.category.casefold(), e.category)
    else:
        raise ValueError(f"Unknown sort key: {key}")

    if order not in ("asc", "desc"):
        raise ValueError(f"Unknown sort order: {order}")

    return sorted(expenses, key=sort_key, reverse=(order == "desc"))


def month_over_month(current: Decimal, previous: Decimal) -> Optional[float]:
    """Percent change from `previous` to `current`; None when previous is 0."""
    if previous == 0:
        return None
    return float((Decimal(current) - Decimal(previous)) / Decimal(previous) * 100)


def compare_months(expenses: list[Expense], month: Optional[str]) -> Optional[MonthComparison]:
    """
    Compare `month` against the previous month that has expenses.

    Returns None when there is no selected month, no earlier month,
    or the earlier month's total is zero.
    """
    if not month:
        return None

    months = available_months(expenses)
    if month not in months:
        return None
    position = months.index(month)
    if position == len(months) - 1:
        return None

    previous_month = months[position + 1]
    totals = monthly_totals(expenses)
    total = totals.get(month, Decimal("0"))
    previous_total = totals.get(previous_month, Decimal("0"))

    percent_change = month_over_month(total, previous_total)
    if percent_change is None:
        return None

    return MonthComparison(
        month=month,
        total=total,
        previous_month=previous_month,
        previous_total=previous_total,
        percent_change=percent_change,
        is_increase=percent_change > 0,
    )


def current_month(today: Optional[dt.date] = None) -> str:
    today = today or dt.date.today()
    return today.strftime("%Y-%m")
