"""Expense statistics package."""

from expense_tracker.queries.statistics import (
    available_months,
    calculate_statistics,
    compare_months,
    current_month,
    filter_by_category,
    filter_by_date_range,
    filter_by_month,
    filter_by_search,
    month_over_month,
    monthly_totals,
    sort_expenses,
)

__all__ = [
    "available_months",
    "calculate_statistics",
    "compare_months",
    "current_month",
    "filter_by_category",
    "filter_by_date_range",
    "filter_by_month",
    "filter_by_search",
    "month_over_month",
    "monthly_totals",
    "sort_expenses",
]
