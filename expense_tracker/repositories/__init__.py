"""Repositories package."""

from expense_tracker.repositories.categories import CategoryRepository
from expense_tracker.repositories.expenses import ExpenseRepository

__all__ = ["CategoryRepository", "ExpenseRepository"]
