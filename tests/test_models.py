"""
Tests for Expense Tracker

Test strategy:
1. Unit tests for individual components (models, statistics, storage)
2. Integration tests for flows (repositories, sync) over a temp directory
3. No real API calls in tests (in-memory remote and a fake worksheet)
"""

import datetime as dt
import json
from decimal import Decimal

import pytest
from pydantic import ValidationError

from expense_tracker.models import (
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
    Category,
    DEFAULT_CATEGORIES,
    Expense,
    ExpenseDraft,
    ExpenseUpdate,
    StorageMode,
    SyncDirection,
    SyncResult,
    default_categories,
    sort_by_order,
)


class TestExpenseModels:
    """Tests for expense Pydantic models."""

    def test_draft_creation(self):
        """Test ExpenseDraft model creation."""
        draft = ExpenseDraft(
            amount=Decimal("12.50"),
            category="Food",
            date=dt.date(2024, 3, 1),
        )
        assert draft.amount == Decimal("12.50")
        assert draft.description == ""

    def test_draft_rejects_zero_amount(self):
        """Test that non-positive amounts never reach a backend."""
        with pytest.raises(ValidationError):
            ExpenseDraft(amount=Decimal("0"), category="Food", date=dt.date(2024, 3, 1))

    def test_draft_rejects_negative_amount(self):
        with pytest.raises(ValidationError):
            ExpenseDraft(amount=Decimal("-5"), category="Food", date=dt.date(2024, 3, 1))

    def test_draft_strips_whitespace(self):
        """Test that whitespace is stripped from the category."""
        draft = ExpenseDraft(amount=Decimal("1"), category="  Food  ", date=dt.date(2024, 3, 1))
        assert draft.category == "Food"

    def test_from_draft_generates_id_and_timestamp(self):
        """Test that materialising a draft fills id and created_at."""
        draft = ExpenseDraft(amount=Decimal("5"), category="Food", date=dt.date(2024, 3, 1))
        first = Expense.from_draft(draft)
        second = Expense.from_draft(draft)
        assert first.id and second.id
        assert first.id != second.id
        assert first.created_at.tzinfo is not None

    def test_month_key(self):
        expense = Expense(amount=Decimal("1"), category="Food", date=dt.date(2024, 3, 9))
        assert expense.month_key == "2024-03"

    def test_document_uses_created_at_alias(self):
        """Test the local document format: createdAt, ISO date, numeric amount."""
        expense = Expense(
            id="e1",
            amount=Decimal("50"),
            category="Food",
            date=dt.date(2024, 3, 1),
            created_at=dt.datetime(2024, 3, 1, 12, 0, tzinfo=dt.timezone.utc),
        )
        document = expense.to_document()
        assert "createdAt" in document
        assert "created_at" not in document
        assert document["date"] == "2024-03-01"
        assert document["amount"] == 50.0
        json.dumps(document)

    def test_document_parses_back(self):
        expense = Expense(id="e1", amount=Decimal("19.99"), category="Bills", date=dt.date(2024, 2, 29))
        restored = Expense.model_validate(expense.to_document())
        assert restored.id == "e1"
        assert restored.amount == Decimal("19.99")
        assert restored.date == dt.date(2024, 2, 29)

    def test_populate_by_field_name(self):
        """Test that created_at is accepted by name as well as alias."""
        stamp = dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc)
        expense = Expense(amount=Decimal("1"), category="Food", date=dt.date(2024, 1, 1), created_at=stamp)
        assert expense.created_at == stamp

    def test_update_changes_only_provided_fields(self):
        update = ExpenseUpdate(amount=Decimal("75"))
        assert update.changes() == {"amount": Decimal("75")}

    def test_update_rejects_identity_fields(self):
        """Test that id and created_at cannot be changed."""
        with pytest.raises(ValidationError):
            ExpenseUpdate(id="other")
        with pytest.raises(ValidationError):
            ExpenseUpdate(created_at=dt.datetime.now())

    def test_apply_keeps_id_and_created_at(self):
        expense = Expense(id="e1", amount=Decimal("10"), category="Food", date=dt.date(2024, 3, 1))
        updated = expense.apply(ExpenseUpdate(category="Bills", description="Power"))
        assert updated.id == "e1"
        assert updated.created_at == expense.created_at
        assert updated.category == "Bills"
        assert updated.description == "Power"
        assert expense.category == "Food"


class TestCategoryModels:
    """Tests for categories and the default set."""

    def test_default_set(self):
        """Test the eight defaults and their display order."""
        defaults = default_categories()
        assert [c.name for c in defaults] == [
            "Food", "Transport", "Shopping", "Entertainment",
            "Bills", "Health", "Education", "Other",
        ]
        assert [c.order_index for c in defaults] == list(range(8))
        assert all(c.id is None for c in defaults)
        assert not any(c.is_default for c in defaults)

    def test_default_categories_are_copies(self):
        defaults = default_categories()
        defaults[0].name = "Changed"
        assert DEFAULT_CATEGORIES[0].name == "Food"

    def test_rejects_bad_colour(self):
        with pytest.raises(ValidationError):
            Category(name="Pets", color="red", icon="🐶")

    def test_same_name_ignores_case(self):
        a = Category(name="Food", color="#FF6B6B", icon="🍔")
        b = Category(name="fOOD", color="#000000", icon="🍕")
        assert a.same_name(b)

    def test_matches_id_or_name(self):
        category = Category(id="c1", name="Food", color="#FF6B6B", icon="🍔")
        assert category.matches("c1")
        assert category.matches("Food")
        assert not category.matches("food")

    def test_sort_by_order_is_stable(self):
        a = Category(name="A", color="#000", icon="a", order_index=1)
        b = Category(name="B", color="#000", icon="b")
        c = Category(name="C", color="#000", icon="c", order_index=0)
        assert [x.name for x in sort_by_order([a, b, c])] == ["B", "C", "A"]


class TestResultModels:

    def test_storage_mode_values(self):
        assert StorageMode("local") is StorageMode.LOCAL
        assert StorageMode("remote") is StorageMode.REMOTE

    def test_sync_result_success(self):
        """Test that a partial failure still counts as success."""
        result = SyncResult(direction=SyncDirection.LOCAL_TO_REMOTE, attempted=3, synced=2, failed=1)
        assert result.success

    def test_sync_result_total_failure(self):
        result = SyncResult(direction=SyncDirection.LOCAL_TO_REMOTE, attempted=2, failed=2)
        assert not result.success


class TestActivityModels:
    """Tests for activity event models."""

    def test_expense_added_event(self):
        """Test expense added event creation."""
        event = ActivityEventBuilder.expense_added(
            expense_id="e1",
            amount="50",
            category="Food",
            mode="local",
        )
        assert event.event_type == ActivityEventType.EXPENSE_ADDED
        assert event.entity_id == "e1"
        assert event.details["category"] == "Food"

    def test_deleting_default_is_a_warning(self):
        """Test that an orphaned default is flagged."""
        event = ActivityEventBuilder.category_deleted("c1", "Food", was_default=True)
        assert event.severity == ActivitySeverity.WARNING

    def test_partial_sync_is_a_warning(self):
        event = ActivityEventBuilder.sync_completed("local_to_remote", attempted=3, synced=2, skipped=0, failed=1)
        assert event.severity == ActivitySeverity.WARNING

    def test_storage_error_event(self):
        event = ActivityEventBuilder.storage_error("add_expense", "timeout", entity_type="expense")
        assert event.severity == ActivitySeverity.ERROR
        assert event.error_message == "timeout"

    def test_log_dict_is_flat(self):
        """Test log dict conversion."""
        event = ActivityEventBuilder.expense_deleted("e1")
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "expense_deleted"
        assert "timestamp" in log_dict


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
