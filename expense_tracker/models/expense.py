"""
Expense Models

An expense is a single spend: amount, category name, calendar date and a
free-text description. The same model is used for the local document,
the export file and rows read back from the remote backend.

DESIGN DECISION: The category is stored by NAME, not by id.
Categories can be deleted independently, so an expense may keep a stale
category string. That is tolerated - display falls back to a default style.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
)


def generate_expense_id() -> str:
    """Client-side id for records created on the device."""
    return str(uuid4())


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class ExpenseDraft(BaseModel):
    """
    Input for adding an expense.

    The entry form validates through this model before calling the
    repository, so a non-positive amount never reaches a backend.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount spent (must be positive)"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category name"
    )
    date: dt.date = Field(
        ...,
        description="Date of the expense"
    )
    description: str = Field(
        default="",
        max_length=500,
        description="What the money was spent on"
    )


class ExpenseUpdate(BaseModel):
    """
    Partial update for an existing expense.

    Only amount, category, date and description can change.
    id and created_at are immutable, so they are not fields here.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    amount: Optional[Decimal] = Field(default=None, gt=0)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    date: Optional[dt.date] = None
    description: Optional[str] = Field(default=None, max_length=500)

    def changes(self) -> dict:
        """Fields that were actually provided."""
        return self.model_dump(exclude_none=True)


class Expense(BaseModel):
    """
    A persisted expense.

    Serialised with `createdAt` (the local document and export file format).
    The remote table stores the same value under `created_at`.

    Amounts are JSON numbers in the document, so they round-trip exactly
    up to 15 significant digits (double precision). Longer amounts are
    rounded on export. The remote table keeps the exact decimal string.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: str = Field(
        default_factory=generate_expense_id,
        min_length=1,
        description="Unique expense id"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount spent"
    )
    category: str = Field(
        ...,
        description="Category name (not enforced against the category set)"
    )
    date: dt.date = Field(
        ...,
        description="Date of the expense"
    )
    description: str = Field(
        default="",
        description="What the money was spent on"
    )
    created_at: dt.datetime = Field(
        default_factory=utc_now,
        alias="createdAt",
        description="When the record was created"
    )

    @field_serializer("amount", when_used="json")
    def _amount_as_number(self, amount: Decimal) -> float:
        return float(amount)

    @property
    def month_key(self) -> str:
        """`YYYY-MM` bucket of the expense date."""
        return self.date.isoformat()[:7]

    @classmethod
    def from_draft(
        cls,
        draft: ExpenseDraft,
        expense_id: Optional[str] = None,
        created_at: Optional[dt.datetime] = None,
    ) -> "Expense":
        """Materialise a draft, generating id and timestamp when not given."""
        return cls(
            id=expense_id or generate_expense_id(),
            amount=draft.amount,
            category=draft.category,
            date=draft.date,
            description=draft.description,
            created_at=created_at or utc_now(),
        )

    def apply(self, update: ExpenseUpdate) -> "Expense":
        """Return a copy with the update merged in."""
        return self.model_copy(update=update.changes())

    def to_document(self) -> dict:
        """JSON-ready dict in the local document format."""
        return self.model_dump(mode="json", by_alias=True)


class ExpenseExport(BaseModel):
    """A downloadable export of the expense collection."""

    filename: str = Field(
        ...,
        description="Suggested file name, stamped with the export date"
    )
    content: str = Field(
        ...,
        description="Pretty-printed JSON array of expenses"
    )
    count: int = Field(ge=0)
