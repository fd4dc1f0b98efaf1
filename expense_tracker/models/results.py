"""
Result Models

Values handed back to the UI: aggregate statistics, month comparisons
and sync outcomes. None of these are persisted.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class StorageMode(str, Enum):
    """Which backend is authoritative for the session."""
    LOCAL = "local"
    REMOTE = "remote"


class SyncDirection(str, Enum):
    LOCAL_TO_REMOTE = "local_to_remote"
    REMOTE_TO_LOCAL = "remote_to_local"


class Statistics(BaseModel):
    """Aggregates over an expense collection."""

    total: Decimal = Field(default=Decimal("0"))
    average: Decimal = Field(default=Decimal("0"))
    count: int = Field(default=0, ge=0)
    by_category: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Category name -> summed amount"
    )
    by_month: dict[str, Decimal] = Field(
        default_factory=dict,
        description="YYYY-MM -> summed amount"
    )


class MonthComparison(BaseModel):
    """A month's total against the previous month that has data."""

    month: str
    total: Decimal
    previous_month: str
    previous_total: Decimal
    percent_change: float
    is_increase: bool


class SyncResult(BaseModel):
    """
    Outcome of a one-shot sync.

    Partial failure is not an error: it is reported as counts.
    """

    direction: SyncDirection
    attempted: int = Field(default=0, ge=0)
    synced: int = Field(default=0, ge=0)
    skipped: int = Field(
        default=0,
        ge=0,
        description="Records already present at the destination"
    )
    failed: int = Field(default=0, ge=0)
    message: Optional[str] = None

    @property
    def success(self) -> bool:
        """Something was attempted and not every record failed."""
        return self.attempted > 0 and self.failed < self.attempted
