"""
Category Models

Categories are per-owner (the signed-in user remotely, the device locally).
Names are unique per owner, case-insensitive, and at most one category
carries the default flag.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# Style used for expenses whose category no longer exists
FALLBACK_ICON = "📦"
FALLBACK_COLOR = "#95E1D3"


class Category(BaseModel):
    """
    An expense category.

    `id` is only present once the category has been persisted through a
    backend that assigns ids. The compiled-in defaults have none.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = Field(
        default=None,
        description="Backend id, absent for unsaved defaults"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name, unique per owner (case-insensitive)"
    )
    color: str = Field(
        ...,
        pattern=r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$",
        description="Hex colour"
    )
    icon: str = Field(
        ...,
        min_length=1,
        max_length=16,
        description="Glyph shown next to the name"
    )
    order_index: Optional[int] = Field(
        default=None,
        ge=0,
        description="Display position"
    )
    is_default: bool = Field(
        default=False,
        description="Pre-selected in entry forms"
    )

    def matches(self, id_or_name: str) -> bool:
        """True if this category is referenced by id or exact name."""
        return (self.id is not None and self.id == id_or_name) or self.name == id_or_name

    def same_name(self, other: "Category") -> bool:
        return self.name.casefold() == other.name.casefold()


DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(name="Food", color="#FF6B6B", icon="🍔"),
    Category(name="Transport", color="#4ECDC4", icon="🚗"),
    Category(name="Shopping", color="#FFE66D", icon="🛍️"),
    Category(name="Entertainment", color="#A8E6CF", icon="🎬"),
    Category(name="Bills", color="#FF8B94", icon="📄"),
    Category(name="Health", color="#C7CEEA", icon="⚕️"),
    Category(name="Education", color="#B4A7D6", icon="📚"),
    Category(name="Other", color="#95E1D3", icon="📦"),
)


def default_categories() -> list[Category]:
    """Fresh copies of the default set, indexed in their display order."""
    return [
        category.model_copy(update={"order_index": index})
        for index, category in enumerate(DEFAULT_CATEGORIES)
    ]


def sort_by_order(categories: list[Category]) -> list[Category]:
    """Stable sort by order_index; missing indices count as 0."""
    return sorted(categories, key=lambda c: c.order_index or 0)
