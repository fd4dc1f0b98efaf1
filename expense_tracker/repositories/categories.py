"""
Category Repository

Owns the in-memory category collection for the current (mode, user)
scope. Remote users and the device are two separate data universes; they
are never merged.

Ordering, uniqueness and default rules:
- display order is order_index ascending
- names are unique per owner, case-insensitive
- at most one category is the default

Reorder and set-default are optimistic: memory changes before the backend
answers. Everything else waits for the backend.
"""

from typing import Optional

import structlog

from expense_tracker.audit import ActivityLogger
from expense_tracker.models.activity import ActivityEventBuilder
from expense_tracker.models.category import (
    FALLBACK_COLOR,
    FALLBACK_ICON,
    Category,
    default_categories,
    sort_by_order,
)
from expense_tracker.services.storage.context import StorageContext
from expense_tracker.services.storage.interface import (
    CategoryStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


class CategoryRepository:
    """Single entry point the UI uses for categories."""

    def __init__(
        self,
        context: StorageContext,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._context = context
        self._activity = activity_logger or ActivityLogger()
        self._categories: list[Category] = default_categories()

    @property
    def categories(self) -> list[Category]:
        """Current collection in display order (a copy)."""
        return list(self._categories)

    @property
    def default_category(self) -> Optional[Category]:
        return next((c for c in self._categories if c.is_default), None)

    def find(self, id_or_name: str) -> Optional[Category]:
        """Resolve by id first, then by name."""
        by_id = next((c for c in self._categories if c.id is not None and c.id == id_or_name), None)
        if by_id is not None:
            return by_id
        return next((c for c in self._categories if c.name == id_or_name), None)

    def style_for(self, name: str) -> tuple[str, str]:
        """(icon, color) for an expense's category name, with a fallback for deleted ones."""
        category = next((c for c in self._categories if c.name == name), None)
        if category is None:
            return FALLBACK_ICON, FALLBACK_COLOR
        return category.icon, category.color

    async def _seed_defaults(self, storage: CategoryStorageInterface) -> list[Category]:
        """Create one record per default category, adopting backend ids."""
        seeded = []
        for category in default_categories():
            try:
                seeded.append(await storage.add_category(category))
            except StorageError as e:
                self._activity.log_storage_error("seed_category", e, entity_type="category")

        self._activity.log(ActivityEventBuilder.categories_seeded(
            count=len(seeded),
            user_id=self._context.user_id,
        ))
        return seeded

    async def load(self) -> list[Category]:
        """
        Fetch categories for the current scope.

        An empty remote set is seeded with the defaults. Locally, an empty
        store already reads as the (unsaved) defaults.
        """
        storage = self._context.category_storage()
        try:
            categories = await storage.list_categories()
        except StorageError as e:
            self._activity.log_storage_error("load_categories", e, entity_type="category")
            self._categories = default_categories()
            return self.categories

        if not categories:
            categories = await self._seed_defaults(storage)

        # Keep showing the defaults if seeding failed entirely
        self._categories = sort_by_order(categories) if categories else default_categories()
        logger.info("categories_loaded", count=len(self._categories), mode=self._context.scope[0].value)
        return self.categories

    async def add(self, category: Category) -> bool:
        """
        Append a category at the end of the display order.

        Rejected (False, nothing changes) if the name already exists,
        ignoring case. The record is always inserted without the default
        flag; a category added as default then goes through set_default,
        which clears the previous one.
        """
        if any(existing.same_name(category) for existing in self._categories):
            self._activity.log(ActivityEventBuilder.category_rejected(
                name=category.name,
                reason="A category with this name already exists",
            ))
            return False

        pending = category.model_copy(update={
            "order_index": len(self._categories),
            "is_default": False,
        })
        storage = self._context.category_storage()
        try:
            stored = await storage.add_category(pending)
        except StorageError as e:
            self._activity.log_storage_error("add_category", e, entity_type="category")
            return False

        self._categories.append(stored)
        self._activity.log(ActivityEventBuilder.category_added(stored.id, stored.name))

        if category.is_default:
            return await self.set_default(stored.id or stored.name)
        return True

    async def delete(self, id_or_name: str) -> bool:
        """
        Remove a category from the backend and from memory.

        Remaining order indices are not renumbered, and if the default was
        deleted no other category is promoted.
        """
        target = self.find(id_or_name)
        if target is None:
            return False

        storage = self._context.category_storage()
        try:
            deleted = await storage.delete_category(target)
        except StorageError as e:
            self._activity.log_storage_error("delete_category", e, entity_type="category")
            return False

        if not deleted:
            return False

        self._categories = [c for c in self._categories if c is not target]
        self._activity.log(ActivityEventBuilder.category_deleted(
            category_id=target.id,
            name=target.name,
            was_default=target.is_default,
        ))
        return True

    async def reorder(self, ordered: list[Category]) -> bool:
        """
        Adopt a new display order.

        Every category gets order_index = its position (0-based) and the
        full set is persisted. Only the first flagged category keeps the
        default flag. Optimistic: memory changes first.
        """
        default_seen = False
        normalised = []
        for index, category in enumerate(ordered):
            is_default = category.is_default and not default_seen
            default_seen = default_seen or is_default
            normalised.append(category.model_copy(update={
                "order_index": index,
                "is_default": is_default,
            }))
        self._categories = normalised
        self._activity.log(ActivityEventBuilder.categories_reordered(
            [c.name for c in self._categories]
        ))

        storage = self._context.category_storage()
        try:
            return await storage.update_order(self.categories)
        except StorageError as e:
            self._activity.log_storage_error("reorder_categories", e, entity_type="category")
            return False

    async def set_default(self, id_or_name: str) -> bool:
        """
        Make one category the default and clear the flag everywhere else.

        Optimistic: memory changes first. The backend writes the whole
        flag set in one operation.
        """
        target = self.find(id_or_name)
        if target is None:
            return False

        self._categories = [
            c.model_copy(update={"is_default": c is target})
            for c in self._categories
        ]
        self._activity.log(ActivityEventBuilder.default_category_set(target.id, target.name))

        storage = self._context.category_storage()
        try:
            return await storage.set_default(target)
        except StorageError as e:
            self._activity.log_storage_error("set_default_category", e, entity_type="category")
            return False

    async def reset_to_defaults(self) -> bool:
        """
        Replace every category with the default set.

        Remote: delete all, then re-seed (sequential, not transactional).
        Local: the store is cleared and reads back as the defaults.
        """
        storage = self._context.category_storage()
        try:
            await storage.clear_categories()
            categories = await storage.list_categories()
        except StorageError as e:
            self._activity.log_storage_error("reset_categories", e, entity_type="category")
            return False

        if not categories:
            categories = await self._seed_defaults(storage)

        self._categories = sort_by_order(categories) if categories else default_categories()
        self._activity.log(ActivityEventBuilder.categories_reset(len(self._categories)))
        return True
