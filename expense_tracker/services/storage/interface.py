"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the local (device) and remote (per-user) backends interchangeable
2. Select the backend once, instead of branching on mode in every operation
3. Use in-memory storage for testing
4. Keep repository logic decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
Just the operations the repositories and the sync service need.
"""

from abc import ABC, abstractmethod

from expense_tracker.models.category import Category
from expense_tracker.models.expense import Expense, ExpenseDraft, ExpenseUpdate


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    One instance is scoped to one owner (a user remotely, the device locally).
    """

    @abstractmethod
    async def list_expenses(self) -> list[Expense]:
        """
        Fetch the owner's full expense collection.

        Returns:
            Remote: ordered by date descending.
            Local: stored order.

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def add_expense(self, draft: ExpenseDraft) -> Expense:
        """
        Persist a new expense.

        The backend assigns id and created_at.

        Returns:
            The stored expense

        Raises:
            StorageError: If the insert fails
        """
        pass

    @abstractmethod
    async def update_expense(self, expense_id: str, update: ExpenseUpdate) -> bool:
        """
        Merge fields into the expense with this id.

        Returns:
            True if a record was updated, False if the id is unknown

        Raises:
            StorageError: If the update fails
        """
        pass

    @abstractmethod
    async def delete_expense(self, expense_id: str) -> bool:
        """
        Delete an expense by id.

        Returns:
            True if a record was deleted
        """
        pass

    @abstractmethod
    async def clear_expenses(self) -> bool:
        """
        Delete every expense of the owner.

        Returns:
            True once the owner has no expenses left
        """
        pass


class CategoryStorageInterface(ABC):
    """
    Abstract interface for category storage operations.

    Categories reference each other only through the owner scope:
    name uniqueness and the single default are per owner.
    """

    @abstractmethod
    async def list_categories(self) -> list[Category]:
        """
        Fetch the owner's categories (unsorted).

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def add_category(self, category: Category) -> Category:
        """
        Persist a new category.

        Returns:
            The stored category, carrying its backend id

        Raises:
            StorageError: If the insert fails
        """
        pass

    @abstractmethod
    async def delete_category(self, category: Category) -> bool:
        """
        Delete a category (matched by id, then by name).

        Returns:
            True if a record was deleted
        """
        pass

    @abstractmethod
    async def update_order(self, categories: list[Category]) -> bool:
        """
        Bulk upsert of the full category set with rewritten order_index.

        Returns:
            True if every record was written
        """
        pass

    @abstractmethod
    async def set_default(self, category: Category) -> bool:
        """
        Make `category` the only default of the owner in one write.

        Returns:
            True if the flag was written

        Raises:
            NotFoundError: If the category does not exist in the backend
        """
        pass

    @abstractmethod
    async def clear_categories(self) -> bool:
        """
        Delete every category of the owner.

        Returns:
            True once the owner has no categories left
        """
        pass


class RemoteStorageProvider(ABC):
    """
    Factory for per-user remote storage.

    The remote backend is shared by all users; every storage instance it
    hands out is scoped to one user id.
    """

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the backend is configured and reachable in principle."""
        pass

    @abstractmethod
    def expense_storage(self, user_id: str) -> "RemoteExpenseStorageInterface":
        pass

    @abstractmethod
    def category_storage(self, user_id: str) -> CategoryStorageInterface:
        pass


class RemoteExpenseStorageInterface(ExpenseStorageInterface):
    """Remote expense storage also accepts records that already have ids."""

    @abstractmethod
    async def import_expense(self, expense: Expense) -> bool:
        """
        Insert a record under its existing (client-generated) id.

        Returns:
            True if inserted, False if a record with that id already exists

        Raises:
            StorageError: If the insert fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


class ImportFormatError(StorageError):
    """An import document is not a sequence of expense records."""
    pass
