"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the record store.
This allows us to:
1. Keep records in local JSON documents on the device
2. Use in-memory storage for testing
3. Swap the backend later without touching the controller

The interface is intentionally simple - two documents, one list of
expenses and one settings record. There are no queries here; all
aggregation and filtering happens on the loaded snapshot.
"""

from abc import ABC, abstractmethod
from typing import Optional

from smartreceipt.models.expense import BudgetSettings, Expense


class RecordStoreInterface(ABC):
    """
    Abstract interface for expense and settings persistence.

    Every implementation must honour "last write wins" on a single
    device and must never fail on "no data yet".
    """

    @abstractmethod
    def load_expenses(self) -> list[Expense]:
        """
        Load every persisted expense.

        Returns:
            All expenses in stored (insertion) order, or an empty list
            if nothing has been saved yet.
        """
        pass

    @abstractmethod
    def get_expense(self, expense_id: str) -> Optional[Expense]:
        """
        Retrieve an expense by its ID.

        Returns:
            The expense if found, None otherwise
        """
        pass

    @abstractmethod
    def save_expense(self, expense: Expense) -> None:
        """
        Append one expense to the collection.

        Raises:
            DuplicateError: If an expense with the same id exists
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def update_expense(self, expense: Expense) -> bool:
        """
        Replace the expense with the same id.

        Returns:
            True if a record was replaced, False if the id was not
            found (a no-op, not an error)

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete_expense(self, expense_id: str) -> bool:
        """
        Remove the expense with this id.

        Returns:
            True if a record was removed, False if the id was not found

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def load_settings(self) -> BudgetSettings:
        """
        Load the settings record.

        Returns:
            The persisted settings, or the defaults (daily limit 50)
            if none were saved
        """
        pass

    @abstractmethod
    def save_settings(self, settings: BudgetSettings) -> None:
        """
        Replace the settings record wholesale.

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass

