"""
Local JSON Record Store

DESIGN DECISION: Records live in two JSON documents on the device,
one per key, exactly like a browser's local storage:
- the expense collection (a JSON array)
- the settings singleton (a JSON object)

TRADEOFFS:
- Every write rewrites a whole document (fine for one person's expenses)
- No transactions; a write either fully replaces the document or
  leaves the previous one in place (temp file + atomic rename)
- Filtering happens in Python on the loaded snapshot

Unreadable data is treated as missing: a corrupt document yields the
default value and an unreadable expense record is skipped. Both are
logged, neither raises.
"""

import json
import os
import re
import tempfile
from abc import abstractmethod
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from smartreceipt.audit import AuditLogger
from smartreceipt.config import get_settings
from smartreceipt.models.audit import AuditEventBuilder
from smartreceipt.models.expense import BudgetSettings, Expense
from smartreceipt.services.storage.interface import (
    DuplicateError,
    RecordStoreInterface,
    StorageError,
)


DEFAULT_EXPENSES_KEY = "smartreceipt_expenses"
DEFAULT_SETTINGS_KEY = "smartreceipt_settings"

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueRecordStore(RecordStoreInterface):
    """
    Record store over a key -> text backend.

    Subclasses only provide `_read` and `_write`; the JSON layout,
    defaults and corruption handling live here.
    """

    def __init__(
        self,
        expenses_key: str = DEFAULT_EXPENSES_KEY,
        settings_key: str = DEFAULT_SETTINGS_KEY,
        audit_logger: Optional[AuditLogger] = None,
    ):
        for key in (expenses_key, settings_key):
            if not _KEY_PATTERN.match(key):
                raise ValueError(f"Invalid storage key: {key!r}")
        if expenses_key == settings_key:
            raise ValueError("Expense and settings keys must be distinct")

        self._expenses_key = expenses_key
        self._settings_key = settings_key
        self._audit_logger = audit_logger or AuditLogger()

    @abstractmethod
    def _read(self, key: str) -> Optional[str]:
        """Return the stored text for a key, or None if absent."""
        pass

    @abstractmethod
    def _write(self, key: str, text: str) -> None:
        """Replace the stored text for a key."""
        pass

    def _read_json(self, key: str) -> Optional[Any]:
        text = self._read(key)
        if text is None or not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            self._audit_logger.log(
                AuditEventBuilder.corrupt_record_skipped(key=key, reason=str(e))
            )
            return None

    def _write_json(self, key: str, data: Any) -> None:
        self._write(key, json.dumps(data, indent=2, ensure_ascii=False))

    def _write_expenses(self, expenses: list[Expense]) -> None:
        self._write_json(
            self._expenses_key,
            [expense.to_record() for expense in expenses],
        )

    def load_expenses(self) -> list[Expense]:
        data = self._read_json(self._expenses_key)
        if data is None:
            return []
        if not isinstance(data, list):
            self._audit_logger.log(AuditEventBuilder.corrupt_record_skipped(
                key=self._expenses_key,
                reason=f"expected a list, found {type(data).__name__}",
            ))
            return []

        expenses = []
        for index, record in enumerate(data):
            try:
                expenses.append(Expense.model_validate(record))
            except ValidationError as e:
                # Skip malformed records
                self._audit_logger.log(AuditEventBuilder.corrupt_record_skipped(
                    key=f"{self._expenses_key}[{index}]",
                    reason=str(e),
                ))
        return expenses

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        for expense in self.load_expenses():
            if expense.id == expense_id:
                return expense
        return None

    def save_expense(self, expense: Expense) -> None:
        expenses = self.load_expenses()
        if any(existing.id == expense.id for existing in expenses):
            raise DuplicateError(f"Expense already exists: {expense.id}")
        expenses.append(expense)
        self._write_expenses(expenses)

    def update_expense(self, expense: Expense) -> bool:
        expenses = self.load_expenses()
        for index, existing in enumerate(expenses):
            if existing.id == expense.id:
                expenses[index] = expense
                self._write_expenses(expenses)
                return True
        return False

    def delete_expense(self, expense_id: str) -> bool:
        expenses = self.load_expenses()
        remaining = [expense for expense in expenses if expense.id != expense_id]
        if len(remaining) == len(expenses):
            return False
        self._write_expenses(remaining)
        return True

    def load_settings(self) -> BudgetSettings:
        data = self._read_json(self._settings_key)
        if data is None:
            return BudgetSettings()
        try:
            return BudgetSettings.model_validate(data)
        except ValidationError as e:
            self._audit_logger.log(AuditEventBuilder.corrupt_record_skipped(
                key=self._settings_key,
                reason=str(e),
            ))
            return BudgetSettings()

    def save_settings(self, settings: BudgetSettings) -> None:
        self._write_json(self._settings_key, settings.to_record())


class LocalRecordStore(KeyValueRecordStore):
    """
    File-backed record store: one `<key>.json` file per key.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        expenses_key: Optional[str] = None,
        settings_key: Optional[str] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        storage_settings = get_settings().storage
        super().__init__(
            expenses_key=expenses_key or storage_settings.expenses_key,
            settings_key=settings_key or storage_settings.settings_key,
            audit_logger=audit_logger,
        )
        self._data_dir = Path(data_dir or storage_settings.data_dir).expanduser()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        return self._data_dir / f"{key}.json"

    def _read(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            self._audit_logger.log(
                AuditEventBuilder.corrupt_record_skipped(key=key, reason=str(e))
            )
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def _write(self, key: str, text: str) -> None:
        path = self._path_for(key)
        tmp_name = None
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._data_dir,
                prefix=f".{key}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(text)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to write {path}: {e}") from e


class MemoryRecordStore(KeyValueRecordStore):
    """
    In-memory record store for tests and throwaway sessions.

    Documents are kept as serialized text so the JSON round trip is
    the same one the file store goes through.
    """

    def __init__(
        self,
        documents: Optional[dict[str, str]] = None,
        expenses_key: str = DEFAULT_EXPENSES_KEY,
        settings_key: str = DEFAULT_SETTINGS_KEY,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(
            expenses_key=expenses_key,
            settings_key=settings_key,
            audit_logger=audit_logger,
        )
        self._documents: dict[str, str] = dict(documents or {})

    @property
    def documents(self) -> dict[str, str]:
        return dict(self._documents)

    def _read(self, key: str) -> Optional[str]:
        return self._documents.get(key)

    def _write(self, key: str, text: str) -> None:
        self._documents[key] = text
