"""Shared fixtures for the SmartReceipt tests."""

from datetime import date
from decimal import Decimal

import pytest

from smartreceipt.config import get_settings
from smartreceipt.models.expense import Expense


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """No real API key, and data written under the test's tmp dir."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("SMARTRECEIPT_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("SMARTRECEIPT_WEEK_START", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def today():
    # A Wednesday
    return date(2024, 3, 13)


@pytest.fixture
def make_expense():
    """Build an Expense with sensible defaults."""
    def _make(amount, day, merchant="Cafe", category="Food & Dining", **kwargs):
        return Expense(
            amount=Decimal(str(amount)),
            merchant=merchant,
            category=category,
            date=day,
            **kwargs,
        )
    return _make
