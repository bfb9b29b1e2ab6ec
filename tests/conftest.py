"""Shared fixtures: a small two-currency household."""

from datetime import datetime, timezone

import pytest

from homeledger.config import get_settings
from homeledger.models import (
    Account,
    AccountType,
    Category,
    Currency,
    Transaction,
    TransactionType,
)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch, tmp_path):
    """Keep every test independent of the developer's environment."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "HOMELEDGER_RECONCILIATION_TOLERANCE",
        "HOMELEDGER_ZERO_EPSILON",
        "HOMELEDGER_TRANSFER_CATEGORY_ID",
        "HOMELEDGER_STORAGE_DATA_PATH",
        "HOMELEDGER_STORAGE_BACKUP_PREFIX",
        "HOMELEDGER_STORAGE_SAVE_RETRY_ATTEMPTS",
        "APP_ENVIRONMENT",
        "DEBUG_MODE",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def at(year: int, month: int, day: int = 15) -> datetime:
    return datetime(year, month, day, 12, 0, tzinfo=timezone.utc)


def make_tx(
    type: TransactionType,
    amount: float,
    account_id: str,
    when: datetime = None,
    **fields,
) -> Transaction:
    """Transaction with sensible defaults for whatever the test does not care about."""
    return Transaction(
        type=type,
        amount=amount,
        account_id=account_id,
        date=when or at(2024, 3),
        category_id=fields.pop("category_id", "transfer" if type == TransactionType.TRANSFER else "c1"),
        **fields,
    )


@pytest.fixture
def rates():
    return {"USD": 40.0, "EUR": 44.0, "UAH": 1.0}


@pytest.fixture
def uah_card():
    return Account(id="uah", name="Card", currency=Currency.UAH)


@pytest.fixture
def uah_cash():
    return Account(id="cash", name="Cash", currency=Currency.UAH, initial_balance=500)


@pytest.fixture
def usd_savings():
    return Account(
        id="usd",
        name="Dollars",
        currency=Currency.USD,
        type=AccountType.SAVINGS,
        current_rate=41.5,
    )


@pytest.fixture
def groceries():
    return Category(
        id="groceries",
        name="Groceries",
        type=TransactionType.EXPENSE,
        budget_history={"2024-01": 500},
    )


@pytest.fixture
def salary():
    return Category(id="salary", name="Salary", type=TransactionType.INCOME, monthly_budget=30000)


@pytest.fixture
def tx():
    """Factory for transactions: tx(type, amount, account_id, when=None, **fields)."""
    return make_tx
