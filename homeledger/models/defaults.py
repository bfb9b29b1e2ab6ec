"""
Starter data for a brand-new ledger.

`initial_data()` returns a fresh snapshot each call so callers can edit it
freely without touching the module-level templates.
"""

from homeledger.models.entities import (
    Account,
    AccountType,
    AppData,
    Category,
    Currency,
    TransactionType,
    UserSettings,
)

CURRENT_SCHEMA_VERSION = 2

DEFAULT_RATES: dict[str, float] = {
    Currency.USD.value: 41.5,
    Currency.EUR.value: 44.0,
    Currency.UAH.value: 1.0,
}

DEFAULT_CATEGORIES: list[Category] = [
    Category(id="c1", name="Groceries", type=TransactionType.EXPENSE,
             icon="shopping-cart", color="#ef4444", monthly_budget=8000),
    Category(id="c2", name="Transport", type=TransactionType.EXPENSE,
             icon="bus", color="#f97316", monthly_budget=2000),
    Category(id="c3", name="Housing", type=TransactionType.EXPENSE,
             icon="home", color="#8b5cf6", monthly_budget=3000),
    Category(id="c4", name="Entertainment", type=TransactionType.EXPENSE,
             icon="film", color="#ec4899", monthly_budget=1500),
    Category(id="c5", name="Health", type=TransactionType.EXPENSE,
             icon="heart", color="#14b8a6", monthly_budget=1000),
    Category(id="c6", name="Salary", type=TransactionType.INCOME,
             icon="briefcase", color="#10b981", monthly_budget=30000),
    Category(id="c7", name="Gifts", type=TransactionType.INCOME,
             icon="gift", color="#3b82f6", monthly_budget=0),
    Category(id="c8", name="Other", type=TransactionType.EXPENSE,
             icon="more-horizontal", color="#6b7280", monthly_budget=500),
]

DEFAULT_ACCOUNTS: list[Account] = [
    Account(id="a1", name="Cash", currency=Currency.UAH, color="#10b981",
            icon="wallet", type=AccountType.CURRENT, current_rate=1),
    Account(id="a2", name="Main bank card", currency=Currency.UAH, color="#22c55e",
            icon="credit-card", type=AccountType.CURRENT, current_rate=1),
    Account(id="a3", name="Second card", currency=Currency.UAH, color="#000000",
            icon="credit-card", type=AccountType.CURRENT, current_rate=1),
    Account(id="a4", name="Cash USD", currency=Currency.USD, color="#16a34a",
            icon="banknote", type=AccountType.SAVINGS, current_rate=41.5),
]


def initial_data() -> AppData:
    """A new snapshot with the default accounts, categories and rates."""
    return AppData(
        accounts=[a.model_copy() for a in DEFAULT_ACCOUNTS],
        categories=[c.model_copy() for c in DEFAULT_CATEGORIES],
        transactions=[],
        rates=dict(DEFAULT_RATES),
        settings=UserSettings(),
        schema_version=CURRENT_SCHEMA_VERSION,
    )
