"""
Core Data Models for HomeLedger

These models define the snapshot the engine reads:
accounts, categories, transactions, the live rate table and user settings.

DESIGN DECISION: Python attributes are snake_case, while the JSON snapshot
keeps the camelCase keys it has always been stored with (initialBalance,
budgetHistory, toAccountId, ...). Both spellings are accepted on input, and
`model_dump(by_alias=True)` produces the stored shape.

The engine never mutates these objects. Edits go through
`model_copy(update=...)` and produce new instances.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Literal, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


MONTH_KEY_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

# Written on transfers in place of a real category.
TRANSFER_CATEGORY_ID = "transfer"


def generate_id() -> str:
    """Identifier for a newly created entity."""
    return uuid4().hex[:12]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Kind of money movement a transaction records."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"


class AccountType(str, Enum):
    """
    Account groups shown on the accounts screen.

    Accounts stored before types existed are treated as CURRENT.
    """
    CURRENT = "CURRENT"
    SAVINGS = "SAVINGS"
    DEBT = "DEBT"


class Currency(str, Enum):
    """Supported currencies."""
    UAH = "UAH"
    USD = "USD"
    EUR = "EUR"


BASE_CURRENCY = Currency.UAH


class _SnapshotModel(BaseModel):
    """Shared configuration for everything stored in the snapshot."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# ENTITIES
# =============================================================================

class Account(_SnapshotModel):
    """
    A place money lives in: cash, a bank card, a savings jar, a loan.

    `initial_balance` is the balance before any recorded transaction.
    `current_rate` is the legacy per-account rate to the base currency;
    the global rate table supersedes it, but it is still used as the
    default rate when a transaction is entered.
    """

    id: str = Field(default_factory=generate_id, min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    currency: Currency = Currency.UAH
    initial_balance: float = 0.0
    type: AccountType = AccountType.CURRENT
    color: str = "#10b981"
    icon: str = "wallet"
    current_rate: float = Field(default=1.0, ge=0)
    is_hidden: bool = False

    @field_validator('type', mode='before')
    @classmethod
    def default_account_type(cls, v):
        """Missing/empty types belong to the CURRENT group."""
        return v or AccountType.CURRENT


class Category(_SnapshotModel):
    """
    An income or expense category with a time-versioned monthly budget.

    `budget_history` maps "YYYY-MM" to the planned amount from that month
    forward until a later key supersedes it. `monthly_budget` is the flat
    value used when no history exists.
    """

    id: str = Field(default_factory=generate_id, min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    type: TransactionType = TransactionType.EXPENSE
    color: str = "#6b7280"
    icon: str = "shopping-cart"
    monthly_budget: float = 0.0
    budget_history: Optional[dict[str, float]] = None

    @field_validator('type')
    @classmethod
    def reject_transfer_category(cls, v: TransactionType) -> TransactionType:
        if v == TransactionType.TRANSFER:
            raise ValueError("Categories are either INCOME or EXPENSE")
        return v

    @field_validator('monthly_budget', mode='before')
    @classmethod
    def default_monthly_budget(cls, v):
        return 0.0 if v is None else v

    @field_validator('budget_history')
    @classmethod
    def validate_month_keys(
        cls, v: Optional[dict[str, float]]
    ) -> Optional[dict[str, float]]:
        if v is None:
            return v
        for key in v:
            if not MONTH_KEY_PATTERN.match(key):
                raise ValueError(f"Invalid budget month key: {key!r} (expected YYYY-MM)")
        return v


class Transaction(_SnapshotModel):
    """
    A single recorded money movement.

    `amount` is always the quantity at the SOURCE account, in the
    transaction's own currency. `exchange_rate` is frozen at creation time
    and is never recomputed when the live rate table changes.

    For transfers, `to_amount` is the exact amount credited to
    `to_account_id`; transfers recorded before it existed leave it empty.
    """

    id: str = Field(default_factory=generate_id, min_length=1)
    date: datetime
    amount: float
    currency: Currency = Currency.UAH
    exchange_rate: float = Field(default=1.0, ge=0)
    account_id: str
    to_account_id: Optional[str] = None
    to_amount: Optional[float] = Field(default=None, ge=0)
    category_id: str = ""
    note: Optional[str] = Field(default=None, max_length=500)
    type: TransactionType

    @property
    def is_transfer(self) -> bool:
        return self.type == TransactionType.TRANSFER

    @property
    def base_amount(self) -> float:
        """Amount in the base currency at the frozen rate."""
        return self.amount * self.exchange_rate


class UserSettings(_SnapshotModel):
    """Display preferences stored alongside the data."""

    number_format: Literal["integer", "decimal"] = "decimal"
    theme: Literal["light", "dark"] = "light"


class AppData(_SnapshotModel):
    """
    The full snapshot: everything the user owns.

    The caller owns it; engine functions receive it (or its collections)
    as arguments and never keep a reference.
    """

    accounts: list[Account] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    rates: dict[str, float] = Field(default_factory=dict)
    settings: UserSettings = Field(default_factory=UserSettings)
    schema_version: int = Field(default=1, ge=1)

    def account_by_id(self, account_id: str) -> Optional[Account]:
        return next((a for a in self.accounts if a.id == account_id), None)

    def category_by_id(self, category_id: str) -> Optional[Category]:
        return next((c for c in self.categories if c.id == category_id), None)

    def transaction_by_id(self, transaction_id: str) -> Optional[Transaction]:
        return next((t for t in self.transactions if t.id == transaction_id), None)
