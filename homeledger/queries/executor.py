"""
Transaction List Queries

Backs the transaction list: filter by account, category, month, type and
note text, newest first, grouped by calendar day.

Filtering by account matches both legs of a transfer, so an account's
list shows money leaving and money arriving.
"""

from collections.abc import Iterable
from datetime import tzinfo
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from homeledger.engine.budgets import month_key
from homeledger.engine.periods import local_date
from homeledger.models.entities import Transaction, TransactionType


class TransactionFilters(BaseModel):
    """
    Filters chosen on the transaction list.

    Empty values mean "no filter". `month` accepts anything `month_key`
    does and is normalized to "YYYY-MM".
    """

    account_id: Optional[str] = None
    category_id: Optional[str] = None
    month: Optional[str] = None
    type: Optional[TransactionType] = None
    text: Optional[str] = Field(
        default=None,
        description="Case-insensitive substring of the note"
    )

    @field_validator('month', mode='before')
    @classmethod
    def normalize_month(cls, v):
        if v in (None, ""):
            return None
        return month_key(v)

    @property
    def is_empty(self) -> bool:
        return not any((self.account_id, self.category_id, self.month, self.type, self.text))


class DayGroup(BaseModel):
    """Transactions of one calendar day."""

    day: str = Field(..., description="ISO date (YYYY-MM-DD)")
    transactions: list[Transaction] = Field(default_factory=list)


class QueryExecutor:
    """
    Runs list queries over a transaction collection.

    GUARANTEES:
    - Only returns transactions it was given
    - Never changes them or their order within a day beyond newest-first
    """

    def __init__(self, transactions: Iterable[Transaction], tz: Optional[tzinfo] = None):
        self._transactions = list(transactions)
        self._tz = tz

    def matches(self, transaction: Transaction, filters: TransactionFilters) -> bool:
        """True when `transaction` passes every set filter."""
        if filters.account_id and filters.account_id not in (
            transaction.account_id,
            transaction.to_account_id,
        ):
            return False
        if filters.category_id and transaction.category_id != filters.category_id:
            return False
        if filters.type and transaction.type != filters.type:
            return False
        if filters.month and month_key(local_date(transaction.date, self._tz)) != filters.month:
            return False
        if filters.text:
            note = (transaction.note or "").casefold()
            if filters.text.casefold() not in note:
                return False
        return True

    def execute(self, filters: Optional[TransactionFilters] = None) -> list[Transaction]:
        """Matching transactions, newest first."""
        filters = filters or TransactionFilters()
        found = [t for t in self._transactions if self.matches(t, filters)]
        # sorted() is stable: same-instant transactions keep entry order.
        return sorted(found, key=lambda t: local_date(t.date, self._tz).timestamp(), reverse=True)

    def group_by_day(self, filters: Optional[TransactionFilters] = None) -> list[DayGroup]:
        """Matching transactions grouped by day, newest day first."""
        groups: dict[str, list[Transaction]] = {}
        for t in self.execute(filters):
            day = local_date(t.date, self._tz).date().isoformat()
            groups.setdefault(day, []).append(t)
        return [DayGroup(day=day, transactions=items) for day, items in groups.items()]

    def describe(self, filters: TransactionFilters) -> str:
        """Human-readable description of the active filters."""
        if filters.is_empty:
            return "All transactions"
        parts = ["Transactions"]
        if filters.type:
            parts.append(f"of type {filters.type.value}")
        if filters.account_id:
            parts.append(f"for account {filters.account_id}")
        if filters.category_id:
            parts.append(f"in category {filters.category_id}")
        if filters.month:
            parts.append(f"in {filters.month}")
        if filters.text:
            parts.append(f"matching {filters.text!r}")
        return " ".join(parts)
