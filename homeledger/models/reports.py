"""
Derived Records

Everything the engine returns is one of these models. They are plain
projections of a snapshot: building one never changes the snapshot, and
nothing here is ever persisted.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from homeledger.models.entities import AccountType, Currency, TransactionType


# =============================================================================
# BALANCES & GROUPS
# =============================================================================

class AccountBalance(BaseModel):
    """
    Balance of one account with the totals it was built from.

    `balance_in_base` uses the LIVE rate table; it is None when the account
    is already in the base currency.
    """

    account_id: str
    name: str
    currency: Currency
    type: AccountType
    is_hidden: bool = False

    initial_balance: float = 0.0
    income_total: float = 0.0
    expense_total: float = 0.0
    transfer_out_total: float = 0.0
    transfer_in_total: float = 0.0

    balance: float = Field(
        ...,
        description="Current balance in the account currency"
    )
    balance_in_base: Optional[float] = Field(
        default=None,
        description="Balance converted with the live rate table"
    )


class AccountGroupSummary(BaseModel):
    """All accounts of one type with their base-currency subtotal."""

    type: AccountType
    accounts: list[AccountBalance] = Field(default_factory=list)
    total_in_base: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.accounts


# =============================================================================
# MONTHLY REPORT
# =============================================================================

class CategoryLine(BaseModel):
    """Actual vs. planned amount of one category in one month."""

    id: str
    name: str
    type: TransactionType
    value: float = 0.0
    budget: float = 0.0
    color: str
    icon: str

    @property
    def remaining(self) -> float:
        """Budget left (negative when overspent)."""
        return self.budget - self.value

    @property
    def usage(self) -> Optional[float]:
        """Share of the budget already used, None without a budget."""
        if not self.budget:
            return None
        return self.value / self.budget


class MonthlyReport(BaseModel):
    """
    Per-month breakdown for the overview screen.

    `income` and `expense` come straight from the transactions; the line
    totals (`actual_total`) are computed independently from the category
    lines so callers can cross-check the two.
    """

    month: str = Field(
        ...,
        pattern=r"^\d{4}-(0[1-9]|1[0-2])$",
        description="Month key (YYYY-MM)"
    )
    income: float = 0.0
    expense: float = 0.0
    transaction_count: int = Field(default=0, ge=0)

    income_lines: list[CategoryLine] = Field(default_factory=list)
    expense_lines: list[CategoryLine] = Field(default_factory=list)

    # Raw per-category totals, transfers included under their sentinel id.
    category_totals: dict[str, float] = Field(default_factory=dict)

    @property
    def net(self) -> float:
        return self.income - self.expense

    @property
    def per_category(self) -> list[CategoryLine]:
        """Expense lines followed by income lines, each in caller order."""
        return [*self.expense_lines, *self.income_lines]

    @property
    def planned_income(self) -> float:
        return sum(line.budget for line in self.income_lines)

    @property
    def planned_expense(self) -> float:
        return sum(line.budget for line in self.expense_lines)

    def lines_for(self, type: TransactionType) -> list[CategoryLine]:
        if type == TransactionType.INCOME:
            return self.income_lines
        if type == TransactionType.EXPENSE:
            return self.expense_lines
        return []

    def actual_total(self, type: TransactionType) -> float:
        """Sum of the category line values of one type."""
        return sum(line.value for line in self.lines_for(type))

    def line(self, category_id: str) -> Optional[CategoryLine]:
        return next((item for item in self.per_category if item.id == category_id), None)


# =============================================================================
# TRANSFERS
# =============================================================================

class TransferDirection(str, Enum):
    """
    Direction of a cross-currency transfer.

    SELL: foreign source, base-currency destination (dest = source * rate).
    BUY: everything else (dest = source / rate).
    """
    SELL = "sell"
    BUY = "buy"


class TransferField(str, Enum):
    """The three linked amounts of a cross-currency transfer."""
    SOURCE_AMOUNT = "source_amount"
    DESTINATION_AMOUNT = "destination_amount"
    RATE = "rate"


class TransferLegs(BaseModel):
    """The linked amounts of a cross-currency transfer being edited."""

    source_amount: Optional[float] = None
    destination_amount: Optional[float] = None
    rate: Optional[float] = None


class ReconciliationResult(BaseModel):
    """
    Outcome of checking a transfer's entered amounts against its rate.

    A mismatch is a warning, never a hard failure: the caller may still
    save after the user explicitly confirms.
    """

    direction: TransferDirection
    expected_destination: Optional[float] = None
    actual_destination: Optional[float] = None
    difference: Optional[float] = None
    tolerance: float = 1.0
    is_complete: bool = Field(
        default=True,
        description="False while any of the three amounts is still missing"
    )
    is_mismatch: bool = False
