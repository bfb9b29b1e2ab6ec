"""
Account Grouping & Valuation

Partitions accounts by type and values each group in the base currency.

Unlike the period aggregator, valuation uses the LIVE rate table: it
answers "what is this worth today", not "what was it worth then".
Hidden accounts are left out of totals unless explicitly included.
"""

from collections.abc import Iterable, Mapping
from typing import Optional

from homeledger.models.entities import (
    BASE_CURRENCY,
    Account,
    AccountType,
    Currency,
    Transaction,
)
from homeledger.models.reports import AccountGroupSummary
from homeledger.engine.balances import ZERO_EPSILON, balance_breakdown, balance_of
from homeledger.engine.currency import to_base


def group_accounts(
    accounts: Iterable[Account],
    type: Optional[AccountType] = None,
    include_hidden: bool = True,
) -> list[Account]:
    """Accounts of one type (CURRENT when unset), in caller order."""
    wanted = type or AccountType.CURRENT
    return [
        a for a in accounts
        if (a.type or AccountType.CURRENT) == wanted
        and (include_hidden or not a.is_hidden)
    ]


def group_total(
    accounts: Iterable[Account],
    type: Optional[AccountType],
    transactions: Iterable[Transaction],
    rates: Mapping[str, float],
    include_hidden: bool = False,
    base_currency: Currency = BASE_CURRENCY,
) -> float:
    """Base-currency value of every account of `type`."""
    transactions = list(transactions)
    return sum(
        (
            to_base(balance_of(a, transactions, rates), a.currency, rates, base_currency)
            for a in group_accounts(accounts, type, include_hidden)
        ),
        0.0,
    )


def portfolio_total(
    accounts: Iterable[Account],
    transactions: Iterable[Transaction],
    rates: Mapping[str, float],
    include_hidden: bool = False,
    base_currency: Currency = BASE_CURRENCY,
) -> float:
    """Base-currency value of all accounts of every type."""
    accounts = list(accounts)
    transactions = list(transactions)
    return sum(
        (
            group_total(accounts, t, transactions, rates, include_hidden, base_currency)
            for t in AccountType
        ),
        0.0,
    )


def group_summaries(
    accounts: Iterable[Account],
    transactions: Iterable[Transaction],
    rates: Mapping[str, float],
    include_hidden: bool = False,
    base_currency: Currency = BASE_CURRENCY,
    epsilon: float = ZERO_EPSILON,
) -> list[AccountGroupSummary]:
    """
    One summary per account type, in CURRENT / SAVINGS / DEBT order.

    Member lists honour `include_hidden` the same way the totals do.
    Empty groups are included; whether to show them is up to the caller.
    """
    accounts = list(accounts)
    transactions = list(transactions)
    summaries = []
    for account_type in (AccountType.CURRENT, AccountType.SAVINGS, AccountType.DEBT):
        members = [
            balance_breakdown(a, transactions, rates, base_currency, epsilon)
            for a in group_accounts(accounts, account_type, include_hidden)
        ]
        total = sum(
            (to_base(m.balance, m.currency, rates, base_currency) for m in members),
            0.0,
        )
        summaries.append(AccountGroupSummary(type=account_type, accounts=members, total_in_base=total))
    return summaries
