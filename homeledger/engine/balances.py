"""
Balance Engine

Computes an account's current balance from the full transaction log.
Nothing is cached: each call re-scans the transactions it is given.

    balance = initial_balance
              + income - expense          (account is the source)
              - transfers out             (account is the source)
              + transfers in              (account is the destination)

Transfers in are credited with their recorded `to_amount`. Transfers
recorded before that field existed are converted instead: source leg to
base currency with its FROZEN rate, then base to the destination currency
with the LIVE rate. Mixing the two rates is an accepted approximation;
replacing it would silently change old balances.

Transactions that point at accounts which no longer exist simply
contribute to no balance.
"""

from collections.abc import Iterable, Mapping
from typing import Optional

from homeledger.models.entities import (
    BASE_CURRENCY,
    Account,
    Currency,
    Transaction,
    TransactionType,
)
from homeledger.models.reports import AccountBalance
from homeledger.engine.currency import currency_code, to_base


ZERO_EPSILON = 0.005


def normalize_zero(value: float, epsilon: float = ZERO_EPSILON) -> float:
    """Snap float noise around zero to a plain (positive) 0.0."""
    if abs(value) < epsilon:
        return 0.0
    return value


def transfer_in_amount(
    transaction: Transaction,
    account: Account,
    rates: Mapping[str, float],
) -> float:
    """Amount a transfer credits to its destination `account`."""
    if transaction.to_amount is not None:
        return transaction.to_amount

    destination_rate = (
        rates.get(currency_code(account.currency))
        or account.current_rate
        or 1.0
    )
    return (transaction.amount * transaction.exchange_rate) / destination_rate


def balance_breakdown(
    account: Account,
    transactions: Iterable[Transaction],
    rates: Mapping[str, float],
    base_currency: Currency = BASE_CURRENCY,
    epsilon: float = ZERO_EPSILON,
) -> AccountBalance:
    """Balance of `account` together with every total it is built from."""
    income_total = 0.0
    expense_total = 0.0
    transfer_out_total = 0.0
    transfer_in_total = 0.0

    for t in transactions:
        if t.account_id == account.id:
            if t.type == TransactionType.INCOME:
                income_total += t.amount
            elif t.type == TransactionType.EXPENSE:
                expense_total += t.amount
            elif t.type == TransactionType.TRANSFER:
                transfer_out_total += t.amount

        # A transfer to the same account is both an out and an in leg.
        if t.type == TransactionType.TRANSFER and t.to_account_id == account.id:
            transfer_in_total += transfer_in_amount(t, account, rates)

    balance = normalize_zero(
        account.initial_balance
        + income_total
        - expense_total
        - transfer_out_total
        + transfer_in_total,
        epsilon,
    )

    balance_in_base: Optional[float] = None
    if currency_code(account.currency) != currency_code(base_currency):
        balance_in_base = normalize_zero(
            to_base(balance, account.currency, rates, base_currency), epsilon
        )

    return AccountBalance(
        account_id=account.id,
        name=account.name,
        currency=account.currency,
        type=account.type,
        is_hidden=account.is_hidden,
        initial_balance=account.initial_balance,
        income_total=income_total,
        expense_total=expense_total,
        transfer_out_total=transfer_out_total,
        transfer_in_total=transfer_in_total,
        balance=balance,
        balance_in_base=balance_in_base,
    )


def balance_of(
    account: Account,
    transactions: Iterable[Transaction],
    rates: Mapping[str, float],
    epsilon: float = ZERO_EPSILON,
) -> float:
    """Current balance of `account` in its own currency."""
    return balance_breakdown(account, transactions, rates, epsilon=epsilon).balance


def account_balances(
    accounts: Iterable[Account],
    transactions: Iterable[Transaction],
    rates: Mapping[str, float],
    base_currency: Currency = BASE_CURRENCY,
    epsilon: float = ZERO_EPSILON,
) -> dict[str, AccountBalance]:
    """Breakdown of every account, keyed by account id, in caller order."""
    transactions = list(transactions)
    return {
        account.id: balance_breakdown(account, transactions, rates, base_currency, epsilon)
        for account in accounts
    }
