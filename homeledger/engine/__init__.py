"""
Ledger & Budget Aggregation Engine

Pure functions over a snapshot. Nothing in this package performs I/O,
keeps state between calls, or mutates its arguments.
"""

from homeledger.engine.currency import currency_code, from_base, rate_for, to_base
from homeledger.engine.balances import (
    ZERO_EPSILON,
    account_balances,
    balance_breakdown,
    balance_of,
    normalize_zero,
    transfer_in_amount,
)
from homeledger.engine.transfers import (
    check_reconciliation,
    default_rate,
    destination_amount,
    frozen_exchange_rate,
    implied_rate,
    is_multi_currency,
    recompute_transfer,
    source_amount,
    transfer_direction,
)
from homeledger.engine.budgets import (
    LEGACY_BUDGET_KEY,
    bootstrap_history,
    budget_for,
    month_key,
    planned_totals,
    set_budget,
    shift_month,
)
from homeledger.engine.periods import (
    in_month,
    local_timezone,
    monthly_report,
    transactions_in_month,
)
from homeledger.engine.grouping import (
    group_accounts,
    group_summaries,
    group_total,
    portfolio_total,
)

__all__ = [
    # Currency
    "currency_code",
    "from_base",
    "rate_for",
    "to_base",
    # Balances
    "ZERO_EPSILON",
    "account_balances",
    "balance_breakdown",
    "balance_of",
    "normalize_zero",
    "transfer_in_amount",
    # Transfers
    "check_reconciliation",
    "default_rate",
    "destination_amount",
    "frozen_exchange_rate",
    "implied_rate",
    "is_multi_currency",
    "recompute_transfer",
    "source_amount",
    "transfer_direction",
    # Budgets
    "LEGACY_BUDGET_KEY",
    "bootstrap_history",
    "budget_for",
    "month_key",
    "planned_totals",
    "set_budget",
    "shift_month",
    # Periods
    "in_month",
    "local_timezone",
    "monthly_report",
    "transactions_in_month",
    # Grouping
    "group_accounts",
    "group_summaries",
    "group_total",
    "portfolio_total",
]
