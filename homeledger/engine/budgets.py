"""
Budget Resolver

Budgets are time-versioned per category. `budget_history` maps month keys
("YYYY-MM") to an amount that applies from that month forward until a
later key supersedes it:

    {"2024-01": 100, "2024-03": 150}
        Dec 2023 -> 0      (no budget yet)
        Feb 2024 -> 100
        Mar 2024 -> 150 (and every month after)

Zero-padded month keys sort chronologically as plain strings, so the
lookup is a string comparison.

Editing the budget of month M is authoritative from M onward: every key
after M is discarded, including future changes scheduled earlier. This
truncation is intended behavior.
"""

from collections.abc import Iterable
from datetime import date, datetime
from typing import Union

from homeledger.models.entities import MONTH_KEY_PATTERN, Category, TransactionType


MonthLike = Union[date, datetime, str]

# Key older than any real data; used when seeding history from monthly_budget.
LEGACY_BUDGET_KEY = "1970-01"


def month_key(target: MonthLike) -> str:
    """Month key ("YYYY-MM") of a date, datetime or an existing key."""
    if isinstance(target, str):
        key = target[:7]
        if not MONTH_KEY_PATTERN.match(key):
            raise ValueError(f"Invalid month: {target!r} (expected YYYY-MM)")
        return key
    # datetime is a subclass of date; both expose year/month.
    return f"{target.year:04d}-{target.month:02d}"


def shift_month(target: MonthLike, delta: int) -> str:
    """Month key `delta` months after (or before, if negative) `target`."""
    year, month = (int(part) for part in month_key(target).split("-"))
    index = year * 12 + (month - 1) + delta
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def budget_for(category: Category, target: MonthLike) -> float:
    """Budget of `category` in effect for the month of `target`."""
    history = category.budget_history
    if not history:
        return category.monthly_budget or 0.0

    target_key = month_key(target)
    effective = [key for key in history if key <= target_key]
    if not effective:
        return 0.0
    return history[max(effective)]


def set_budget(category: Category, target: MonthLike, amount: float) -> Category:
    """
    Category with its budget set to `amount` from the month of `target`.

    Every later key is dropped. The given category is left untouched.
    """
    key = month_key(target)
    history = {
        k: v for k, v in (category.budget_history or {}).items()
        if k <= key
    }
    history[key] = amount
    return category.model_copy(update={"budget_history": dict(sorted(history.items()))})


def bootstrap_history(category: Category, key: str = LEGACY_BUDGET_KEY) -> Category:
    """
    Seed an empty history from the flat `monthly_budget`.

    Without this, the first dated edit would leave every earlier month
    with no budget at all.
    """
    if category.budget_history:
        return category
    return category.model_copy(update={"budget_history": {key: category.monthly_budget or 0.0}})


def planned_totals(
    categories: Iterable[Category],
    target: MonthLike,
) -> dict[TransactionType, float]:
    """Total planned income and expense for one month."""
    totals = {TransactionType.INCOME: 0.0, TransactionType.EXPENSE: 0.0}
    for category in categories:
        if category.type in totals:
            totals[category.type] += budget_for(category, target)
    return totals
