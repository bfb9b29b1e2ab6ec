"""
Period Aggregator

Builds the monthly overview: income and expense totals, per-category
actuals and the budget planned for each category in that month.

Amounts are normalized with each transaction's FROZEN `exchange_rate`,
never with the live rate table, so past months keep reporting what they
reported when they happened.

Month membership uses the calendar fields of the stored date. Pass `tz`
to convert timezone-aware dates into a specific zone first; the ledger
passes the local zone, so a stored UTC instant lands in the month the
user experienced it in.
"""

from collections import defaultdict
from collections.abc import Iterable, Iterator
from datetime import datetime, tzinfo
from typing import Optional

from homeledger.models.entities import Category, Transaction, TransactionType
from homeledger.models.reports import CategoryLine, MonthlyReport
from homeledger.engine.budgets import MonthLike, budget_for, month_key
from homeledger.observability import get_logger


log = get_logger(__name__)

# Line totals and type totals may differ by float noise only.
CROSS_CHECK_TOLERANCE = 0.01


def local_timezone() -> tzinfo:
    """Zone of the machine the ledger runs on."""
    return datetime.now().astimezone().tzinfo


def local_date(moment: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """`moment` in `tz` when both are timezone-aware, otherwise unchanged."""
    if tz is not None and moment.tzinfo is not None:
        return moment.astimezone(tz)
    return moment


def in_month(transaction: Transaction, month: MonthLike, tz: Optional[tzinfo] = None) -> bool:
    """True when the transaction falls in the calendar month of `month`."""
    return month_key(local_date(transaction.date, tz)) == month_key(month)


def transactions_in_month(
    transactions: Iterable[Transaction],
    month: MonthLike,
    tz: Optional[tzinfo] = None,
) -> Iterator[Transaction]:
    key = month_key(month)
    for t in transactions:
        if month_key(local_date(t.date, tz)) == key:
            yield t


def monthly_report(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    month: MonthLike,
    tz: Optional[tzinfo] = None,
) -> MonthlyReport:
    """
    Actual-vs-budget breakdown of one calendar month.

    Category lines keep the order of `categories`, which is the user's
    manual sort order. Transfers count toward neither income nor expense,
    but they still appear in `category_totals` under their sentinel id.
    """
    key = month_key(month)
    income = 0.0
    expense = 0.0
    count = 0
    category_totals: dict[str, float] = defaultdict(float)

    for t in transactions_in_month(transactions, key, tz):
        count += 1
        amount_in_base = t.amount * t.exchange_rate

        if t.type == TransactionType.INCOME:
            income += amount_in_base
        elif t.type == TransactionType.EXPENSE:
            expense += amount_in_base

        category_totals[t.category_id] += amount_in_base

    income_lines: list[CategoryLine] = []
    expense_lines: list[CategoryLine] = []
    for category in categories:
        line = CategoryLine(
            id=category.id,
            name=category.name,
            type=category.type,
            value=category_totals.get(category.id, 0.0),
            budget=budget_for(category, key),
            color=category.color,
            icon=category.icon,
        )
        if category.type == TransactionType.INCOME:
            income_lines.append(line)
        elif category.type == TransactionType.EXPENSE:
            expense_lines.append(line)

    report = MonthlyReport(
        month=key,
        income=income,
        expense=expense,
        transaction_count=count,
        income_lines=income_lines,
        expense_lines=expense_lines,
        category_totals=dict(category_totals),
    )
    _cross_check(report)
    return report


def _cross_check(report: MonthlyReport) -> None:
    """Log when category lines do not add up to the type totals."""
    for type_, total in (
        (TransactionType.INCOME, report.income),
        (TransactionType.EXPENSE, report.expense),
    ):
        lines_total = report.actual_total(type_)
        if abs(lines_total - total) > CROSS_CHECK_TOLERANCE:
            # Usually a transaction filed under a category of the other type,
            # or under a deleted category.
            log.warning(
                "budget_totals_mismatch",
                month=report.month,
                type=type_.value,
                transactions_total=total,
                category_lines_total=lines_total,
            )
