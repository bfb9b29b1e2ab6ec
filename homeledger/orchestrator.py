"""
Main Orchestrator for HomeLedger

This module ties the snapshot, the engine, validation and storage
together. It is the facade a UI calls:

1. Mutations (save/delete transactions, accounts, categories, budgets,
   rates, imports) produce a NEW snapshot and autosave it.
2. Queries (balances, group totals, monthly report, transaction list)
   are delegated to the pure engine with the current snapshot.

DESIGN DECISION: Copy-on-write. A snapshot handed out by `data` is never
changed afterwards; every mutation replaces it. A reader holding an old
snapshot keeps a consistent view of accounts, categories and
transactions taken at the same instant.

The orchestrator enforces the boundaries:
- No transaction is stored without passing validation
- No reconciliation mismatch is stored without explicit confirmation
- Deleting an account removes the transactions it is the source of
"""

from collections.abc import Iterable, Mapping
from datetime import date, tzinfo
from pathlib import Path
from typing import Optional, Union

from homeledger.config import LedgerSettings, get_settings
from homeledger.engine import (
    account_balances,
    balance_breakdown,
    bootstrap_history,
    group_summaries,
    group_total,
    local_timezone,
    monthly_report,
    planned_totals,
    portfolio_total,
    set_budget,
)
from homeledger.engine.budgets import MonthLike
from homeledger.models.defaults import initial_data
from homeledger.models.entities import (
    Account,
    AccountType,
    AppData,
    Category,
    Transaction,
    TransactionType,
)
from homeledger.models.drafts import TransactionDraft, ValidationResult
from homeledger.models.reports import AccountBalance, AccountGroupSummary, MonthlyReport
from homeledger.observability import configure_logging, get_logger
from homeledger.queries import DayGroup, QueryExecutor, TransactionFilters
from homeledger.services.storage import (
    JsonFileStorage,
    SnapshotStorageInterface,
    export_filename,
    export_json,
    import_json,
)
from homeledger.validation import TransactionValidator


log = get_logger(__name__)


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class UnknownEntityError(LedgerError):
    """An edit or delete referenced an id that does not exist."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id!r} does not exist")


class HouseholdLedger:
    """
    The user's ledger: one snapshot plus the operations on it.

    Holds no derived state. Every query re-derives from the snapshot.
    """

    def __init__(
        self,
        data: Optional[AppData] = None,
        storage: Optional[SnapshotStorageInterface] = None,
        validator: Optional[TransactionValidator] = None,
        settings: Optional[LedgerSettings] = None,
        tz: Optional[tzinfo] = None,
    ):
        """
        Initialize the ledger.

        Args:
            data: Starting snapshot. Loaded from `storage` when omitted,
                  or the starter data when there is no storage either.
            storage: Backend every mutation is saved to. None keeps the
                  ledger in memory only.
            validator: Draft validator (built from settings if omitted).
            settings: Ledger settings (loaded if omitted).
            tz: Zone used to place transaction instants into months/days
                (the machine's local zone if omitted).
        """
        self._settings = settings or get_settings().ledger
        self._storage = storage
        self._tz = tz or local_timezone()
        self._validator = validator or TransactionValidator(
            tolerance=self._settings.reconciliation_tolerance,
            transfer_category_id=self._settings.transfer_category_id,
            tz=self._tz,
        )

        if data is None:
            data = storage.load() if storage is not None else initial_data()
        self._data = data

    # -------------------------------------------------------------------------
    # Snapshot
    # -------------------------------------------------------------------------

    @property
    def data(self) -> AppData:
        """Current snapshot (never mutated after it is handed out)."""
        return self._data

    @property
    def rates(self) -> dict[str, float]:
        return dict(self._data.rates)

    def _commit(self, data: AppData, event: str, **context) -> AppData:
        """
        Persist a new snapshot, then swap it in.

        If saving fails the current snapshot stays in place and the
        StorageError propagates, so a retry starts from the same state.
        """
        if self._storage is not None:
            self._storage.save(data)
        self._data = data
        log.info(event, **context)
        return data

    def _replace(self, **changes) -> AppData:
        return self._data.model_copy(update=changes)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def validate_transaction(self, draft: TransactionDraft) -> ValidationResult:
        """Check a draft without saving it."""
        return self._validator.validate(draft, self._data.accounts, self._data.categories)

    def save_transaction(self, draft: TransactionDraft, confirmed: bool = False) -> Transaction:
        """
        Validate and store a transaction.

        A draft with an `id` replaces that transaction as a whole;
        otherwise a new one is appended.

        Raises:
            TransactionValidationError: the draft has errors
            ConfirmationRequiredError: the draft has warnings and
                `confirmed` is False
            UnknownEntityError: the draft edits a missing transaction
        """
        if draft.id and self._data.transaction_by_id(draft.id) is None:
            raise UnknownEntityError("Transaction", draft.id)

        transaction = self._validator.to_transaction(
            draft, self._data.accounts, self._data.categories, confirmed=confirmed
        )

        if draft.id:
            transactions = [
                transaction if t.id == transaction.id else t
                for t in self._data.transactions
            ]
            event = "transaction_updated"
        else:
            transactions = [*self._data.transactions, transaction]
            event = "transaction_created"

        self._commit(
            self._replace(transactions=transactions),
            event,
            transaction_id=transaction.id,
            type=transaction.type.value,
            confirmed=confirmed,
        )
        return transaction

    def delete_transaction(self, transaction_id: str) -> None:
        if self._data.transaction_by_id(transaction_id) is None:
            raise UnknownEntityError("Transaction", transaction_id)
        self._commit(
            self._replace(transactions=[t for t in self._data.transactions if t.id != transaction_id]),
            "transaction_deleted",
            transaction_id=transaction_id,
        )

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def save_account(self, account: Account) -> Account:
        """Create `account`, or replace the account with the same id."""
        if self._data.account_by_id(account.id) is None:
            accounts = [*self._data.accounts, account]
            event = "account_created"
        else:
            accounts = [account if a.id == account.id else a for a in self._data.accounts]
            event = "account_updated"
        self._commit(self._replace(accounts=accounts), event, account_id=account.id)
        return account

    def delete_account(self, account_id: str) -> int:
        """
        Delete an account and every transaction it is the source of.

        Transfers INTO the account are kept; they no longer count toward
        any balance.

        Returns:
            Number of transactions removed with the account
        """
        if self._data.account_by_id(account_id) is None:
            raise UnknownEntityError("Account", account_id)

        kept = [t for t in self._data.transactions if t.account_id != account_id]
        removed = len(self._data.transactions) - len(kept)
        self._commit(
            self._replace(
                accounts=[a for a in self._data.accounts if a.id != account_id],
                transactions=kept,
            ),
            "account_deleted",
            account_id=account_id,
            transactions_removed=removed,
        )
        return removed

    def toggle_account_visibility(self, account_id: str) -> Account:
        account = self._data.account_by_id(account_id)
        if account is None:
            raise UnknownEntityError("Account", account_id)
        return self.save_account(account.model_copy(update={"is_hidden": not account.is_hidden}))

    def reorder_accounts(self, account_ids: Iterable[str]) -> None:
        """Apply a manual sort order; accounts not listed keep their relative order at the end."""
        self._commit(
            self._replace(accounts=_reordered(self._data.accounts, account_ids)),
            "accounts_reordered",
        )

    # -------------------------------------------------------------------------
    # Categories & budgets
    # -------------------------------------------------------------------------

    def save_category(self, category: Category) -> Category:
        """Create `category`, or replace the category with the same id."""
        if self._data.category_by_id(category.id) is None:
            categories = [*self._data.categories, category]
            event = "category_created"
        else:
            categories = [category if c.id == category.id else c for c in self._data.categories]
            event = "category_updated"
        self._commit(self._replace(categories=categories), event, category_id=category.id)
        return category

    def delete_category(self, category_id: str) -> None:
        """Delete a category. Its transactions stay and simply match no category line."""
        if self._data.category_by_id(category_id) is None:
            raise UnknownEntityError("Category", category_id)
        self._commit(
            self._replace(categories=[c for c in self._data.categories if c.id != category_id]),
            "category_deleted",
            category_id=category_id,
        )

    def reorder_categories(self, category_ids: Iterable[str]) -> None:
        self._commit(
            self._replace(categories=_reordered(self._data.categories, category_ids)),
            "categories_reordered",
        )

    def set_category_budget(self, category_id: str, month: MonthLike, amount: float) -> Category:
        """
        Set a category's budget from `month` onward.

        Later scheduled budgets are discarded. A category without history
        is first seeded from its flat monthly budget, so months before
        `month` keep the budget they had.
        """
        category = self._data.category_by_id(category_id)
        if category is None:
            raise UnknownEntityError("Category", category_id)

        updated = set_budget(bootstrap_history(category), month, amount)
        self.save_category(updated)
        log.info("category_budget_set", category_id=category_id, amount=amount)
        return updated

    # -------------------------------------------------------------------------
    # Rates, import & export
    # -------------------------------------------------------------------------

    def update_rates(self, rates: Mapping[str, float]) -> None:
        """Replace the live rate table. Stored transactions keep their frozen rates."""
        self._commit(
            self._replace(rates={str(k): float(v) for k, v in rates.items()}),
            "rates_updated",
            currencies=sorted(rates),
        )

    def import_backup(self, text: str) -> AppData:
        """
        Replace the whole snapshot with a backup.

        Raises:
            InvalidFormatError: the text is not a usable backup
        """
        data = import_json(text)
        return self._commit(
            data,
            "backup_imported",
            accounts=len(data.accounts),
            transactions=len(data.transactions),
        )

    def export_backup(self, today: Optional[date] = None) -> tuple[str, str]:
        """Returns: (file_name, json_text)"""
        prefix = get_settings().storage.backup_prefix
        return export_filename(today, prefix), export_json(self._data)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def balance(self, account_id: str) -> AccountBalance:
        account = self._data.account_by_id(account_id)
        if account is None:
            raise UnknownEntityError("Account", account_id)
        return balance_breakdown(
            account,
            self._data.transactions,
            self._data.rates,
            epsilon=self._settings.zero_epsilon,
        )

    def balances(self) -> dict[str, AccountBalance]:
        return account_balances(
            self._data.accounts,
            self._data.transactions,
            self._data.rates,
            epsilon=self._settings.zero_epsilon,
        )

    def group_total(self, type: Optional[AccountType] = None, include_hidden: bool = False) -> float:
        return group_total(
            self._data.accounts,
            type,
            self._data.transactions,
            self._data.rates,
            include_hidden,
        )

    def portfolio_total(self, include_hidden: bool = False) -> float:
        return portfolio_total(
            self._data.accounts,
            self._data.transactions,
            self._data.rates,
            include_hidden,
        )

    def account_groups(self, include_hidden: bool = False) -> list[AccountGroupSummary]:
        return group_summaries(
            self._data.accounts,
            self._data.transactions,
            self._data.rates,
            include_hidden,
            epsilon=self._settings.zero_epsilon,
        )

    def monthly_report(self, month: MonthLike) -> MonthlyReport:
        return monthly_report(self._data.transactions, self._data.categories, month, self._tz)

    def planned_totals(self, month: MonthLike) -> dict[TransactionType, float]:
        return planned_totals(self._data.categories, month)

    def transactions(self, filters: Optional[TransactionFilters] = None) -> list[Transaction]:
        return QueryExecutor(self._data.transactions, self._tz).execute(filters)

    def transactions_by_day(self, filters: Optional[TransactionFilters] = None) -> list[DayGroup]:
        return QueryExecutor(self._data.transactions, self._tz).group_by_day(filters)


def _reordered(items: list, ids: Iterable[str]) -> list:
    order = {item_id: index for index, item_id in enumerate(ids)}
    # sorted() is stable, so unlisted items keep their relative order.
    return sorted(items, key=lambda item: order.get(item.id, len(order)))


def create_ledger(
    path: Optional[Union[str, Path]] = None,
    use_storage: bool = True,
) -> HouseholdLedger:
    """
    Factory function to create a ready-to-use ledger.

    Args:
        path: Snapshot file (defaults to the configured data path).
        use_storage: Set to False for an in-memory ledger with starter data.

    Returns:
        The ledger, loaded from storage when enabled
    """
    configure_logging()
    storage = JsonFileStorage(path) if use_storage else None
    return HouseholdLedger(storage=storage)
