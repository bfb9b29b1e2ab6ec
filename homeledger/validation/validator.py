"""
Two-Stage Transaction Validation

DESIGN DECISION: A transaction draft goes through two distinct stages
before it may enter the ledger:

STAGE 1 - SCHEMA VALIDATION:
- Amount present and positive
- Source account chosen and known
- Category chosen for income/expense
- Transfers: a different, known destination account
- Multi-currency transfers: credited amount and a usable rate

STAGE 2 - SEMANTIC VALIDATION:
- Transfer reconciliation (entered amounts vs. entered rate)
- Category type matches the transaction type

WHY TWO STAGES:
Stage 2 needs the fields stage 1 guarantees, and the two kinds of issue
are handled differently: stage 1 errors block saving, stage 2 warnings
are shown to the user, who may still save after confirming.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for human review.
"""

from collections.abc import Iterable
from datetime import date, datetime, timezone, tzinfo
from typing import Optional

from homeledger.config import get_settings
from homeledger.engine.transfers import (
    check_reconciliation,
    default_rate,
    frozen_exchange_rate,
    is_multi_currency,
    transfer_direction,
)
from homeledger.models.entities import (
    BASE_CURRENCY,
    Account,
    Category,
    Transaction,
    TransactionType,
    generate_id,
)
from homeledger.models.drafts import (
    TransactionDraft,
    ValidationIssue,
    ValidationResult,
)
from homeledger.models.reports import ReconciliationResult
from homeledger.observability import get_logger


log = get_logger(__name__)


class TransactionValidationError(ValueError):
    """A draft with error-level issues was submitted."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(i.message for i in result.issues if i.severity == "error")
        super().__init__(f"Transaction is not valid: {messages}")


class ConfirmationRequiredError(ValueError):
    """A draft with warnings was submitted without explicit confirmation."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(i.message for i in result.warnings)
        super().__init__(f"Transaction needs confirmation: {messages}")


class TransactionValidator:
    """
    Validates transaction drafts against the accounts and categories
    they reference, and turns valid drafts into transactions.
    """

    def __init__(
        self,
        tolerance: Optional[float] = None,
        transfer_category_id: Optional[str] = None,
        tz: Optional[tzinfo] = None,
    ):
        """
        Initialize validator.

        Args:
            tolerance: Allowed transfer reconciliation gap.
            transfer_category_id: Sentinel category written on transfers.
            tz: Zone whose midnight a plain draft date is stored at (UTC
                when omitted).

        Tolerance and sentinel left as None come from the ledger settings.
        """
        settings = get_settings().ledger
        self._tolerance = settings.reconciliation_tolerance if tolerance is None else tolerance
        self._transfer_category_id = transfer_category_id or settings.transfer_category_id
        self._tz = tz

    def _validate_schema(
        self,
        draft: TransactionDraft,
        accounts: dict[str, Account],
        categories: dict[str, Category],
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if draft.amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
                suggested_fix="Enter how much money moved",
            ))
        elif draft.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            ))

        source = accounts.get(draft.account_id)
        if not draft.account_id:
            issues.append(ValidationIssue(
                field="account_id",
                issue_type="missing",
                message="Account is required",
                severity="error",
                suggested_fix="Choose the account the money moved from",
            ))
        elif source is None:
            issues.append(ValidationIssue(
                field="account_id",
                issue_type="unknown_reference",
                message=f"Account {draft.account_id!r} does not exist",
                severity="error",
            ))

        if draft.rate is not None and draft.rate <= 0:
            issues.append(ValidationIssue(
                field="rate",
                issue_type="invalid_value",
                message="Exchange rate must be greater than zero",
                severity="error",
            ))

        if draft.is_transfer:
            issues.extend(self._validate_transfer_schema(draft, source, accounts))
        elif not draft.category_id:
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="missing",
                message="Category is required",
                severity="error",
                suggested_fix="Choose a category",
            ))
        elif draft.category_id not in categories:
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="unknown_reference",
                message=f"Category {draft.category_id!r} does not exist",
                severity="error",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def _validate_transfer_schema(
        self,
        draft: TransactionDraft,
        source: Optional[Account],
        accounts: dict[str, Account],
    ) -> list[ValidationIssue]:
        issues = []

        if not draft.to_account_id or draft.to_account_id == draft.account_id:
            issues.append(ValidationIssue(
                field="to_account_id",
                issue_type="missing",
                message="Transfers need a different destination account",
                severity="error",
                suggested_fix="Choose another account to credit",
            ))
            return issues

        destination = accounts.get(draft.to_account_id)
        if destination is None:
            issues.append(ValidationIssue(
                field="to_account_id",
                issue_type="unknown_reference",
                message=f"Account {draft.to_account_id!r} does not exist",
                severity="error",
            ))
            return issues

        if is_multi_currency(source, destination):
            if draft.to_amount is None:
                issues.append(ValidationIssue(
                    field="to_amount",
                    issue_type="missing",
                    message="Enter the amount credited to the destination account",
                    severity="error",
                ))
            elif draft.to_amount <= 0:
                issues.append(ValidationIssue(
                    field="to_amount",
                    issue_type="invalid_value",
                    message="Credited amount must be greater than zero",
                    severity="error",
                ))

        return issues

    def _validate_semantic(
        self,
        draft: TransactionDraft,
        accounts: dict[str, Account],
        categories: dict[str, Category],
    ) -> tuple[list[ValidationIssue], Optional[ReconciliationResult]]:
        """
        Stage 2: Semantic validation.

        Only produces warnings. Returns: (issues, reconciliation)
        """
        issues = []
        reconciliation = None

        if draft.is_transfer:
            source = accounts[draft.account_id]
            destination = accounts[draft.to_account_id]
            if is_multi_currency(source, destination):
                reconciliation = check_reconciliation(
                    draft.amount,
                    draft.to_amount,
                    self._effective_rate(draft, source),
                    transfer_direction(source.currency, destination.currency, BASE_CURRENCY),
                    self._tolerance,
                )
                if reconciliation.is_mismatch:
                    issues.append(ValidationIssue(
                        field="to_amount",
                        issue_type="reconciliation_mismatch",
                        message=(
                            f"Amounts do not match the rate: expected "
                            f"{reconciliation.expected_destination:,.2f}, "
                            f"entered {reconciliation.actual_destination:,.2f}"
                        ),
                        severity="warning",
                        suggested_fix="Check the amounts and the rate",
                    ))
        else:
            category = categories[draft.category_id]
            if category.type != draft.type:
                issues.append(ValidationIssue(
                    field="category_id",
                    issue_type="inconsistent",
                    message=(
                        f"Category {category.name!r} is an {category.type.value} "
                        f"category but the transaction is {draft.type.value}"
                    ),
                    severity="warning",
                    suggested_fix="Pick a category of the same type",
                ))

        return issues, reconciliation

    def _effective_rate(self, draft: TransactionDraft, source: Account) -> float:
        if draft.rate is not None and draft.rate > 0:
            return draft.rate
        return default_rate(source, BASE_CURRENCY)

    def validate(
        self,
        draft: TransactionDraft,
        accounts: Iterable[Account],
        categories: Iterable[Category],
    ) -> ValidationResult:
        """
        Run full two-stage validation pipeline.

        Args:
            draft: The transaction as entered
            accounts: Accounts the draft may reference
            categories: Categories the draft may reference

        Returns:
            ValidationResult with all issues found
        """
        accounts_by_id = {a.id: a for a in accounts}
        categories_by_id = {c.id: c for c in categories}

        all_issues = []

        # Stage 1: Schema validation
        schema_valid, schema_issues = self._validate_schema(draft, accounts_by_id, categories_by_id)
        all_issues.extend(schema_issues)

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        reconciliation = None
        if schema_valid:
            semantic_issues, reconciliation = self._validate_semantic(
                draft, accounts_by_id, categories_by_id
            )
            all_issues.extend(semantic_issues)
            semantic_valid = not semantic_issues

        requires_confirmation = bool(reconciliation and reconciliation.is_mismatch)

        result = ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid,
            requires_confirmation=requires_confirmation,
            issues=all_issues,
            reconciliation=reconciliation,
        )

        if not result.is_valid:
            log.info(
                "transaction_draft_rejected",
                draft_id=draft.id,
                errors=[i.issue_type for i in all_issues if i.severity == "error"],
            )
        elif requires_confirmation:
            log.info(
                "transaction_draft_needs_confirmation",
                draft_id=draft.id,
                difference=reconciliation.difference,
            )

        return result

    def to_transaction(
        self,
        draft: TransactionDraft,
        accounts: Iterable[Account],
        categories: Iterable[Category],
        confirmed: bool = False,
    ) -> Transaction:
        """
        Validate `draft` and build the transaction to store.

        Raises:
            TransactionValidationError: the draft has error-level issues
            ConfirmationRequiredError: the draft needs confirmation and
                `confirmed` is False
        """
        accounts = list(accounts)
        result = self.validate(draft, accounts, categories)
        if not result.is_valid:
            raise TransactionValidationError(result)
        if result.requires_confirmation and not confirmed:
            raise ConfirmationRequiredError(result)

        source = next(a for a in accounts if a.id == draft.account_id)
        rate = self._effective_rate(draft, source)

        return Transaction(
            id=draft.id or generate_id(),
            date=_as_instant(draft.date, self._tz),
            amount=draft.amount,
            currency=draft.currency or source.currency,
            exchange_rate=frozen_exchange_rate(source.currency, rate, BASE_CURRENCY),
            account_id=draft.account_id,
            to_account_id=draft.to_account_id if draft.is_transfer else None,
            to_amount=draft.to_amount if draft.is_transfer else None,
            category_id=self._transfer_category_id if draft.is_transfer else draft.category_id,
            note=draft.note or None,
            type=draft.type,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []

        if not result.schema_valid:
            lines.append("❌ Some required information is missing or wrong:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning.message}")

        if result.requires_confirmation:
            lines.append("")
            lines.append("You can still save, but only after confirming.")
        elif not result.is_valid:
            lines.append("")
            lines.append("Please fix the issues above before saving.")

        return "\n".join(lines).strip()


def _as_instant(value: date, tz: Optional[tzinfo] = None) -> datetime:
    """Dates without a time are stored as midnight of that day in `tz` (UTC by default)."""
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day, tzinfo=tz or timezone.utc)
