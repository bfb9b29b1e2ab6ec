"""
Transaction Drafts and Validation Models

A draft is what the entry form hands over before anything is saved.
It is deliberately loose (every amount optional) because it represents
what the user typed, not what the ledger trusts.

CRITICAL: Only a validated draft becomes a `Transaction`.
Validation reports problems; it never fixes them silently.
"""

from datetime import date as date_type
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from homeledger.models.entities import Currency, TransactionType
from homeledger.models.reports import ReconciliationResult


class TransactionDraft(BaseModel):
    """
    A transaction as entered, before validation.

    `rate` is the rate the user sees in the form. The rate actually stored
    on the transaction (`exchange_rate`) is derived from it when the draft
    is accepted. `id` is set when the draft edits an existing transaction.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = None
    type: TransactionType = TransactionType.EXPENSE
    date: Union[datetime, date_type] = Field(
        default_factory=date_type.today,
        description="Day (or instant) the money moved"
    )
    amount: Optional[float] = None
    currency: Optional[Currency] = None
    rate: Optional[float] = None
    account_id: str = ""
    to_account_id: Optional[str] = None
    to_amount: Optional[float] = None
    category_id: Optional[str] = None
    note: Optional[str] = Field(default=None, max_length=500)

    @property
    def is_transfer(self) -> bool:
        return self.type == TransactionType.TRANSFER


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'reconciliation_mismatch')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage draft validation.

    Stage 1: Schema validation (required fields, referenced accounts)
    Stage 2: Semantic validation (transfer reconciliation, category fit)
    """

    validated_at: datetime = Field(
        default_factory=datetime.now
    )

    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    semantic_valid: bool = Field(
        ...,
        description="Did semantic validation pass without warnings?"
    )

    is_valid: bool = Field(
        ...,
        description="No error-level issues"
    )
    requires_confirmation: bool = Field(
        default=False,
        description="Can only be saved after the user explicitly confirms"
    )

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )
    reconciliation: Optional[ReconciliationResult] = Field(
        default=None,
        description="Set for multi-currency transfers"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]
