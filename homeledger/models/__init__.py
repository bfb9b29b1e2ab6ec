"""
Data Models Package

This package contains all Pydantic models used in HomeLedger.
The snapshot entities, the records the engine derives from them,
and the drafts/validation results used at the entry boundary.
"""

from homeledger.models.entities import (
    BASE_CURRENCY,
    TRANSFER_CATEGORY_ID,
    Account,
    AccountType,
    AppData,
    Category,
    Currency,
    Transaction,
    TransactionType,
    UserSettings,
    generate_id,
)
from homeledger.models.reports import (
    AccountBalance,
    AccountGroupSummary,
    CategoryLine,
    MonthlyReport,
    ReconciliationResult,
    TransferDirection,
    TransferField,
    TransferLegs,
)
from homeledger.models.drafts import (
    TransactionDraft,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Snapshot entities
    "BASE_CURRENCY",
    "TRANSFER_CATEGORY_ID",
    "Account",
    "AccountType",
    "AppData",
    "Category",
    "Currency",
    "Transaction",
    "TransactionType",
    "UserSettings",
    "generate_id",
    # Derived records
    "AccountBalance",
    "AccountGroupSummary",
    "CategoryLine",
    "MonthlyReport",
    "ReconciliationResult",
    "TransferDirection",
    "TransferField",
    "TransferLegs",
    # Drafts & validation
    "TransactionDraft",
    "ValidationIssue",
    "ValidationResult",
]
