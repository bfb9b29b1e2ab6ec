"""Transaction validation package."""

from homeledger.validation.validator import (
    ConfirmationRequiredError,
    TransactionValidationError,
    TransactionValidator,
)

__all__ = [
    "ConfirmationRequiredError",
    "TransactionValidationError",
    "TransactionValidator",
]
