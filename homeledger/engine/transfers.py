"""
Multi-Currency Transfer Reconciliation

A transfer is multi-currency when its two accounts hold different
currencies. The entered rate is always "base currency per foreign unit",
so which way it applies depends on the direction:

    SELL  (foreign -> base)      destination = source * rate
    BUY   (everything else)      destination = source / rate

Any two of {source amount, destination amount, rate} determine the third.
When the user edits one of them, exactly one OTHER field is recomputed;
the edited field is never overwritten.

IMPORTANT: A reconciliation mismatch is a warning for the user to
confirm, never an error and never silently corrected.
"""

from typing import Optional

from homeledger.models.entities import BASE_CURRENCY, Account
from homeledger.models.reports import (
    ReconciliationResult,
    TransferDirection,
    TransferField,
    TransferLegs,
)
from homeledger.engine.currency import CurrencyLike, currency_code


DEFAULT_TOLERANCE = 1.0


def is_multi_currency(source: Optional[Account], destination: Optional[Account]) -> bool:
    """True when both accounts are known and hold different currencies."""
    if source is None or destination is None:
        return False
    return currency_code(source.currency) != currency_code(destination.currency)


def transfer_direction(
    source_currency: CurrencyLike,
    destination_currency: CurrencyLike,
    base_currency: CurrencyLike = BASE_CURRENCY,
) -> TransferDirection:
    """SELL for foreign -> base, BUY for every other pairing."""
    base = currency_code(base_currency)
    if currency_code(source_currency) != base and currency_code(destination_currency) == base:
        return TransferDirection.SELL
    return TransferDirection.BUY


def destination_amount(source_amount: float, rate: float, direction: TransferDirection) -> float:
    """Amount credited at the destination for `source_amount` at `rate`."""
    if direction == TransferDirection.SELL:
        return source_amount * rate
    return source_amount / rate


def source_amount(destination_amount: float, rate: float, direction: TransferDirection) -> float:
    """Amount debited at the source for `destination_amount` at `rate`."""
    if direction == TransferDirection.SELL:
        return destination_amount / rate
    return destination_amount * rate


def implied_rate(source_amount: float, destination_amount: float, direction: TransferDirection) -> float:
    """Rate implied by the two entered amounts."""
    if direction == TransferDirection.SELL:
        return destination_amount / source_amount
    return source_amount / destination_amount


def _usable(value: Optional[float]) -> bool:
    return value is not None and value > 0


def recompute_transfer(
    legs: TransferLegs,
    edited: TransferField,
    direction: TransferDirection,
) -> TransferLegs:
    """
    Keep the three transfer fields consistent after the user edits one.

    - source amount or rate edited -> destination amount recomputed
    - destination amount edited    -> rate recomputed

    Returns new legs; when the inputs needed for the recomputation are
    missing or zero the legs are returned unchanged.
    """
    if edited in (TransferField.SOURCE_AMOUNT, TransferField.RATE):
        if _usable(legs.source_amount) and _usable(legs.rate):
            return legs.model_copy(update={
                "destination_amount": destination_amount(legs.source_amount, legs.rate, direction),
            })
        return legs

    if _usable(legs.source_amount) and _usable(legs.destination_amount):
        return legs.model_copy(update={
            "rate": implied_rate(legs.source_amount, legs.destination_amount, direction),
        })
    return legs


def check_reconciliation(
    source_amount: Optional[float],
    destination_amount_entered: Optional[float],
    rate: Optional[float],
    direction: TransferDirection,
    tolerance: float = DEFAULT_TOLERANCE,
) -> ReconciliationResult:
    """
    Compare the entered destination amount with the one the rate implies.

    Incomplete input (anything missing or zero) is reported as
    `is_complete=False` and is never a mismatch, so nothing is flagged
    while the user is still typing.
    """
    if not (_usable(source_amount) and _usable(destination_amount_entered) and _usable(rate)):
        return ReconciliationResult(
            direction=direction,
            actual_destination=destination_amount_entered,
            tolerance=tolerance,
            is_complete=False,
            is_mismatch=False,
        )

    expected = destination_amount(source_amount, rate, direction)
    difference = abs(expected - destination_amount_entered)
    return ReconciliationResult(
        direction=direction,
        expected_destination=expected,
        actual_destination=destination_amount_entered,
        difference=difference,
        tolerance=tolerance,
        is_complete=True,
        is_mismatch=difference > tolerance,
    )


def frozen_exchange_rate(
    source_currency: CurrencyLike,
    rate: Optional[float],
    base_currency: CurrencyLike = BASE_CURRENCY,
) -> float:
    """
    Rate stored on a new transaction.

    Base-currency sources always store 1; foreign sources store the rate
    the user entered (1 when none was entered).
    """
    if currency_code(source_currency) == currency_code(base_currency):
        return 1.0
    return rate if _usable(rate) else 1.0


def default_rate(account: Optional[Account], base_currency: CurrencyLike = BASE_CURRENCY) -> float:
    """Rate the entry form starts with for `account`."""
    if account is None or currency_code(account.currency) == currency_code(base_currency):
        return 1.0
    return account.current_rate or 1.0
