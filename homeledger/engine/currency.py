"""
Currency Conversion

Resolves amounts between a currency and the base currency with the LIVE
rate table. Historical amounts never go through here: they use the rate
frozen on each transaction.

Rates are "units of base currency per one unit of the currency".
A missing (or zero) rate is treated as 1, i.e. the amount is taken to be
already base-denominated. No rounding happens here; rounding belongs to
presentation.
"""

from collections.abc import Mapping
from typing import Union

from homeledger.models.entities import BASE_CURRENCY, Currency
from homeledger.observability import get_logger


log = get_logger(__name__)

CurrencyLike = Union[Currency, str]


def currency_code(currency: CurrencyLike) -> str:
    """Rate-table key for a currency."""
    if isinstance(currency, Currency):
        return currency.value
    return str(currency).upper()


def rate_for(
    currency: CurrencyLike,
    rates: Mapping[str, float],
    base_currency: CurrencyLike = BASE_CURRENCY,
) -> float:
    """Live rate of `currency` to the base currency."""
    code = currency_code(currency)
    if code == currency_code(base_currency):
        return 1.0

    rate = rates.get(code)
    if not rate:
        log.debug("rate_missing_defaulted", currency=code)
        return 1.0
    return float(rate)


def to_base(
    amount: float,
    currency: CurrencyLike,
    rates: Mapping[str, float],
    base_currency: CurrencyLike = BASE_CURRENCY,
) -> float:
    """Convert `amount` in `currency` to the base currency."""
    return amount * rate_for(currency, rates, base_currency)


def from_base(
    amount: float,
    currency: CurrencyLike,
    rates: Mapping[str, float],
    base_currency: CurrencyLike = BASE_CURRENCY,
) -> float:
    """Convert a base-currency `amount` into `currency`."""
    return amount / rate_for(currency, rates, base_currency)
