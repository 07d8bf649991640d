"""
Money type and minor-unit conversion.

Amounts are exact decimals internally. The provider API works in integer
minor units (cents), so conversion happens only at the adapter boundary:

    Decimal("49.99")  --to_minor_units-->  4999
    4999              --from_minor_units-> Decimal("49.99")

Rounding is ROUND_HALF_UP in both directions, so any amount with at most
two fractional digits survives the round trip unchanged.

Usage:
    from payments.money import Money, to_minor_units

    price = Money("49.99", "usd")
    price.minor_units        # 4999
    str(price)               # "49.99 USD"
    Money.from_minor_units(2000, "usd").amount  # Decimal("20.00")
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from payments.exceptions import PaymentValidationError

AmountLike = Union[Decimal, int, str, float]

MINOR_UNITS_PER_MAJOR = 100

CENT = Decimal("0.01")

# Two-decimal currencies only; zero-decimal ones (JPY, KRW, ...) do not fit x100.
DEFAULT_SUPPORTED_CURRENCIES: frozenset[str] = frozenset(
    [
        "aed",
        "aud",
        "brl",
        "cad",
        "chf",
        "czk",
        "dkk",
        "eur",
        "gbp",
        "hkd",
        "ils",
        "inr",
        "mxn",
        "nok",
        "nzd",
        "pln",
        "sek",
        "sgd",
        "usd",
        "zar",
    ]
)

_CURRENCY_CODE_RE = re.compile(r"^[A-Za-z]{3}$")


def to_decimal(value: AmountLike) -> Decimal:
    """
    Coerce an amount to Decimal.

    Floats go through str() so 49.99 becomes Decimal("49.99") rather
    than its binary expansion.

    Raises:
        PaymentValidationError: value is not a finite number
    """
    if isinstance(value, bool):
        raise PaymentValidationError(
            "Amount must be a number", details={"amount": repr(value)}
        )
    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, float):
            result = Decimal(str(value))
        elif isinstance(value, (int, str)):
            result = Decimal(value)
        else:
            raise PaymentValidationError(
                "Amount must be a number", details={"amount": repr(value)}
            )
    except InvalidOperation:
        raise PaymentValidationError(
            "Amount is not a valid number", details={"amount": repr(value)}
        )

    if not result.is_finite():
        raise PaymentValidationError(
            "Amount must be finite", details={"amount": repr(value)}
        )
    return result


def to_minor_units(amount: AmountLike) -> int:
    """Convert a major-unit amount to integer minor units, rounding half-up."""
    scaled = to_decimal(amount) * MINOR_UNITS_PER_MAJOR
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(units: int) -> Decimal:
    """Convert integer minor units back to a two-place Decimal."""
    return (Decimal(int(units)) / MINOR_UNITS_PER_MAJOR).quantize(
        CENT, rounding=ROUND_HALF_UP
    )


def normalize_currency(
    currency: str,
    supported: frozenset[str] | None = None,
) -> str:
    """
    Validate a currency code and return it upper-cased.

    Args:
        currency: ISO 4217 code in any case
        supported: Lower-case codes accepted; None skips the membership check

    Raises:
        PaymentValidationError: malformed or unsupported code
    """
    if not isinstance(currency, str) or not _CURRENCY_CODE_RE.match(currency):
        raise PaymentValidationError(
            "Currency must be a 3-letter ISO 4217 code",
            details={"currency": repr(currency)},
        )
    if supported is not None and currency.lower() not in supported:
        raise PaymentValidationError(
            f"Currency {currency.upper()} is not supported",
            details={
                "currency": currency.upper(),
                "supported": sorted(code.upper() for code in supported),
            },
        )
    return currency.upper()


@dataclass(frozen=True)
class Money:
    """
    An exact decimal amount with its currency.

    Attributes:
        amount: Decimal amount in major units (e.g., dollars)
        currency: Upper-case ISO 4217 code

    Example:
        Money("20", "usd") == Money(Decimal("20.00"), "USD")  # True
    """

    amount: Decimal
    currency: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "currency", normalize_currency(self.currency))

    @classmethod
    def from_minor_units(cls, units: int, currency: str) -> Money:
        """Build Money from a provider amount in minor units."""
        return cls(from_minor_units(units), currency)

    @property
    def minor_units(self) -> int:
        """Amount in minor units as the provider expects it."""
        return to_minor_units(self.amount)

    def __str__(self) -> str:
        """Format as '49.99 USD'."""
        return f"{self.amount.quantize(CENT, rounding=ROUND_HALF_UP)} {self.currency}"
