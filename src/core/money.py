"""Currency codes, decimal parsing and Stripe minor-unit conversion."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ISO_4217_CODES = frozenset(
    {
        "AED", "ARS", "AUD", "BDT", "BGN", "BHD", "BRL", "CAD", "CHF", "CLP", "CNY", "COP", "CZK",
        "DKK", "EGP", "EUR", "FJD", "GBP", "HKD", "HUF", "IDR", "ILS", "INR", "ISK", "JOD", "JPY",
        "KES", "KRW", "KWD", "LKR", "MAD", "MXN", "MYR", "NGN", "NOK", "NZD", "OMR", "PEN", "PHP",
        "PKR", "PLN", "QAR", "RON", "RSD", "RUB", "SAR", "SEK", "SGD", "THB", "TND", "TRY", "TWD",
        "UAH", "USD", "VND", "XPF", "ZAR",
    }
)

# Stripe charges these in whole units.
ZERO_DECIMAL_CURRENCIES = frozenset(
    {"BIF", "CLP", "DJF", "GNF", "JPY", "KMF", "KRW", "MGA", "PYG", "RWF", "UGX", "VND", "VUV", "XAF", "XOF", "XPF"}
)

# Stripe takes these in thousandths, and the last digit must be 0.
THREE_DECIMAL_CURRENCIES = frozenset({"BHD", "JOD", "KWD", "OMR", "TND"})

CENT = Decimal("0.01")


def is_known_currency(code: str | None) -> bool:
    return bool(code) and code.upper() in ISO_4217_CODES


def to_decimal(value: Any, default: Decimal | None = None) -> Decimal:
    """Parse a supplier/storefront amount ("25.00", 25, 25.0, None) into a Decimal."""
    if value is None or value == "":
        if default is None:
            raise ValueError("amount is required")
        return default
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"invalid amount: {value!r}") from e


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal) -> str:
    return str(quantize(amount))


def to_minor_units(amount: Decimal, currency: str) -> int:
    code = currency.upper()
    if code in ZERO_DECIMAL_CURRENCIES:
        return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    if code in THREE_DECIMAL_CURRENCIES:
        return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)) * 10
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(minor: int, currency: str) -> Decimal:
    code = currency.upper()
    if code in ZERO_DECIMAL_CURRENCIES:
        return Decimal(minor)
    if code in THREE_DECIMAL_CURRENCIES:
        return quantize(Decimal(minor) / 1000)
    return quantize(Decimal(minor) / 100)
