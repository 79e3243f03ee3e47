"""Currency display formatting for documents and listings."""

from decimal import Decimal

from quotebook.domain.value_objects import (
    CurrencyDisplayFormat,
    parse_decimal,
    quantize_money,
)

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "¥",
    "INR": "₹",
    "AUD": "A$",
    "CAD": "C$",
    "CHF": "CHF",
    "SEK": "kr",
    "NZD": "NZ$",
    "ZAR": "R",
    "BRL": "R$",
    "MXN": "$",
    "SGD": "S$",
    "HKD": "HK$",
    "NOK": "kr",
    "KRW": "₩",
    "TRY": "₺",
    "RUB": "₽",
    "PLN": "zł",
    "THB": "฿",
    "IDR": "Rp",
    "MYR": "RM",
    "PHP": "₱",
    "DKK": "kr",
    "CZK": "Kč",
    "ILS": "₪",
    "AED": "د.إ",
    "SAR": "﷼",
}


def get_currency_symbol(currency: str) -> str:
    """Return the symbol for a currency code, or the code itself when unknown."""
    return CURRENCY_SYMBOLS.get(currency.upper(), currency)


def format_currency(
    amount: Decimal | int | float | str,
    currency: str = "USD",
    display_format: CurrencyDisplayFormat | str = CurrencyDisplayFormat.SYMBOL_BEFORE,
) -> str:
    """Format an amount with two decimals and a currency marker.

    >>> format_currency(Decimal("100"), "USD")
    '$100.00'
    >>> format_currency("1234.5", "EUR", "code_after")
    '1234.50 EUR'

    Negative amounts carry the sign in front of the whole string.
    Unrecognised display formats fall back to ``symbol_before``.
    """
    value = quantize_money(parse_decimal(amount, "amount", allow_negative=True))
    sign = "-" if value < 0 else ""
    digits = f"{abs(value):.2f}"

    try:
        fmt = CurrencyDisplayFormat(display_format)
    except ValueError:
        fmt = CurrencyDisplayFormat.SYMBOL_BEFORE

    symbol = get_currency_symbol(currency)
    if fmt == CurrencyDisplayFormat.SYMBOL_AFTER:
        text = f"{digits}{symbol}"
    elif fmt == CurrencyDisplayFormat.SYMBOL_AFTER_SPACE:
        text = f"{digits} {symbol}"
    elif fmt == CurrencyDisplayFormat.SYMBOL_BEFORE_SPACE:
        text = f"{symbol} {digits}"
    elif fmt == CurrencyDisplayFormat.CODE_BEFORE:
        text = f"{currency} {digits}"
    elif fmt == CurrencyDisplayFormat.CODE_AFTER:
        text = f"{digits} {currency}"
    else:
        text = f"{symbol}{digits}"
    return f"{sign}{text}"


def currency_input_marker(
    currency: str,
    display_format: CurrencyDisplayFormat | str = CurrencyDisplayFormat.SYMBOL_BEFORE,
) -> str:
    """Return what an amount input should be labelled with: code or symbol."""
    if CurrencyDisplayFormat(display_format).value.startswith("code_"):
        return currency
    return get_currency_symbol(currency)


__all__ = [
    "CURRENCY_SYMBOLS",
    "currency_input_marker",
    "format_currency",
    "get_currency_symbol",
]
