from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from quotebook.exceptions import InvalidAmountError, ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


class DocumentType(str, Enum):
    QUOTE = "QUOTE"
    INVOICE = "INVOICE"


class DocumentStatus(str, Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    VIEWED = "VIEWED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CONVERTED = "CONVERTED"
    PAID = "PAID"
    PARTIAL = "PARTIAL"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


class DiscountType(str, Enum):
    FIXED = "FIXED"
    PERCENTAGE = "PERCENTAGE"


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "BANK_TRANSFER"
    CREDIT_CARD = "CREDIT_CARD"
    CHECK = "CHECK"
    CASH = "CASH"
    STRIPE = "STRIPE"
    OTHER = "OTHER"


class CurrencyDisplayFormat(str, Enum):
    SYMBOL_BEFORE = "symbol_before"
    SYMBOL_AFTER = "symbol_after"
    SYMBOL_BEFORE_SPACE = "symbol_before_space"
    SYMBOL_AFTER_SPACE = "symbol_after_space"
    CODE_BEFORE = "code_before"
    CODE_AFTER = "code_after"


LOCKED_STATUSES = frozenset(
    {DocumentStatus.PAID, DocumentStatus.CANCELLED, DocumentStatus.CONVERTED}
)

# Invoices in these states still count towards a client's outstanding balance.
OUTSTANDING_STATUSES = frozenset(
    {
        DocumentStatus.SENT,
        DocumentStatus.VIEWED,
        DocumentStatus.OVERDUE,
        DocumentStatus.PARTIAL,
    }
)


def parse_decimal(
    value: Decimal | int | float | str,
    field: str = "amount",
    *,
    allow_negative: bool = False,
) -> Decimal:
    """Parse a decimal-bearing value, rejecting anything that is not a finite number.

    Strings are stripped before parsing. Floats go through ``str`` so that
    ``0.1`` becomes ``Decimal("0.1")`` rather than its binary expansion.

    Raises:
        InvalidAmountError: If the value is not numeric, not finite, or
            negative while ``allow_negative`` is False.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(field, value)

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidAmountError(field, value, "empty")
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise InvalidAmountError(field, value) from None
    else:
        raise InvalidAmountError(field, value)

    if not result.is_finite():
        raise InvalidAmountError(field, value, "not finite")
    if not allow_negative and result < ZERO:
        raise InvalidAmountError(field, value, "negative")
    return result


def parse_flag(value: bool, field: str) -> bool:
    """Accept only a real boolean; strings such as ``"false"`` are rejected."""
    if not isinstance(value, bool):
        raise ValidationError(
            f"{field} must be true or false",
            context={"field": field, "value": repr(value)},
        )
    return value


def quantize_money(value: Decimal) -> Decimal:
    """Round to currency minor units for presentation."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def money_str(value: Decimal) -> str:
    return str(quantize_money(value))


__all__ = [
    "CurrencyDisplayFormat",
    "DiscountType",
    "DocumentStatus",
    "DocumentType",
    "LOCKED_STATUSES",
    "OUTSTANDING_STATUSES",
    "PaymentMethod",
    "money_str",
    "parse_decimal",
    "parse_flag",
    "quantize_money",
]
