from quotebook.domain.clients import Client, Contact, Project
from quotebook.domain.currency_format import format_currency, get_currency_symbol
from quotebook.domain.documents import (
    BusinessInfoVisibility,
    ClientInfoVisibility,
    Document,
    DocumentItem,
    DocumentTotals,
    Payment,
)
from quotebook.domain.products import Product
from quotebook.domain.settings import BusinessProfile, UserSettings
from quotebook.domain.value_objects import (
    CurrencyDisplayFormat,
    DiscountType,
    DocumentStatus,
    DocumentType,
    PaymentMethod,
)

__all__ = [
    "BusinessInfoVisibility",
    "BusinessProfile",
    "Client",
    "ClientInfoVisibility",
    "Contact",
    "CurrencyDisplayFormat",
    "DiscountType",
    "Document",
    "DocumentItem",
    "DocumentStatus",
    "DocumentTotals",
    "DocumentType",
    "Payment",
    "PaymentMethod",
    "Product",
    "Project",
    "UserSettings",
    "format_currency",
    "get_currency_symbol",
]
