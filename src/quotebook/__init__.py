from quotebook.domain.clients import Client, Contact, Project
from quotebook.domain.documents import Document, DocumentItem, DocumentTotals, Payment
from quotebook.domain.products import Product
from quotebook.domain.settings import BusinessProfile, UserSettings
from quotebook.domain.value_objects import (
    DiscountType,
    DocumentStatus,
    DocumentType,
    PaymentMethod,
)

__all__ = [
    "BusinessProfile",
    "Client",
    "Contact",
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
]

__version__ = "0.1.0"
