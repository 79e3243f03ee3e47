from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal

from quotebook.domain.documents import BusinessInfoVisibility, ClientInfoVisibility
from quotebook.domain.value_objects import (
    ZERO,
    CurrencyDisplayFormat,
    DocumentType,
)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def format_document_number(prefix: str, number: int) -> str:
    return f"{prefix}-{number:03d}"


@dataclass
class BusinessProfile:
    business_name: str = "Your Business"
    personal_name: str | None = None
    email: str | None = None
    phone: str | None = None
    website: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    tax_id: str | None = None
    registration_number: str | None = None
    logo_url: str | None = None
    brand_color: str = "#000000"
    updated_at: datetime = field(default_factory=_utc_now)

    @property
    def address_lines(self) -> list[str]:
        locality = " ".join(p for p in (self.state, self.zip_code) if p)
        city_line = ", ".join(p for p in (self.city, locality) if p)
        return [line for line in (self.address, city_line, self.country) if line]

    def touch(self) -> None:
        self.updated_at = _utc_now()


@dataclass
class UserSettings:
    default_currency: str = "USD"
    currency_display_format: CurrencyDisplayFormat = CurrencyDisplayFormat.SYMBOL_BEFORE
    fiscal_year_start_month: int = 1
    fiscal_year_start_day: int = 1
    show_tax_settings: bool = True
    tax_name: str = "Tax"
    default_tax_rate: Decimal = ZERO

    quote_title: str = "QUOTE"
    quote_prefix: str = "Q"
    quote_next_number: int = 1
    quote_validity_days: int = 30
    quote_default_notes: str | None = None
    quote_default_terms: str | None = None

    invoice_title: str = "INVOICE"
    invoice_prefix: str = "INV"
    invoice_next_number: int = 1
    invoice_default_due_days: int = 30
    invoice_default_notes: str | None = None
    invoice_default_terms: str | None = None

    show_bank_details: bool = False
    bank_name: str | None = None
    account_name: str | None = None
    account_number: str | None = None
    routing_number: str | None = None
    iban: str | None = None
    swift_code: str | None = None

    selected_template_id: str = "classic"
    default_business_fields: BusinessInfoVisibility = field(
        default_factory=BusinessInfoVisibility
    )
    default_client_fields: ClientInfoVisibility = field(
        default_factory=ClientInfoVisibility
    )
    updated_at: datetime = field(default_factory=_utc_now)

    def touch(self) -> None:
        self.updated_at = _utc_now()

    def peek_number(self, document_type: DocumentType) -> str:
        if document_type == DocumentType.QUOTE:
            return format_document_number(self.quote_prefix, self.quote_next_number)
        return format_document_number(self.invoice_prefix, self.invoice_next_number)

    def take_number(self, document_type: DocumentType) -> str:
        """Return the next document number and advance the matching counter."""
        number = self.peek_number(document_type)
        if document_type == DocumentType.QUOTE:
            self.quote_next_number += 1
        else:
            self.invoice_next_number += 1
        self.updated_at = _utc_now()
        return number

    def title_for(self, document_type: DocumentType) -> str:
        if document_type == DocumentType.QUOTE:
            return self.quote_title
        return self.invoice_title


__all__ = [
    "BusinessProfile",
    "UserSettings",
    "format_document_number",
]
