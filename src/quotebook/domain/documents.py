from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from quotebook.domain.value_objects import (
    LOCKED_STATUSES,
    ZERO,
    DiscountType,
    DocumentStatus,
    DocumentType,
    PaymentMethod,
)


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class DocumentItem:
    description: str = ""
    item_type: str = "Product"
    quantity: Decimal = Decimal("1")
    unit_price: Decimal = ZERO
    amount: Decimal = ZERO
    has_quantity_column: bool = False
    order: int = 0
    source_product_id: UUID | None = None
    id: UUID = field(default_factory=uuid4)


@dataclass
class Payment:
    amount: Decimal
    payment_date: date
    method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    reference: str = ""
    notes: str = ""
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal = ZERO
    tax_amount: Decimal = ZERO
    discount_amount: Decimal = ZERO
    total: Decimal = ZERO
    amount_due: Decimal = ZERO


@dataclass
class BusinessInfoVisibility:
    business_name: bool = True
    personal_name: bool = True
    email: bool = True
    phone: bool = True
    website: bool = True
    tax_id: bool = True
    address: bool = True


@dataclass
class ClientInfoVisibility:
    name: bool = True
    contact: bool = True
    address: bool = True
    email: bool = True


@dataclass
class Document:
    document_type: DocumentType
    client_id: UUID
    document_number: str = "DRAFT"
    status: DocumentStatus = DocumentStatus.DRAFT
    contact_id: UUID | None = None
    project_id: UUID | None = None
    issue_date: date = field(default_factory=date.today)
    due_date: date | None = None
    valid_until: date | None = None
    currency: str = "USD"
    tax_rate: Decimal = ZERO
    discount: Decimal = ZERO
    discount_type: DiscountType = DiscountType.FIXED
    subtotal: Decimal = ZERO
    tax_amount: Decimal = ZERO
    discount_amount: Decimal = ZERO
    total: Decimal = ZERO
    amount_paid: Decimal = ZERO
    amount_due: Decimal = ZERO
    notes: str | None = None
    terms: str | None = None
    internal_notes: str | None = None
    show_discount: bool = False
    show_tax: bool = True
    show_notes: bool = True
    show_terms: bool = True
    business_fields: BusinessInfoVisibility = field(
        default_factory=BusinessInfoVisibility
    )
    client_fields: ClientInfoVisibility = field(default_factory=ClientInfoVisibility)
    items: list[DocumentItem] = field(default_factory=list)
    payments: list[Payment] = field(default_factory=list)
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    @property
    def is_quote(self) -> bool:
        return self.document_type == DocumentType.QUOTE

    @property
    def is_invoice(self) -> bool:
        return self.document_type == DocumentType.INVOICE

    @property
    def is_locked(self) -> bool:
        return self.status in LOCKED_STATUSES

    @property
    def totals(self) -> DocumentTotals:
        return DocumentTotals(
            subtotal=self.subtotal,
            tax_amount=self.tax_amount,
            discount_amount=self.discount_amount,
            total=self.total,
            amount_due=self.amount_due,
        )

    def apply_totals(self, totals: DocumentTotals) -> None:
        self.subtotal = totals.subtotal
        self.tax_amount = totals.tax_amount
        self.discount_amount = totals.discount_amount
        self.total = totals.total
        self.amount_due = totals.amount_due
        self.updated_at = _utc_now()

    def touch(self) -> None:
        self.updated_at = _utc_now()


__all__ = [
    "BusinessInfoVisibility",
    "ClientInfoVisibility",
    "Document",
    "DocumentItem",
    "DocumentTotals",
    "Payment",
]
