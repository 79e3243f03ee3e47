"""Pydantic v2 schemas for API request/response models.

Monetary values travel as decimal strings rounded to two places. Numeric
inputs accept strings or JSON numbers and are validated by the services.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from quotebook.domain.value_objects import (
    CurrencyDisplayFormat,
    DiscountType,
    DocumentStatus,
    DocumentType,
    PaymentMethod,
)

AmountInput = str | int | float


class HealthResponse(BaseModel):
    status: str
    version: str | None = None


# Client Schemas
class ContactCreate(BaseModel):
    """Schema for adding a contact to a client."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    email: str | None = None
    phone: str | None = None
    position: str | None = None
    is_primary: bool = False


class ContactUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = None
    phone: str | None = None
    position: str | None = None
    is_primary: bool | None = None


class ContactResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_id: UUID
    name: str
    email: str | None
    phone: str | None
    position: str | None
    is_primary: bool
    created_at: datetime


class ClientCreate(BaseModel):
    """Schema for creating a client, optionally with its primary contact."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    notes: str = ""
    contact: ContactCreate | None = None


class ClientUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    notes: str | None = None


class ClientResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str | None
    phone: str | None
    address: str | None
    city: str | None
    state: str | None
    zip_code: str | None
    country: str | None
    currency: str
    notes: str
    created_at: datetime
    updated_at: datetime


class ClientBalanceResponse(BaseModel):
    client: ClientResponse
    outstanding: str
    open_invoices: int


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_id: UUID
    title: str
    description: str | None
    is_active: bool
    created_at: datetime


class ClientSummaryResponse(BaseModel):
    client: ClientResponse
    contacts: list[ContactResponse]
    projects: list[ProjectResponse]
    quote_count: int
    invoice_count: int
    total_invoiced: str
    total_paid: str
    outstanding: str


# Project Schemas
class ProjectCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    client_id: UUID
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None


class ProjectUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None


# Product Schemas
class ProductSave(BaseModel):
    """Schema for saving a catalog product.

    Without an id, an existing product with the same name and type is updated.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    unit_price: AmountInput = "0"
    item_type: str = "Product"
    description: str = ""
    has_quantity_column: bool = False


class ProductResponse(BaseModel):
    id: UUID
    name: str
    unit_price: str
    item_type: str
    description: str
    has_quantity_column: bool
    is_active: bool


# Document Schemas
class DocumentCreate(BaseModel):
    document_type: DocumentType
    client_id: UUID
    contact_id: UUID | None = None
    project_id: UUID | None = None
    issue_date: date | None = None


class DocumentUpdate(BaseModel):
    """Header fields that never affect totals."""

    contact_id: UUID | None = None
    project_id: UUID | None = None
    issue_date: date | None = None
    due_date: date | None = None
    valid_until: date | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    notes: str | None = None
    terms: str | None = None
    internal_notes: str | None = None
    show_discount: bool | None = None
    show_tax: bool | None = None
    show_notes: bool | None = None
    show_terms: bool | None = None
    business_fields: dict[str, bool] | None = None
    client_fields: dict[str, bool] | None = None


class BulkDeleteRequest(BaseModel):
    document_ids: list[UUID] = Field(..., min_length=1)


class BulkDeleteResponse(BaseModel):
    deleted: int


class ItemCreate(BaseModel):
    """Add a blank item, or a catalog product when ``product_id`` is set."""

    model_config = ConfigDict(str_strip_whitespace=True)

    item_type: str = "Product"
    description: str = ""
    product_id: UUID | None = None


class ItemUpdate(BaseModel):
    field: str = Field(..., min_length=1)
    value: Any = None


class ItemReorder(BaseModel):
    item_ids: list[UUID]


class TaxRateUpdate(BaseModel):
    tax_rate: AmountInput


class DiscountUpdate(BaseModel):
    discount: AmountInput
    discount_type: DiscountType | None = None


class StatusUpdate(BaseModel):
    status: DocumentStatus


class PaymentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: AmountInput
    payment_date: date | None = None
    method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    reference: str = ""
    notes: str = ""


class ItemResponse(BaseModel):
    id: UUID
    description: str
    item_type: str
    quantity: str
    unit_price: str
    amount: str
    has_quantity_column: bool
    order: int
    source_product_id: UUID | None


class PaymentResponse(BaseModel):
    id: UUID
    amount: str
    payment_date: date
    method: PaymentMethod
    reference: str
    notes: str


class TotalsResponse(BaseModel):
    subtotal: str
    tax_amount: str
    discount_amount: str
    total: str
    amount_paid: str
    amount_due: str


class DocumentResponse(BaseModel):
    id: UUID
    document_type: DocumentType
    document_number: str
    status: DocumentStatus
    client_id: UUID
    contact_id: UUID | None
    project_id: UUID | None
    issue_date: date
    due_date: date | None
    valid_until: date | None
    currency: str
    tax_rate: str
    discount: str
    discount_type: DiscountType
    totals: TotalsResponse
    notes: str | None
    terms: str | None
    internal_notes: str | None
    show_discount: bool
    show_tax: bool
    show_notes: bool
    show_terms: bool
    business_fields: dict[str, bool]
    client_fields: dict[str, bool]
    items: list[ItemResponse]
    payments: list[PaymentResponse]
    allowed_statuses: list[DocumentStatus]
    created_at: datetime
    updated_at: datetime


# Settings Schemas
class BusinessProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    business_name: str
    personal_name: str | None
    email: str | None
    phone: str | None
    website: str | None
    address: str | None
    city: str | None
    state: str | None
    zip_code: str | None
    country: str | None
    tax_id: str | None
    registration_number: str | None
    logo_url: str | None
    brand_color: str


class UserSettingsResponse(BaseModel):
    default_currency: str
    currency_display_format: CurrencyDisplayFormat
    fiscal_year_start_month: int
    fiscal_year_start_day: int
    show_tax_settings: bool
    tax_name: str
    default_tax_rate: Decimal
    quote_title: str
    quote_prefix: str
    quote_next_number: int
    quote_validity_days: int
    quote_default_notes: str | None
    quote_default_terms: str | None
    invoice_title: str
    invoice_prefix: str
    invoice_next_number: int
    invoice_default_due_days: int
    invoice_default_notes: str | None
    invoice_default_terms: str | None
    show_bank_details: bool
    bank_name: str | None
    account_name: str | None
    account_number: str | None
    routing_number: str | None
    iban: str | None
    swift_code: str | None
    selected_template_id: str
    default_business_fields: dict[str, bool]
    default_client_fields: dict[str, bool]


class SettingsResponse(BaseModel):
    profile: BusinessProfileResponse
    settings: UserSettingsResponse


class BrandColorUpdate(BaseModel):
    brand_color: str | None = None


class TemplateSelect(BaseModel):
    template_id: str = Field(..., min_length=1)


class VisibilityUpdate(BaseModel):
    business_fields: dict[str, bool] | None = None
    client_fields: dict[str, bool] | None = None


class NextNumberResponse(BaseModel):
    document_type: DocumentType
    document_number: str


class TemplateResponse(BaseModel):
    id: str
    name: str
    description: str
    preview: str
    is_premium: bool
    tier: str
    category: str | None
    features: list[str]
