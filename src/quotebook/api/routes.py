"""API route definitions for Quotebook."""

from dataclasses import asdict
from datetime import date
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, Response, status

from quotebook import __version__
from quotebook.api.schemas import (
    BrandColorUpdate,
    BulkDeleteRequest,
    BulkDeleteResponse,
    BusinessProfileResponse,
    ClientBalanceResponse,
    ClientCreate,
    ClientResponse,
    ClientSummaryResponse,
    ClientUpdate,
    ContactCreate,
    ContactResponse,
    ContactUpdate,
    DiscountUpdate,
    DocumentCreate,
    DocumentResponse,
    DocumentUpdate,
    HealthResponse,
    ItemCreate,
    ItemReorder,
    ItemResponse,
    ItemUpdate,
    NextNumberResponse,
    PaymentCreate,
    PaymentResponse,
    ProductResponse,
    ProductSave,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    SettingsResponse,
    StatusUpdate,
    TaxRateUpdate,
    TemplateResponse,
    TemplateSelect,
    TotalsResponse,
    UserSettingsResponse,
    VisibilityUpdate,
)
from quotebook.container import Container, get_database
from quotebook.domain.clients import Client
from quotebook.domain.documents import Document, DocumentItem, Payment
from quotebook.domain.products import Product
from quotebook.domain.settings import BusinessProfile, UserSettings
from quotebook.domain.value_objects import DocumentType, money_str
from quotebook.repositories.sqlite import SQLiteDatabase
from quotebook.services.clients import ClientServiceImpl
from quotebook.services.documents import DocumentServiceImpl, allowed_transitions
from quotebook.services.interfaces import ClientBalance, ClientSummary
from quotebook.services.products import ProductServiceImpl
from quotebook.services.settings import SettingsServiceImpl
from quotebook.templates.base import plain_number
from quotebook.templates.registry import (
    Template,
    all_templates,
    free_templates,
    premium_templates,
    require_template,
)

health_router = APIRouter(tags=["health"])
client_router = APIRouter(prefix="/clients", tags=["clients"])
contact_router = APIRouter(prefix="/contacts", tags=["contacts"])
project_router = APIRouter(prefix="/projects", tags=["projects"])
product_router = APIRouter(prefix="/products", tags=["products"])
document_router = APIRouter(prefix="/documents", tags=["documents"])
settings_router = APIRouter(prefix="/settings", tags=["settings"])
template_router = APIRouter(prefix="/templates", tags=["templates"])


# Dependencies
def get_request_container(
    db: Annotated[SQLiteDatabase, Depends(get_database)],
) -> Container:
    """Wire the services for one request around the given database."""
    return Container(database=db)


ContainerDep = Annotated[Container, Depends(get_request_container)]


def get_client_service(container: ContainerDep) -> ClientServiceImpl:
    return container.client_service


def get_document_service(container: ContainerDep) -> DocumentServiceImpl:
    return container.document_service


def get_product_service(container: ContainerDep) -> ProductServiceImpl:
    return container.product_service


def get_settings_service(container: ContainerDep) -> SettingsServiceImpl:
    return container.settings_service


ClientServiceDep = Annotated[ClientServiceImpl, Depends(get_client_service)]
DocumentServiceDep = Annotated[DocumentServiceImpl, Depends(get_document_service)]
ProductServiceDep = Annotated[ProductServiceImpl, Depends(get_product_service)]
SettingsServiceDep = Annotated[SettingsServiceImpl, Depends(get_settings_service)]


# Helper functions
def _client_to_response(client: Client) -> ClientResponse:
    return ClientResponse.model_validate(client)


def _balance_to_response(balance: ClientBalance) -> ClientBalanceResponse:
    return ClientBalanceResponse(
        client=_client_to_response(balance.client),
        outstanding=money_str(balance.outstanding),
        open_invoices=balance.open_invoices,
    )


def _summary_to_response(summary: ClientSummary) -> ClientSummaryResponse:
    return ClientSummaryResponse(
        client=_client_to_response(summary.client),
        contacts=[ContactResponse.model_validate(c) for c in summary.contacts],
        projects=[ProjectResponse.model_validate(p) for p in summary.projects],
        quote_count=summary.quote_count,
        invoice_count=summary.invoice_count,
        total_invoiced=money_str(summary.total_invoiced),
        total_paid=money_str(summary.total_paid),
        outstanding=money_str(summary.outstanding),
    )


def _product_to_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        name=product.name,
        unit_price=money_str(product.unit_price),
        item_type=product.item_type,
        description=product.description,
        has_quantity_column=product.has_quantity_column,
        is_active=product.is_active,
    )


def _item_to_response(item: DocumentItem) -> ItemResponse:
    return ItemResponse(
        id=item.id,
        description=item.description,
        item_type=item.item_type,
        quantity=plain_number(item.quantity),
        unit_price=money_str(item.unit_price),
        amount=money_str(item.amount),
        has_quantity_column=item.has_quantity_column,
        order=item.order,
        source_product_id=item.source_product_id,
    )


def _payment_to_response(payment: Payment) -> PaymentResponse:
    return PaymentResponse(
        id=payment.id,
        amount=money_str(payment.amount),
        payment_date=payment.payment_date,
        method=payment.method,
        reference=payment.reference,
        notes=payment.notes,
    )


def _totals_to_response(document: Document) -> TotalsResponse:
    return TotalsResponse(
        subtotal=money_str(document.subtotal),
        tax_amount=money_str(document.tax_amount),
        discount_amount=money_str(document.discount_amount),
        total=money_str(document.total),
        amount_paid=money_str(document.amount_paid),
        amount_due=money_str(document.amount_due),
    )


def _document_to_response(document: Document) -> DocumentResponse:
    return DocumentResponse(
        id=document.id,
        document_type=document.document_type,
        document_number=document.document_number,
        status=document.status,
        client_id=document.client_id,
        contact_id=document.contact_id,
        project_id=document.project_id,
        issue_date=document.issue_date,
        due_date=document.due_date,
        valid_until=document.valid_until,
        currency=document.currency,
        tax_rate=plain_number(document.tax_rate),
        discount=plain_number(document.discount),
        discount_type=document.discount_type,
        totals=_totals_to_response(document),
        notes=document.notes,
        terms=document.terms,
        internal_notes=document.internal_notes,
        show_discount=document.show_discount,
        show_tax=document.show_tax,
        show_notes=document.show_notes,
        show_terms=document.show_terms,
        business_fields=asdict(document.business_fields),
        client_fields=asdict(document.client_fields),
        items=[_item_to_response(i) for i in sorted(document.items, key=lambda i: i.order)],
        payments=[_payment_to_response(p) for p in document.payments],
        allowed_statuses=sorted(allowed_transitions(document), key=lambda s: s.value),
        created_at=document.created_at,
        updated_at=document.updated_at,
    )


def _settings_to_response(profile: BusinessProfile, settings: UserSettings) -> SettingsResponse:
    return SettingsResponse(
        profile=BusinessProfileResponse.model_validate(profile),
        settings=UserSettingsResponse.model_validate(asdict(settings)),
    )


def _template_to_response(template: Template) -> TemplateResponse:
    meta = template.metadata
    return TemplateResponse(
        id=meta.id,
        name=meta.name,
        description=meta.description,
        preview=meta.preview,
        is_premium=meta.is_premium,
        tier=meta.tier,
        category=meta.category,
        features=list(meta.features),
    )


# Health endpoint
@health_router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


# Client endpoints
@client_router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
def create_client(payload: ClientCreate, service: ClientServiceDep) -> ClientResponse:
    """Create a client, optionally with its primary contact."""
    details = payload.model_dump(exclude={"name", "contact"}, exclude_none=True)
    contact = payload.contact.model_dump(exclude={"is_primary"}) if payload.contact else None
    client = service.create_client(payload.name, details=details, primary_contact=contact)
    return _client_to_response(client)


@client_router.get("", response_model=list[ClientBalanceResponse])
def list_clients(service: ClientServiceDep) -> list[ClientBalanceResponse]:
    """List clients with their outstanding balance."""
    return [_balance_to_response(b) for b in service.list_clients()]


@client_router.get("/{client_id}", response_model=ClientResponse)
def get_client(client_id: UUID, service: ClientServiceDep) -> ClientResponse:
    return _client_to_response(service.get_client(client_id))


@client_router.patch("/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: UUID, payload: ClientUpdate, service: ClientServiceDep
) -> ClientResponse:
    changes = payload.model_dump(exclude_unset=True)
    return _client_to_response(service.update_client(client_id, changes))


@client_router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client(client_id: UUID, service: ClientServiceDep) -> Response:
    service.delete_client(client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@client_router.get("/{client_id}/summary", response_model=ClientSummaryResponse)
def get_client_summary(client_id: UUID, service: ClientServiceDep) -> ClientSummaryResponse:
    """Client detail with contacts, projects and billing totals."""
    return _summary_to_response(service.get_summary(client_id))


@client_router.get("/{client_id}/contacts", response_model=list[ContactResponse])
def list_contacts(client_id: UUID, service: ClientServiceDep) -> list[ContactResponse]:
    service.get_client(client_id)
    return [ContactResponse.model_validate(c) for c in service.list_contacts(client_id)]


@client_router.post(
    "/{client_id}/contacts",
    response_model=ContactResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_contact(
    client_id: UUID, payload: ContactCreate, service: ClientServiceDep
) -> ContactResponse:
    contact = service.add_contact(client_id, **payload.model_dump())
    return ContactResponse.model_validate(contact)


@client_router.get("/{client_id}/projects", response_model=list[ProjectResponse])
def list_projects(
    client_id: UUID,
    service: ClientServiceDep,
    include_archived: bool = Query(default=False),
) -> list[ProjectResponse]:
    service.get_client(client_id)
    projects = service.list_projects(client_id, include_archived=include_archived)
    return [ProjectResponse.model_validate(p) for p in projects]


@client_router.get("/{client_id}/documents", response_model=list[DocumentResponse])
def list_client_documents(
    client_id: UUID,
    clients: ClientServiceDep,
    documents: DocumentServiceDep,
) -> list[DocumentResponse]:
    clients.get_client(client_id)
    return [_document_to_response(d) for d in documents.list_for_client(client_id)]


# Contact endpoints
@contact_router.patch("/{contact_id}", response_model=ContactResponse)
def update_contact(
    contact_id: UUID, payload: ContactUpdate, service: ClientServiceDep
) -> ContactResponse:
    contact = service.update_contact(contact_id, payload.model_dump(exclude_unset=True))
    return ContactResponse.model_validate(contact)


@contact_router.post("/{contact_id}/primary", response_model=ContactResponse)
def set_primary_contact(contact_id: UUID, service: ClientServiceDep) -> ContactResponse:
    return ContactResponse.model_validate(service.set_primary_contact(contact_id))


@contact_router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_contact(contact_id: UUID, service: ClientServiceDep) -> Response:
    service.delete_contact(contact_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Project endpoints
@project_router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(payload: ProjectCreate, service: ClientServiceDep) -> ProjectResponse:
    project = service.create_project(payload.client_id, payload.title, payload.description)
    return ProjectResponse.model_validate(project)


@project_router.patch("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: UUID, payload: ProjectUpdate, service: ClientServiceDep
) -> ProjectResponse:
    project = service.update_project(project_id, payload.model_dump(exclude_unset=True))
    return ProjectResponse.model_validate(project)


@project_router.post("/{project_id}/archive", response_model=ProjectResponse)
def archive_project(project_id: UUID, service: ClientServiceDep) -> ProjectResponse:
    return ProjectResponse.model_validate(service.archive_project(project_id))


@project_router.post("/{project_id}/unarchive", response_model=ProjectResponse)
def unarchive_project(project_id: UUID, service: ClientServiceDep) -> ProjectResponse:
    return ProjectResponse.model_validate(service.unarchive_project(project_id))


@project_router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(project_id: UUID, service: ClientServiceDep) -> Response:
    service.delete_project(project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Product endpoints
@product_router.get("", response_model=list[ProductResponse])
def list_products(service: ProductServiceDep) -> list[ProductResponse]:
    """List active catalog products."""
    return [_product_to_response(p) for p in service.list_products()]


@product_router.post("", response_model=ProductResponse)
def save_product(payload: ProductSave, service: ProductServiceDep) -> ProductResponse:
    """Create a product, or update the one with the same name and type."""
    product = service.save_product(**payload.model_dump())
    return _product_to_response(product)


@product_router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: UUID, payload: ProductSave, service: ProductServiceDep
) -> ProductResponse:
    service.get_product(product_id)
    product = service.save_product(**payload.model_dump(), product_id=product_id)
    return _product_to_response(product)


@product_router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: UUID, service: ProductServiceDep) -> Response:
    service.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Document endpoints
@document_router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
def create_document(payload: DocumentCreate, service: DocumentServiceDep) -> DocumentResponse:
    """Create a draft quote or invoice pre-filled from settings."""
    document = service.create_document(
        payload.document_type,
        payload.client_id,
        contact_id=payload.contact_id,
        project_id=payload.project_id,
        issue_date=payload.issue_date,
    )
    return _document_to_response(document)


@document_router.get("", response_model=list[DocumentResponse])
def list_documents(
    service: DocumentServiceDep,
    document_type: DocumentType = Query(default=DocumentType.QUOTE, alias="type"),
) -> list[DocumentResponse]:
    """List quotes (converted ones excluded) or invoices."""
    if document_type == DocumentType.QUOTE:
        documents = service.list_quotes()
    else:
        documents = service.list_invoices()
    return [_document_to_response(d) for d in documents]


@document_router.post("/bulk-delete", response_model=BulkDeleteResponse)
def delete_documents(payload: BulkDeleteRequest, service: DocumentServiceDep) -> BulkDeleteResponse:
    return BulkDeleteResponse(deleted=service.delete_documents(payload.document_ids))


@document_router.post("/mark-overdue", response_model=list[DocumentResponse])
def mark_overdue(
    service: DocumentServiceDep,
    as_of: date | None = Query(default=None),
) -> list[DocumentResponse]:
    """Move invoices past their due date to OVERDUE."""
    return [_document_to_response(d) for d in service.mark_overdue(as_of)]


@document_router.get("/{document_id}", response_model=DocumentResponse)
def get_document(document_id: UUID, service: DocumentServiceDep) -> DocumentResponse:
    return _document_to_response(service.get_document(document_id))


@document_router.patch("/{document_id}", response_model=DocumentResponse)
def update_document(
    document_id: UUID, payload: DocumentUpdate, service: DocumentServiceDep
) -> DocumentResponse:
    changes = payload.model_dump(exclude_unset=True)
    return _document_to_response(service.update_details(document_id, changes))


@document_router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(document_id: UUID, service: DocumentServiceDep) -> Response:
    service.delete_document(document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@document_router.post(
    "/{document_id}/items",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_item(
    document_id: UUID, payload: ItemCreate, service: DocumentServiceDep
) -> DocumentResponse:
    """Append an item and return the document with recomputed totals."""
    if payload.product_id is not None:
        document = service.add_product_item(document_id, payload.product_id)
    else:
        document = service.add_item(document_id, payload.item_type, payload.description)
    return _document_to_response(document)


@document_router.put("/{document_id}/items/order", response_model=DocumentResponse)
def reorder_items(
    document_id: UUID, payload: ItemReorder, service: DocumentServiceDep
) -> DocumentResponse:
    return _document_to_response(service.reorder_items(document_id, payload.item_ids))


@document_router.patch("/{document_id}/items/{item_id}", response_model=DocumentResponse)
def update_item(
    document_id: UUID,
    item_id: UUID,
    payload: ItemUpdate,
    service: DocumentServiceDep,
) -> DocumentResponse:
    """Edit one item field; quantity and unit price edits recompute the amount."""
    document = service.update_item(document_id, item_id, payload.field, payload.value)
    return _document_to_response(document)


@document_router.post(
    "/{document_id}/items/{item_id}/duplicate", response_model=DocumentResponse
)
def duplicate_item(
    document_id: UUID, item_id: UUID, service: DocumentServiceDep
) -> DocumentResponse:
    return _document_to_response(service.duplicate_item(document_id, item_id))


@document_router.delete("/{document_id}/items/{item_id}", response_model=DocumentResponse)
def remove_item(
    document_id: UUID, item_id: UUID, service: DocumentServiceDep
) -> DocumentResponse:
    return _document_to_response(service.remove_item(document_id, item_id))


@document_router.get("/{document_id}/totals", response_model=TotalsResponse)
def get_totals(document_id: UUID, service: DocumentServiceDep) -> TotalsResponse:
    return _totals_to_response(service.get_document(document_id))


@document_router.put("/{document_id}/tax", response_model=DocumentResponse)
def set_tax_rate(
    document_id: UUID, payload: TaxRateUpdate, service: DocumentServiceDep
) -> DocumentResponse:
    return _document_to_response(service.set_tax_rate(document_id, payload.tax_rate))


@document_router.put("/{document_id}/discount", response_model=DocumentResponse)
def set_discount(
    document_id: UUID, payload: DiscountUpdate, service: DocumentServiceDep
) -> DocumentResponse:
    document = service.set_discount(document_id, payload.discount, payload.discount_type)
    return _document_to_response(document)


@document_router.post("/{document_id}/status", response_model=DocumentResponse)
def change_status(
    document_id: UUID, payload: StatusUpdate, service: DocumentServiceDep
) -> DocumentResponse:
    return _document_to_response(service.change_status(document_id, payload.status))


@document_router.post(
    "/{document_id}/convert",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
def convert_to_invoice(document_id: UUID, service: DocumentServiceDep) -> DocumentResponse:
    """Create an invoice from a quote and return the invoice."""
    return _document_to_response(service.convert_to_invoice(document_id))


@document_router.post(
    "/{document_id}/duplicate",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
def duplicate_document(document_id: UUID, service: DocumentServiceDep) -> DocumentResponse:
    return _document_to_response(service.duplicate_document(document_id))


@document_router.post("/{document_id}/payments", response_model=DocumentResponse)
def record_payment(
    document_id: UUID, payload: PaymentCreate, service: DocumentServiceDep
) -> DocumentResponse:
    document = service.record_payment(
        document_id,
        payload.amount,
        payment_date=payload.payment_date,
        method=payload.method,
        reference=payload.reference,
        notes=payload.notes,
    )
    return _document_to_response(document)


@document_router.get("/{document_id}/render")
def render_document(
    document_id: UUID,
    service: DocumentServiceDep,
    template_id: str | None = Query(default=None),
) -> Response:
    """Render the document as a PDF with the selected or given template."""
    document = service.get_document(document_id)
    pdf = service.render(document_id, template_id)
    filename = f"{document.document_number}.pdf"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


# Settings endpoints
@settings_router.get("", response_model=SettingsResponse)
def get_settings(service: SettingsServiceDep) -> SettingsResponse:
    return _settings_to_response(service.get_profile(), service.get_settings())


@settings_router.put("/business-profile", response_model=BusinessProfileResponse)
def save_business_profile(
    service: SettingsServiceDep, payload: dict[str, Any] = Body(...)
) -> BusinessProfileResponse:
    return BusinessProfileResponse.model_validate(service.save_business_profile(payload))


@settings_router.put("/brand", response_model=BusinessProfileResponse)
def save_brand_color(
    payload: BrandColorUpdate, service: SettingsServiceDep
) -> BusinessProfileResponse:
    return BusinessProfileResponse.model_validate(service.save_brand_color(payload.brand_color))


@settings_router.put("/financial", response_model=UserSettingsResponse)
def save_financial_settings(
    service: SettingsServiceDep, payload: dict[str, Any] = Body(...)
) -> UserSettingsResponse:
    settings = service.save_financial_settings(payload)
    return UserSettingsResponse.model_validate(asdict(settings))


@settings_router.put("/quote", response_model=UserSettingsResponse)
def save_quote_settings(
    service: SettingsServiceDep, payload: dict[str, Any] = Body(...)
) -> UserSettingsResponse:
    settings = service.save_quote_settings(payload)
    return UserSettingsResponse.model_validate(asdict(settings))


@settings_router.put("/invoice", response_model=UserSettingsResponse)
def save_invoice_settings(
    service: SettingsServiceDep, payload: dict[str, Any] = Body(...)
) -> UserSettingsResponse:
    settings = service.save_invoice_settings(payload)
    return UserSettingsResponse.model_validate(asdict(settings))


@settings_router.put("/template", response_model=UserSettingsResponse)
def select_template(payload: TemplateSelect, service: SettingsServiceDep) -> UserSettingsResponse:
    settings = service.select_template(payload.template_id)
    return UserSettingsResponse.model_validate(asdict(settings))


@settings_router.put("/visibility", response_model=UserSettingsResponse)
def save_default_visibility(
    payload: VisibilityUpdate, service: SettingsServiceDep
) -> UserSettingsResponse:
    settings = service.save_default_visibility(payload.model_dump(exclude_none=True))
    return UserSettingsResponse.model_validate(asdict(settings))


@settings_router.get("/next-number/{document_type}", response_model=NextNumberResponse)
def preview_next_number(
    document_type: DocumentType, service: SettingsServiceDep
) -> NextNumberResponse:
    """Preview the number the next document of this type will get."""
    return NextNumberResponse(
        document_type=document_type,
        document_number=service.preview_next_number(document_type),
    )


# Template endpoints
@template_router.get("", response_model=list[TemplateResponse])
def list_templates(
    tier: str | None = Query(default=None, pattern=r"^(free|premium)$"),
) -> list[TemplateResponse]:
    if tier == "free":
        templates = free_templates()
    elif tier == "premium":
        templates = premium_templates()
    else:
        templates = all_templates()
    return [_template_to_response(t) for t in templates]


@template_router.get("/{template_id}", response_model=TemplateResponse)
def get_template(template_id: str) -> TemplateResponse:
    return _template_to_response(require_template(template_id))
