"""DocumentService implementation: the quote and invoice workflow.

Every item, tax or discount edit goes through the totals engine and the full
document snapshot (items plus recomputed aggregates) is persisted in one
repository call.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import asdict, replace
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from quotebook.domain.clients import Client
from quotebook.domain.documents import (
    BusinessInfoVisibility,
    ClientInfoVisibility,
    Document,
    Payment,
)
from quotebook.domain.value_objects import (
    ZERO,
    DiscountType,
    DocumentStatus,
    DocumentType,
    PaymentMethod,
    parse_decimal,
    parse_flag,
)
from quotebook.exceptions import (
    ContactNotFoundError,
    ConversionError,
    DocumentError,
    DocumentLockedError,
    DocumentNotFoundError,
    InvalidAmountError,
    InvalidStatusTransitionError,
    ProjectNotFoundError,
    ValidationError,
)
from quotebook.logging_config import get_logger
from quotebook.repositories.interfaces import (
    ContactRepository,
    DocumentRepository,
    ProjectRepository,
)
from quotebook.services import totals as engine
from quotebook.services.interfaces import (
    ClientService,
    DocumentService,
    ProductService,
    SettingsService,
)
from quotebook.templates.base import RenderContext
from quotebook.templates.registry import render_document

logger = get_logger(__name__)

S = DocumentStatus

QUOTE_TRANSITIONS: dict[DocumentStatus, frozenset[DocumentStatus]] = {
    S.DRAFT: frozenset({S.SENT, S.CANCELLED}),
    S.SENT: frozenset({S.DRAFT, S.VIEWED, S.APPROVED, S.REJECTED, S.CANCELLED}),
    S.VIEWED: frozenset({S.APPROVED, S.REJECTED, S.CANCELLED}),
    S.APPROVED: frozenset({S.SENT, S.CANCELLED}),
    S.REJECTED: frozenset({S.DRAFT, S.CANCELLED}),
}

INVOICE_TRANSITIONS: dict[DocumentStatus, frozenset[DocumentStatus]] = {
    S.DRAFT: frozenset({S.SENT, S.CANCELLED}),
    S.SENT: frozenset({S.DRAFT, S.VIEWED, S.PARTIAL, S.PAID, S.OVERDUE, S.CANCELLED}),
    S.VIEWED: frozenset({S.PARTIAL, S.PAID, S.OVERDUE, S.CANCELLED}),
    S.PARTIAL: frozenset({S.PAID, S.OVERDUE, S.CANCELLED}),
    S.OVERDUE: frozenset({S.PARTIAL, S.PAID, S.CANCELLED}),
}

CONVERTIBLE_STATUSES = frozenset({S.SENT, S.VIEWED, S.APPROVED})
OVERDUE_CANDIDATES = frozenset({S.SENT, S.VIEWED, S.PARTIAL})

DETAIL_FIELDS = frozenset(
    {
        "contact_id",
        "project_id",
        "issue_date",
        "due_date",
        "valid_until",
        "currency",
        "notes",
        "terms",
        "internal_notes",
        "show_discount",
        "show_tax",
        "show_notes",
        "show_terms",
        "business_fields",
        "client_fields",
    }
)

NULLABLE_DETAIL_FIELDS = frozenset(
    {
        "contact_id",
        "project_id",
        "due_date",
        "valid_until",
        "notes",
        "terms",
        "internal_notes",
    }
)


def allowed_transitions(document: Document) -> frozenset[DocumentStatus]:
    table = QUOTE_TRANSITIONS if document.is_quote else INVOICE_TRANSITIONS
    return table.get(document.status, frozenset())


def _as_date(value: date | str | None, field: str) -> date | None:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(
            f"Invalid {field}: {value!r}", context={"field": field}
        ) from None


def _as_uuid(value: UUID | str | None) -> UUID | None:
    if value is None or isinstance(value, UUID):
        return value
    return UUID(str(value))


class DocumentServiceImpl(DocumentService):
    def __init__(
        self,
        document_repo: DocumentRepository,
        contact_repo: ContactRepository,
        project_repo: ProjectRepository,
        client_service: ClientService,
        product_service: ProductService,
        settings_service: SettingsService,
    ) -> None:
        self._document_repo = document_repo
        self._contact_repo = contact_repo
        self._project_repo = project_repo
        self._client_service = client_service
        self._product_service = product_service
        self._settings_service = settings_service

    # ------------------------------------------------------------------
    # Lookup and lifecycle
    # ------------------------------------------------------------------

    def get_document(self, document_id: UUID) -> Document:
        document = self._document_repo.get(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    def create_document(
        self,
        document_type: DocumentType,
        client_id: UUID,
        contact_id: UUID | None = None,
        project_id: UUID | None = None,
        issue_date: date | None = None,
    ) -> Document:
        """Create a draft pre-filled from the user's defaults.

        The document number is taken from the matching counter, which is
        advanced. Without an explicit contact the client's primary contact
        is used.
        """
        client = self._client_service.get_client(client_id)
        settings = self._settings_service.get_settings()
        issued = issue_date or date.today()

        if contact_id is None:
            primary = next(
                (c for c in self._contact_repo.list_by_client(client_id) if c.is_primary),
                None,
            )
            contact_id = primary.id if primary else None
        else:
            self._check_contact(client, contact_id)
        if project_id is not None:
            self._check_project(client, project_id)

        document = Document(
            document_type=document_type,
            client_id=client_id,
            contact_id=contact_id,
            project_id=project_id,
            issue_date=issued,
            currency=client.currency or settings.default_currency,
            tax_rate=settings.default_tax_rate if settings.show_tax_settings else ZERO,
            show_tax=settings.show_tax_settings,
            business_fields=replace(settings.default_business_fields),
            client_fields=replace(settings.default_client_fields),
        )
        if document_type == DocumentType.QUOTE:
            document.valid_until = issued + timedelta(days=settings.quote_validity_days)
            document.notes = settings.quote_default_notes
            document.terms = settings.quote_default_terms
        else:
            document.due_date = issued + timedelta(days=settings.invoice_default_due_days)
            document.notes = settings.invoice_default_notes
            document.terms = settings.invoice_default_terms

        document.document_number = self._settings_service.take_next_number(document_type)
        document.apply_totals(engine.totals_for([], engine.TotalsInputs.from_document(document)))
        self._document_repo.add(document)
        logger.info(
            "document_created",
            document_id=str(document.id),
            document_type=document_type.value,
            document_number=document.document_number,
            client_id=str(client_id),
        )
        return document

    def list_quotes(self) -> list[Document]:
        return list(
            self._document_repo.list_by_type(
                DocumentType.QUOTE, exclude_statuses=[S.CONVERTED]
            )
        )

    def list_invoices(self) -> list[Document]:
        return list(self._document_repo.list_by_type(DocumentType.INVOICE))

    def list_for_client(self, client_id: UUID) -> list[Document]:
        return list(self._document_repo.list_by_client(client_id))

    def update_details(self, document_id: UUID, changes: Mapping[str, Any]) -> Document:
        """Update header fields that do not affect totals."""
        document = self.get_document(document_id)
        unknown = sorted(set(changes) - DETAIL_FIELDS)
        if unknown:
            raise ValidationError(
                f"Unknown fields: {', '.join(unknown)}", context={"fields": unknown}
            )
        nulled = sorted(
            key for key, value in changes.items()
            if value is None and key not in NULLABLE_DETAIL_FIELDS
        )
        if nulled:
            raise ValidationError(
                f"Fields cannot be null: {', '.join(nulled)}", context={"fields": nulled}
            )
        client = self._client_service.get_client(document.client_id)

        for key, value in changes.items():
            if key in ("contact_id", "project_id"):
                ref = _as_uuid(value)
                if ref is not None:
                    if key == "contact_id":
                        self._check_contact(client, ref)
                    else:
                        self._check_project(client, ref)
                setattr(document, key, ref)
            elif key in ("issue_date", "due_date", "valid_until"):
                setattr(document, key, _as_date(value, key))
            elif key == "currency":
                document.currency = str(value).strip().upper()
            elif key == "business_fields":
                document.business_fields = _merge_visibility(
                    document.business_fields, value, BusinessInfoVisibility
                )
            elif key == "client_fields":
                document.client_fields = _merge_visibility(
                    document.client_fields, value, ClientInfoVisibility
                )
            elif key.startswith("show_"):
                setattr(document, key, parse_flag(value, key))
            else:
                setattr(document, key, value)

        document.touch()
        self._document_repo.update(document)
        logger.info(
            "document_updated", document_id=str(document_id), fields=sorted(changes)
        )
        return document

    def delete_document(self, document_id: UUID) -> None:
        self.get_document(document_id)
        self._document_repo.delete(document_id)
        logger.info("document_deleted", document_id=str(document_id))

    def delete_documents(self, document_ids: Iterable[UUID]) -> int:
        deleted = 0
        for document_id in document_ids:
            if self._document_repo.get(document_id) is None:
                continue
            self._document_repo.delete(document_id)
            deleted += 1
        logger.info("documents_deleted", count=deleted)
        return deleted

    # ------------------------------------------------------------------
    # Item and totals edits
    # ------------------------------------------------------------------

    def _editable(self, document_id: UUID) -> Document:
        document = self.get_document(document_id)
        if document.is_locked:
            raise DocumentLockedError(document_id, document.status.value)
        return document

    def _save_items(self, document: Document, update: engine.ItemsUpdate) -> Document:
        document.items = update.items
        document.apply_totals(update.totals)
        self._document_repo.update(document)
        logger.debug(
            "document_totals_recomputed",
            document_id=str(document.id),
            item_count=len(document.items),
            total=str(document.total),
        )
        return document

    def update_item(
        self, document_id: UUID, item_id: UUID, field: str, value: Any
    ) -> Document:
        document = self._editable(document_id)
        update = engine.update_item(
            document.items,
            item_id,
            field,
            value,
            engine.TotalsInputs.from_document(document),
        )
        return self._save_items(document, update)

    def add_item(
        self, document_id: UUID, item_type: str = "Product", description: str = ""
    ) -> Document:
        document = self._editable(document_id)
        update = engine.add_item(
            document.items,
            engine.TotalsInputs.from_document(document),
            engine.new_item(item_type=item_type or "Product", description=description),
        )
        return self._save_items(document, update)

    def add_product_item(self, document_id: UUID, product_id: UUID) -> Document:
        document = self._editable(document_id)
        product = self._product_service.get_product(product_id)
        update = engine.add_item(
            document.items,
            engine.TotalsInputs.from_document(document),
            engine.item_from_product(product),
        )
        logger.info(
            "product_added_to_document",
            document_id=str(document_id),
            product_id=str(product_id),
        )
        return self._save_items(document, update)

    def duplicate_item(self, document_id: UUID, item_id: UUID) -> Document:
        document = self._editable(document_id)
        update = engine.duplicate_item(
            document.items, item_id, engine.TotalsInputs.from_document(document)
        )
        return self._save_items(document, update)

    def remove_item(self, document_id: UUID, item_id: UUID) -> Document:
        document = self._editable(document_id)
        update = engine.remove_item(
            document.items, item_id, engine.TotalsInputs.from_document(document)
        )
        return self._save_items(document, update)

    def reorder_items(self, document_id: UUID, ordered_ids: Sequence[UUID]) -> Document:
        document = self._editable(document_id)
        items = engine.reorder_items(document.items, ordered_ids)
        update = engine.ItemsUpdate(
            items=items,
            totals=engine.totals_for(items, engine.TotalsInputs.from_document(document)),
        )
        return self._save_items(document, update)

    def set_tax_rate(self, document_id: UUID, tax_rate: Decimal | str) -> Document:
        document = self._editable(document_id)
        rate = parse_decimal(tax_rate, "tax_rate")
        inputs = replace(engine.TotalsInputs.from_document(document), tax_rate=rate)
        document.tax_rate = rate
        return self._save_items(
            document,
            engine.ItemsUpdate(
                items=document.items, totals=engine.totals_for(document.items, inputs)
            ),
        )

    def set_discount(
        self,
        document_id: UUID,
        discount: Decimal | str,
        discount_type: DiscountType | None = None,
    ) -> Document:
        document = self._editable(document_id)
        value = parse_decimal(discount, "discount")
        kind = DiscountType(discount_type) if discount_type else document.discount_type
        inputs = replace(
            engine.TotalsInputs.from_document(document),
            discount=value,
            discount_type=kind,
        )
        document.discount = value
        document.discount_type = kind
        return self._save_items(
            document,
            engine.ItemsUpdate(
                items=document.items, totals=engine.totals_for(document.items, inputs)
            ),
        )

    # ------------------------------------------------------------------
    # Copies and conversion
    # ------------------------------------------------------------------

    def _copy_as(
        self, source: Document, document_type: DocumentType, issue_date: date
    ) -> Document:
        settings = self._settings_service.get_settings()
        now = datetime.now(UTC)
        copy = replace(
            source,
            id=uuid4(),
            document_type=document_type,
            status=S.DRAFT,
            issue_date=issue_date,
            amount_paid=ZERO,
            items=[replace(item, id=uuid4()) for item in source.items],
            payments=[],
            business_fields=replace(source.business_fields),
            client_fields=replace(source.client_fields),
            created_at=now,
            updated_at=now,
        )
        if document_type == DocumentType.QUOTE:
            copy.due_date = None
            copy.valid_until = issue_date + timedelta(days=settings.quote_validity_days)
        else:
            copy.valid_until = None
            copy.due_date = issue_date + timedelta(days=settings.invoice_default_due_days)
        copy.document_number = self._settings_service.take_next_number(document_type)
        copy.apply_totals(
            engine.totals_for(copy.items, engine.TotalsInputs.from_document(copy))
        )
        return copy

    def duplicate_document(self, document_id: UUID) -> Document:
        source = self.get_document(document_id)
        copy = self._copy_as(source, source.document_type, date.today())
        self._document_repo.add(copy)
        logger.info(
            "document_duplicated",
            source_id=str(document_id),
            document_id=str(copy.id),
            document_number=copy.document_number,
        )
        return copy

    def convert_to_invoice(self, document_id: UUID) -> Document:
        """Create an invoice from a sent, viewed or approved quote.

        The quote is marked ``CONVERTED`` and drops out of the quote listing.
        """
        quote = self.get_document(document_id)
        if not quote.is_quote:
            raise ConversionError(document_id, "only quotes can be converted")
        if quote.status not in CONVERTIBLE_STATUSES:
            raise ConversionError(
                document_id, f"quote status {quote.status.value} cannot be converted"
            )

        invoice = self._copy_as(quote, DocumentType.INVOICE, date.today())
        self._document_repo.add(invoice)

        quote.status = S.CONVERTED
        quote.touch()
        self._document_repo.update(quote)
        logger.info(
            "quote_converted",
            quote_id=str(document_id),
            invoice_id=str(invoice.id),
            invoice_number=invoice.document_number,
        )
        return invoice

    # ------------------------------------------------------------------
    # Status and payments
    # ------------------------------------------------------------------

    def change_status(self, document_id: UUID, status: DocumentStatus) -> Document:
        document = self.get_document(document_id)
        target = DocumentStatus(status)
        if target == document.status:
            return document
        if target not in allowed_transitions(document):
            raise InvalidStatusTransitionError(
                document_id, document.status.value, target.value
            )
        previous = document.status
        document.status = target
        document.touch()
        self._document_repo.update(document)
        logger.info(
            "document_status_changed",
            document_id=str(document_id),
            from_status=previous.value,
            to_status=target.value,
        )
        return document

    def record_payment(
        self,
        document_id: UUID,
        amount: Decimal | str,
        payment_date: date | None = None,
        method: PaymentMethod = PaymentMethod.BANK_TRANSFER,
        reference: str = "",
        notes: str = "",
    ) -> Document:
        """Append a payment and move the invoice to ``PARTIAL`` or ``PAID``.

        The move must be allowed from the current status, so draft invoices
        have to be sent before they can take payments.
        """
        document = self._editable(document_id)
        if not document.is_invoice:
            raise DocumentError(
                "Payments can only be recorded against invoices",
                error_code="PAYMENT_NOT_ALLOWED",
                context={"document_id": str(document_id)},
            )
        value = parse_decimal(amount, "amount")
        if value == ZERO:
            raise InvalidAmountError("amount", amount, "must be greater than zero")

        payment = Payment(
            amount=value,
            payment_date=payment_date or date.today(),
            method=PaymentMethod(method),
            reference=reference,
            notes=notes,
        )
        document.payments.append(payment)
        document.amount_paid = sum((p.amount for p in document.payments), ZERO)
        totals = engine.totals_for(
            document.items, engine.TotalsInputs.from_document(document)
        )
        target = S.PAID if totals.amount_due <= ZERO else S.PARTIAL
        if target != document.status and target not in allowed_transitions(document):
            raise InvalidStatusTransitionError(
                document_id, document.status.value, target.value
            )
        document.status = target
        self._save_items(document, engine.ItemsUpdate(items=document.items, totals=totals))
        logger.info(
            "payment_recorded",
            document_id=str(document_id),
            payment_id=str(payment.id),
            amount=str(value),
            amount_due=str(document.amount_due),
            status=document.status.value,
        )
        return document

    def mark_overdue(self, as_of: date | None = None) -> list[Document]:
        today = as_of or date.today()
        marked = []
        for document in self._document_repo.list_by_type(DocumentType.INVOICE):
            if document.status not in OVERDUE_CANDIDATES:
                continue
            if document.due_date is None or document.due_date >= today:
                continue
            document.status = S.OVERDUE
            document.touch()
            self._document_repo.update(document)
            marked.append(document)
        if marked:
            logger.info("invoices_marked_overdue", count=len(marked), as_of=today.isoformat())
        return marked

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def build_render_context(self, document_id: UUID) -> RenderContext:
        document = self.get_document(document_id)
        contact = (
            self._contact_repo.get(document.contact_id) if document.contact_id else None
        )
        project = (
            self._project_repo.get(document.project_id) if document.project_id else None
        )
        return RenderContext(
            document=document,
            client=self._client_service.get_client(document.client_id),
            profile=self._settings_service.get_profile(),
            settings=self._settings_service.get_settings(),
            contact=contact,
            project=project,
        )

    def render(self, document_id: UUID, template_id: str | None = None) -> bytes:
        context = self.build_render_context(document_id)
        pdf = render_document(context, template_id)
        logger.info(
            "document_rendered",
            document_id=str(document_id),
            template_id=template_id or context.settings.selected_template_id,
            size=len(pdf),
        )
        return pdf

    # ------------------------------------------------------------------
    # Reference checks
    # ------------------------------------------------------------------

    def _check_contact(self, client: Client, contact_id: UUID) -> None:
        contact = self._contact_repo.get(contact_id)
        if contact is None or contact.client_id != client.id:
            raise ContactNotFoundError(contact_id)

    def _check_project(self, client: Client, project_id: UUID) -> None:
        project = self._project_repo.get(project_id)
        if project is None or project.client_id != client.id:
            raise ProjectNotFoundError(project_id)


def _merge_visibility(current: Any, value: Any, kind: type) -> Any:
    if isinstance(value, kind):
        return value
    values = asdict(current)
    values.update(
        {k: parse_flag(v, k) for k, v in dict(value).items() if k in values}
    )
    return kind(**values)
