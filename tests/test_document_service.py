"""Tests for DocumentService implementation."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from quotebook.domain.clients import Client
from quotebook.domain.documents import Document
from quotebook.domain.value_objects import (
    DiscountType,
    DocumentStatus,
    DocumentType,
    PaymentMethod,
)
from quotebook.exceptions import (
    ContactNotFoundError,
    ConversionError,
    DocumentError,
    DocumentLockedError,
    DocumentNotFoundError,
    InvalidAmountError,
    InvalidItemFieldError,
    InvalidStatusTransitionError,
    ValidationError,
)
from quotebook.services.clients import ClientServiceImpl
from quotebook.services.documents import DocumentServiceImpl, allowed_transitions
from quotebook.services.products import ProductServiceImpl
from quotebook.services.settings import SettingsServiceImpl


def _priced_document(
    service: DocumentServiceImpl,
    client: Client,
    document_type: DocumentType = DocumentType.QUOTE,
) -> Document:
    """Create a document holding 2 x 50.00 and 1 x 25.50."""
    document = service.create_document(document_type, client.id, issue_date=date(2025, 3, 1))
    document = service.add_item(document.id, description="Design work")
    first = document.items[0].id
    service.update_item(document.id, first, "has_quantity_column", True)
    service.update_item(document.id, first, "quantity", "2")
    service.update_item(document.id, first, "unit_price", "50.00")
    document = service.add_item(document.id, description="Hosting")
    return service.update_item(document.id, document.items[1].id, "unit_price", "25.50")


def _sent_invoice(service: DocumentServiceImpl, client: Client) -> Document:
    invoice = _priced_document(service, client, DocumentType.INVOICE)
    return service.change_status(invoice.id, DocumentStatus.SENT)


class TestCreateDocument:
    def test_quote_prefilled_from_settings(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = document_service.create_document(
            DocumentType.QUOTE, sample_client.id, issue_date=date(2025, 3, 1)
        )

        assert quote.document_number == "Q-001"
        assert quote.status == DocumentStatus.DRAFT
        assert quote.valid_until == date(2025, 3, 31)
        assert quote.due_date is None
        assert quote.currency == "USD"
        assert quote.total == Decimal("0")

    def test_invoice_gets_due_date_and_own_counter(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        document_service.create_document(DocumentType.QUOTE, sample_client.id)
        invoice = document_service.create_document(
            DocumentType.INVOICE, sample_client.id, issue_date=date(2025, 3, 1)
        )

        assert invoice.document_number == "INV-001"
        assert invoice.due_date == date(2025, 3, 31)
        assert invoice.valid_until is None

    def test_numbers_advance(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        first = document_service.create_document(DocumentType.QUOTE, sample_client.id)
        second = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        assert (first.document_number, second.document_number) == ("Q-001", "Q-002")

    def test_primary_contact_is_default(
        self,
        document_service: DocumentServiceImpl,
        client_service: ClientServiceImpl,
        sample_client: Client,
    ):
        primary = client_service.list_contacts(sample_client.id)[0]

        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        assert quote.contact_id == primary.id

    def test_contact_of_other_client_rejected(
        self,
        document_service: DocumentServiceImpl,
        client_service: ClientServiceImpl,
        sample_client: Client,
    ):
        other = client_service.create_client(
            "Other", primary_contact={"name": "Stranger"}
        )
        stranger = client_service.list_contacts(other.id)[0]

        with pytest.raises(ContactNotFoundError):
            document_service.create_document(
                DocumentType.QUOTE, sample_client.id, contact_id=stranger.id
            )

    def test_default_tax_rate_applied(
        self,
        document_service: DocumentServiceImpl,
        settings_service: SettingsServiceImpl,
        sample_client: Client,
    ):
        settings_service.save_financial_settings({"default_tax_rate": "8.5"})

        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        assert quote.tax_rate == Decimal("8.5")

    def test_document_persisted(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        assert document_service.get_document(quote.id).document_number == "Q-001"

    def test_unknown_document_raises(self, document_service: DocumentServiceImpl):
        with pytest.raises(DocumentNotFoundError):
            document_service.get_document(uuid4())


class TestItemEdits:
    def test_totals_follow_item_edits(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        document = _priced_document(document_service, sample_client)

        assert [item.amount for item in document.items] == [
            Decimal("100.00"),
            Decimal("25.50"),
        ]
        assert document.subtotal == Decimal("125.50")

        stored = document_service.get_document(document.id)
        assert stored.subtotal == Decimal("125.50")
        assert stored.total == Decimal("125.50")

    def test_tax_and_percentage_discount(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        document = _priced_document(document_service, sample_client)

        document_service.set_tax_rate(document.id, "10")
        document = document_service.set_discount(
            document.id, "5", DiscountType.PERCENTAGE
        )

        assert document.tax_amount == Decimal("12.55")
        assert document.discount_amount == Decimal("6.275")
        assert document.total == Decimal("131.775")
        assert document_service.get_document(document.id).discount_type == (
            DiscountType.PERCENTAGE
        )

    def test_fixed_discount(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        document = _priced_document(document_service, sample_client)

        document = document_service.set_discount(document.id, "25.50", DiscountType.FIXED)

        assert document.total == Decimal("100.00")

    def test_remove_item_recomputes(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        document = _priced_document(document_service, sample_client)

        document = document_service.remove_item(document.id, document.items[0].id)

        assert len(document.items) == 1
        assert document.items[0].order == 0
        assert document.subtotal == Decimal("25.50")

    def test_duplicate_and_reorder(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        document = _priced_document(document_service, sample_client)
        hosting = document.items[1].id

        document = document_service.duplicate_item(document.id, hosting)
        assert document.subtotal == Decimal("151.00")

        ids = [item.id for item in document.items]
        document = document_service.reorder_items(document.id, [ids[2], ids[0]])

        stored = document_service.get_document(document.id)
        assert [item.id for item in stored.items] == [ids[2], ids[0], ids[1]]
        assert [item.order for item in stored.items] == [0, 1, 2]

    def test_add_product_item(
        self,
        document_service: DocumentServiceImpl,
        product_service: ProductServiceImpl,
        sample_client: Client,
    ):
        product = product_service.save_product(
            "Retainer", "300", item_type="Service", description="Monthly"
        )
        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        quote = document_service.add_product_item(quote.id, product.id)

        assert quote.items[0].description == "Retainer\nMonthly"
        assert quote.items[0].source_product_id == product.id
        assert quote.subtotal == Decimal("300")

    def test_unknown_item_id_is_noop(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        document = _priced_document(document_service, sample_client)

        document = document_service.update_item(document.id, uuid4(), "unit_price", "999")

        assert document.subtotal == Decimal("125.50")

    def test_invalid_field_rejected(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        document = _priced_document(document_service, sample_client)

        with pytest.raises(InvalidItemFieldError):
            document_service.update_item(document.id, document.items[0].id, "id", "x")

    def test_malformed_price_leaves_document_unchanged(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        document = _priced_document(document_service, sample_client)

        with pytest.raises(InvalidAmountError):
            document_service.update_item(
                document.id, document.items[0].id, "unit_price", "fifty"
            )

        assert document_service.get_document(document.id).subtotal == Decimal("125.50")

    def test_negative_tax_rejected(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        document = _priced_document(document_service, sample_client)

        with pytest.raises(InvalidAmountError):
            document_service.set_tax_rate(document.id, "-1")

    def test_amount_follows_quantity_column(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        document = _priced_document(document_service, sample_client)
        design, hosting = (item.id for item in document.items)

        with pytest.raises(InvalidItemFieldError):
            document_service.update_item(document.id, design, "amount", "30")

        document_service.update_item(document.id, design, "has_quantity_column", False)
        document = document_service.update_item(document.id, design, "unit_price", "20")
        document = document_service.update_item(document.id, hosting, "amount", "5")

        stored = document_service.get_document(document.id)
        assert [(item.quantity, item.amount) for item in stored.items] == [
            (Decimal("1"), Decimal("20")),
            (Decimal("1"), Decimal("5")),
        ]
        assert stored.subtotal == Decimal("25")


class TestDetails:
    def test_update_details(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        updated = document_service.update_details(
            quote.id,
            {
                "valid_until": "2025-06-30",
                "notes": "Thanks!",
                "currency": "eur",
                "business_fields": {"tax_id": False},
            },
        )

        assert updated.valid_until == date(2025, 6, 30)
        assert updated.currency == "EUR"
        stored = document_service.get_document(quote.id)
        assert stored.notes == "Thanks!"
        assert stored.business_fields.tax_id is False
        assert stored.business_fields.email is True

    def test_unknown_detail_rejected(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        with pytest.raises(ValidationError):
            document_service.update_details(quote.id, {"total": "1"})

    def test_bad_date_rejected(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        with pytest.raises(ValidationError):
            document_service.update_details(quote.id, {"issue_date": "yesterday"})

    @pytest.mark.parametrize(
        "field", ["currency", "issue_date", "show_tax", "business_fields", "client_fields"]
    )
    def test_null_rejected_for_required_fields(
        self, document_service: DocumentServiceImpl, sample_client: Client, field: str
    ):
        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        with pytest.raises(ValidationError) as exc_info:
            document_service.update_details(quote.id, {field: None})

        assert exc_info.value.context == {"fields": [field]}
        stored = document_service.get_document(quote.id)
        assert stored.currency == "USD"
        assert stored.show_tax is True

    def test_null_clears_optional_fields(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)
        document_service.update_details(quote.id, {"notes": "Draft note"})

        updated = document_service.update_details(
            quote.id, {"notes": None, "valid_until": None}
        )

        assert updated.notes is None
        assert updated.valid_until is None

    def test_show_flags_must_be_booleans(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        with pytest.raises(ValidationError):
            document_service.update_details(quote.id, {"show_tax": "false"})
        with pytest.raises(ValidationError):
            document_service.update_details(quote.id, {"client_fields": {"email": "no"}})

        assert document_service.get_document(quote.id).show_tax is True


class TestStatus:
    def test_quote_workflow(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        document_service.change_status(quote.id, DocumentStatus.SENT)
        quote = document_service.change_status(quote.id, DocumentStatus.APPROVED)

        assert quote.status == DocumentStatus.APPROVED
        assert document_service.get_document(quote.id).status == DocumentStatus.APPROVED

    def test_invalid_transition(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        with pytest.raises(InvalidStatusTransitionError):
            document_service.change_status(quote.id, DocumentStatus.APPROVED)

    def test_quote_cannot_be_paid(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)
        document_service.change_status(quote.id, DocumentStatus.SENT)

        with pytest.raises(InvalidStatusTransitionError):
            document_service.change_status(quote.id, DocumentStatus.PAID)

    def test_same_status_is_noop(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        assert document_service.change_status(quote.id, "DRAFT").status == DocumentStatus.DRAFT

    def test_allowed_transitions_for_draft_invoice(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        invoice = document_service.create_document(DocumentType.INVOICE, sample_client.id)

        assert allowed_transitions(invoice) == {DocumentStatus.SENT, DocumentStatus.CANCELLED}

    def test_cancelled_document_is_locked(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        document = _priced_document(document_service, sample_client)
        document_service.change_status(document.id, DocumentStatus.CANCELLED)

        with pytest.raises(DocumentLockedError):
            document_service.add_item(document.id)
        with pytest.raises(DocumentLockedError):
            document_service.set_tax_rate(document.id, "5")
        with pytest.raises(DocumentLockedError):
            document_service.remove_item(document.id, document.items[0].id)

    def test_locked_document_details_still_editable(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        document = _priced_document(document_service, sample_client)
        document_service.change_status(document.id, DocumentStatus.CANCELLED)

        updated = document_service.update_details(document.id, {"internal_notes": "lost"})

        assert updated.internal_notes == "lost"


class TestConversion:
    def test_convert_sent_quote(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = _priced_document(document_service, sample_client)
        document_service.set_tax_rate(quote.id, "10")
        document_service.change_status(quote.id, DocumentStatus.SENT)

        invoice = document_service.convert_to_invoice(quote.id)

        assert invoice.document_type == DocumentType.INVOICE
        assert invoice.status == DocumentStatus.DRAFT
        assert invoice.document_number == "INV-001"
        assert invoice.id != quote.id
        assert invoice.total == Decimal("138.05")
        assert invoice.amount_due == Decimal("138.05")
        assert invoice.due_date is not None
        assert invoice.valid_until is None
        assert {i.id for i in invoice.items}.isdisjoint({i.id for i in quote.items})

        converted = document_service.get_document(quote.id)
        assert converted.status == DocumentStatus.CONVERTED
        assert document_service.list_quotes() == []
        assert [d.id for d in document_service.list_invoices()] == [invoice.id]

    def test_draft_quote_cannot_be_converted(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        with pytest.raises(ConversionError):
            document_service.convert_to_invoice(quote.id)

    def test_invoice_cannot_be_converted(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        invoice = document_service.create_document(DocumentType.INVOICE, sample_client.id)

        with pytest.raises(ConversionError):
            document_service.convert_to_invoice(invoice.id)

    def test_converted_quote_is_locked(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = _priced_document(document_service, sample_client)
        document_service.change_status(quote.id, DocumentStatus.SENT)
        document_service.convert_to_invoice(quote.id)

        with pytest.raises(DocumentLockedError):
            document_service.add_item(quote.id)

    def test_duplicate_document(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = _priced_document(document_service, sample_client)
        document_service.change_status(quote.id, DocumentStatus.SENT)

        copy = document_service.duplicate_document(quote.id)

        assert copy.document_number == "Q-002"
        assert copy.status == DocumentStatus.DRAFT
        assert copy.subtotal == Decimal("125.50")
        assert len(document_service.list_quotes()) == 2


class TestPayments:
    def test_partial_then_paid(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        invoice = _sent_invoice(document_service, sample_client)

        invoice = document_service.record_payment(
            invoice.id, "100", date(2025, 3, 10), PaymentMethod.CASH, reference="R1"
        )
        assert invoice.status == DocumentStatus.PARTIAL
        assert invoice.amount_paid == Decimal("100")
        assert invoice.amount_due == Decimal("25.50")

        invoice = document_service.record_payment(invoice.id, "25.50")
        assert invoice.status == DocumentStatus.PAID
        assert invoice.amount_due == Decimal("0")

        stored = document_service.get_document(invoice.id)
        assert len(stored.payments) == 2
        assert stored.payments[0].method == PaymentMethod.CASH

    def test_paid_invoice_is_locked(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        invoice = _sent_invoice(document_service, sample_client)
        document_service.record_payment(invoice.id, "125.50")

        with pytest.raises(DocumentLockedError):
            document_service.record_payment(invoice.id, "1")
        with pytest.raises(DocumentLockedError):
            document_service.update_item(
                invoice.id, invoice.items[0].id, "quantity", "3"
            )

    def test_quote_rejects_payment(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        with pytest.raises(DocumentError) as exc_info:
            document_service.record_payment(quote.id, "10")

        assert exc_info.value.error_code == "PAYMENT_NOT_ALLOWED"

    def test_draft_invoice_rejects_payment(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        invoice = _priced_document(document_service, sample_client, DocumentType.INVOICE)

        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            document_service.record_payment(invoice.id, "40")

        assert exc_info.value.context["current_status"] == "DRAFT"
        stored = document_service.get_document(invoice.id)
        assert stored.status == DocumentStatus.DRAFT
        assert stored.payments == []
        assert stored.amount_paid == Decimal("0")

    def test_overdue_invoice_accepts_payment(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        invoice = _sent_invoice(document_service, sample_client)
        document_service.change_status(invoice.id, DocumentStatus.OVERDUE)

        invoice = document_service.record_payment(invoice.id, "125.50")

        assert invoice.status == DocumentStatus.PAID

    def test_zero_payment_rejected(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        invoice = _sent_invoice(document_service, sample_client)

        with pytest.raises(InvalidAmountError):
            document_service.record_payment(invoice.id, "0")


class TestHousekeeping:
    def test_mark_overdue(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        overdue = _sent_invoice(document_service, sample_client)
        draft = document_service.create_document(
            DocumentType.INVOICE, sample_client.id, issue_date=date(2025, 3, 1)
        )

        marked = document_service.mark_overdue(as_of=date(2025, 4, 15))

        assert [d.id for d in marked] == [overdue.id]
        assert document_service.get_document(overdue.id).status == DocumentStatus.OVERDUE
        assert document_service.get_document(draft.id).status == DocumentStatus.DRAFT

    def test_not_overdue_before_due_date(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        _sent_invoice(document_service, sample_client)

        assert document_service.mark_overdue(as_of=date(2025, 3, 31)) == []

    def test_delete_documents_skips_unknown(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        first = document_service.create_document(DocumentType.QUOTE, sample_client.id)
        second = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        deleted = document_service.delete_documents([first.id, second.id, uuid4()])

        assert deleted == 2
        assert document_service.list_quotes() == []

    def test_list_for_client(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        document_service.create_document(DocumentType.QUOTE, sample_client.id)
        document_service.create_document(DocumentType.INVOICE, sample_client.id)

        assert len(document_service.list_for_client(sample_client.id)) == 2


class TestRendering:
    def test_render_returns_pdf(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        document = _priced_document(document_service, sample_client)

        assert document_service.render(document.id).startswith(b"%PDF")
        assert document_service.render(document.id, "modern").startswith(b"%PDF")

    def test_render_context_includes_contact(
        self, document_service: DocumentServiceImpl, sample_client: Client
    ):
        quote = document_service.create_document(DocumentType.QUOTE, sample_client.id)

        context = document_service.build_render_context(quote.id)

        assert context.client.name == "Acme Corp"
        assert context.contact is not None
        assert context.contact.name == "Jane Doe"
        assert context.project is None
