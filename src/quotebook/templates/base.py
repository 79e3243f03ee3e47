"""Shared building blocks for PDF document templates."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.styles import ParagraphStyle, StyleSheet1, getSampleStyleSheet
from reportlab.platypus import Paragraph

from quotebook.domain.clients import Client, Contact, Project
from quotebook.domain.currency_format import format_currency
from quotebook.domain.documents import Document
from quotebook.domain.settings import BusinessProfile, UserSettings
from quotebook.domain.value_objects import ZERO


@dataclass(frozen=True)
class RenderContext:
    """Everything a template needs to draw one document."""

    document: Document
    client: Client
    profile: BusinessProfile
    settings: UserSettings
    contact: Contact | None = None
    project: Project | None = None

    def money(self, amount: Decimal) -> str:
        return format_currency(
            amount,
            self.document.currency,
            self.settings.currency_display_format,
        )

    @property
    def title(self) -> str:
        return self.settings.title_for(self.document.document_type)

    @property
    def brand_color(self) -> colors.Color:
        return colors.HexColor(self.profile.brand_color or "#000000")


def text(value: str) -> str:
    """Escape user text for reportlab paragraph markup, keeping line breaks."""
    return escape(value).replace("\n", "<br/>")


def build_styles() -> StyleSheet1:
    styles = getSampleStyleSheet()
    body = styles["BodyText"]
    body.fontName = "Helvetica"
    body.fontSize = 10
    body.leading = 13
    styles.add(
        ParagraphStyle(
            "Small",
            parent=body,
            fontSize=8.5,
            leading=11,
            textColor=colors.grey,
        )
    )
    styles.add(
        ParagraphStyle(
            "Right",
            parent=body,
            alignment=2,
        )
    )
    return styles


def business_lines(context: RenderContext) -> list[str]:
    """Business profile lines, filtered by the document's visibility flags."""
    profile = context.profile
    visible = context.document.business_fields
    lines: list[str] = []
    if visible.personal_name and profile.personal_name:
        lines.append(profile.personal_name)
    if visible.address:
        lines.extend(profile.address_lines)
    if visible.email and profile.email:
        lines.append(profile.email)
    if visible.phone and profile.phone:
        lines.append(profile.phone)
    if visible.website and profile.website:
        lines.append(profile.website)
    if visible.tax_id and profile.tax_id:
        lines.append(f"Tax ID: {profile.tax_id}")
    return lines


def client_lines(context: RenderContext) -> list[str]:
    """Bill-to lines, filtered by the document's client visibility flags."""
    client = context.client
    visible = context.document.client_fields
    lines: list[str] = []
    if visible.name:
        lines.append(client.name)
    if visible.contact and context.contact is not None:
        lines.append(f"Attn: {context.contact.name}")
    if visible.address:
        lines.extend(client.address_lines)
    if visible.email:
        email = context.contact.email if context.contact else None
        email = email or client.email
        if email:
            lines.append(email)
    return lines


def meta_rows(context: RenderContext) -> list[tuple[str, str]]:
    document = context.document
    rows = [
        ("Number", document.document_number),
        ("Issue date", document.issue_date.isoformat()),
    ]
    if document.is_quote and document.valid_until:
        rows.append(("Valid until", document.valid_until.isoformat()))
    if document.is_invoice and document.due_date:
        rows.append(("Due date", document.due_date.isoformat()))
    if context.project is not None:
        rows.append(("Project", context.project.title))
    return rows


def plain_number(value: Decimal) -> str:
    """Render a decimal without trailing zeros or exponent notation."""
    return f"{value.normalize():f}"


def shows_quantity(document: Document) -> bool:
    return any(item.has_quantity_column for item in document.items)


def item_table_data(
    context: RenderContext, styles: StyleSheet1
) -> tuple[list[list[object]], bool]:
    """Header plus one row per item; the bool tells whether qty columns are drawn."""
    document = context.document
    with_quantity = shows_quantity(document)
    if with_quantity:
        data: list[list[object]] = [["Description", "Qty", "Unit price", "Amount"]]
    else:
        data = [["Description", "Amount"]]

    for item in sorted(document.items, key=lambda i: i.order):
        description = Paragraph(text(item.description), styles["BodyText"])
        if with_quantity:
            if item.has_quantity_column:
                qty = plain_number(item.quantity)
                price = context.money(item.unit_price)
            else:
                qty, price = "", ""
            data.append([description, qty, price, context.money(item.amount)])
        else:
            data.append([description, context.money(item.amount)])
    return data, with_quantity


def totals_rows(context: RenderContext) -> list[tuple[str, str]]:
    """Summary lines honoring the document's tax and discount display flags."""
    document = context.document
    rows = [("Subtotal", context.money(document.subtotal))]
    if document.show_tax:
        rate = plain_number(document.tax_rate)
        rows.append(
            (f"{context.settings.tax_name} ({rate}%)", context.money(document.tax_amount))
        )
    if document.show_discount and document.discount_amount != ZERO:
        rows.append(("Discount", f"-{context.money(document.discount_amount)}"))
    rows.append(("Total", context.money(document.total)))
    if document.is_invoice:
        if document.amount_paid != ZERO:
            rows.append(("Paid", context.money(document.amount_paid)))
        rows.append(("Amount due", context.money(document.amount_due)))
    return rows


def bank_lines(context: RenderContext) -> list[str]:
    settings = context.settings
    if not (context.document.is_invoice and settings.show_bank_details):
        return []
    fields = [
        ("Bank", settings.bank_name),
        ("Account name", settings.account_name),
        ("Account number", settings.account_number),
        ("Routing number", settings.routing_number),
        ("IBAN", settings.iban),
        ("SWIFT", settings.swift_code),
    ]
    return [f"{label}: {value}" for label, value in fields if value]


def footer_sections(context: RenderContext) -> list[tuple[str, str]]:
    document = context.document
    sections: list[tuple[str, str]] = []
    if document.show_notes and document.notes:
        sections.append(("Notes", document.notes))
    if document.show_terms and document.terms:
        sections.append(("Terms", document.terms))
    bank = bank_lines(context)
    if bank:
        sections.append(("Payment details", "\n".join(bank)))
    return sections
