"""Modern template: brand-colored banner with card-style summary blocks."""

from __future__ import annotations

from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import (
    Flowable,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from quotebook.templates.base import (
    RenderContext,
    build_styles,
    business_lines,
    client_lines,
    footer_sections,
    item_table_data,
    meta_rows,
    text,
    totals_rows,
)

CARD_BACKGROUND = colors.HexColor("#F8FAFC")
CARD_BORDER = colors.HexColor("#E2E8F0")


def render_modern(context: RenderContext) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=0.6 * inch,
        rightMargin=0.6 * inch,
        topMargin=0.5 * inch,
        bottomMargin=0.6 * inch,
        title=f"{context.title} {context.document.document_number}",
    )
    styles = build_styles()
    brand = context.brand_color
    on_brand = ParagraphStyle("OnBrand", parent=styles["BodyText"], textColor=colors.white)
    on_brand_right = ParagraphStyle("OnBrandRight", parent=on_brand, alignment=2)
    on_brand_title = ParagraphStyle(
        "OnBrandTitle",
        parent=styles["Heading1"],
        textColor=colors.white,
        alignment=2,
    )
    elements: list[Flowable] = []

    banner_left: list[Flowable] = []
    if context.document.business_fields.business_name:
        banner_left.append(
            Paragraph(f"<b>{text(context.profile.business_name)}</b>", on_brand)
        )
    banner_left.extend(Paragraph(text(line), on_brand) for line in business_lines(context))
    banner_right = [
        Paragraph(text(context.title), on_brand_title),
        Paragraph(text(context.document.document_number), on_brand_right),
    ]
    banner = Table([[banner_left, banner_right]], colWidths=[3.9 * inch, 3.1 * inch])
    banner.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), brand),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("LEFTPADDING", (0, 0), (-1, -1), 14),
                ("RIGHTPADDING", (0, 0), (-1, -1), 14),
                ("TOPPADDING", (0, 0), (-1, -1), 14),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 14),
            ]
        )
    )
    elements.append(banner)
    elements.append(Spacer(1, 0.25 * inch))

    # Two cards: bill-to and document details
    bill_to: list[Flowable] = [Paragraph("<b>BILLED TO</b>", styles["Small"])]
    bill_to.extend(Paragraph(text(line), styles["BodyText"]) for line in client_lines(context))
    details: list[Flowable] = [Paragraph("<b>DETAILS</b>", styles["Small"])]
    details.extend(
        Paragraph(f"{label}: <b>{text(value)}</b>", styles["BodyText"])
        for label, value in meta_rows(context)
    )
    cards = Table([[bill_to, details]], colWidths=[3.5 * inch, 3.5 * inch])
    cards.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), CARD_BACKGROUND),
                ("BOX", (0, 0), (0, 0), 0.75, CARD_BORDER),
                ("BOX", (1, 0), (1, 0), 0.75, CARD_BORDER),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("LEFTPADDING", (0, 0), (-1, -1), 10),
                ("TOPPADDING", (0, 0), (-1, -1), 8),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
            ]
        )
    )
    elements.append(cards)
    elements.append(Spacer(1, 0.3 * inch))

    data, with_quantity = item_table_data(context, styles)
    if with_quantity:
        col_widths = [3.7 * inch, 0.7 * inch, 1.3 * inch, 1.3 * inch]
    else:
        col_widths = [5.7 * inch, 1.3 * inch]
    items_table = Table(data, colWidths=col_widths, repeatRows=1)
    items_table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("BACKGROUND", (0, 0), (-1, 0), brand),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, CARD_BACKGROUND]),
                ("LINEBELOW", (0, 1), (-1, -1), 0.25, CARD_BORDER),
                ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("TOPPADDING", (0, 0), (-1, -1), 6),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    elements.append(items_table)
    elements.append(Spacer(1, 0.2 * inch))

    totals = totals_rows(context)
    summary = Table(
        [[label, value] for label, value in totals],
        colWidths=[1.6 * inch, 1.4 * inch],
        hAlign="RIGHT",
    )
    summary.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), CARD_BACKGROUND),
                ("BOX", (0, 0), (-1, -1), 0.75, CARD_BORDER),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("TEXTCOLOR", (0, -1), (-1, -1), brand),
                ("LINEABOVE", (0, -1), (-1, -1), 1, brand),
                ("TOPPADDING", (0, 0), (-1, -1), 4),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
            ]
        )
    )
    elements.append(summary)

    for heading, body in footer_sections(context):
        elements.append(Spacer(1, 0.25 * inch))
        elements.append(Paragraph(f"<b>{heading.upper()}</b>", styles["Small"]))
        elements.append(Paragraph(text(body), styles["BodyText"]))

    doc.build(elements)
    return buffer.getvalue()
