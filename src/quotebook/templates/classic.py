"""Classic template: traditional single-column layout with ruled tables."""

from __future__ import annotations

from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
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


def render_classic(context: RenderContext) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
        title=f"{context.title} {context.document.document_number}",
    )
    styles = build_styles()
    brand = context.brand_color
    elements: list[Flowable] = []

    # Header: business block on the left, title and meta on the right
    left: list[Flowable] = []
    if context.document.business_fields.business_name:
        left.append(
            Paragraph(f"<b>{text(context.profile.business_name)}</b>", styles["Heading2"])
        )
    left.extend(Paragraph(text(line), styles["BodyText"]) for line in business_lines(context))

    right: list[Flowable] = [Paragraph(f"<b>{text(context.title)}</b>", styles["Heading1"])]
    right.extend(
        Paragraph(f"{label}: {text(value)}", styles["Right"])
        for label, value in meta_rows(context)
    )
    right.append(Paragraph(f"Status: {context.document.status.value}", styles["Small"]))

    header = Table([[left, right]], colWidths=[3.5 * inch, 3.2 * inch])
    header.setStyle(
        TableStyle(
            [
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("ALIGN", (1, 0), (1, 0), "RIGHT"),
                ("LINEBELOW", (0, 0), (-1, 0), 1.5, brand),
            ]
        )
    )
    elements.append(header)
    elements.append(Spacer(1, 0.3 * inch))

    bill_to = client_lines(context)
    if bill_to:
        elements.append(Paragraph("<b>Bill To</b>", styles["Heading4"]))
        elements.extend(Paragraph(text(line), styles["BodyText"]) for line in bill_to)
        elements.append(Spacer(1, 0.25 * inch))

    data, with_quantity = item_table_data(context, styles)
    if with_quantity:
        col_widths = [3.4 * inch, 0.7 * inch, 1.3 * inch, 1.3 * inch]
    else:
        col_widths = [5.4 * inch, 1.3 * inch]
    items_table = Table(data, colWidths=col_widths, repeatRows=1)
    items_table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#F3F4F6")),
                ("LINEBELOW", (0, 0), (-1, 0), 1, brand),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#D1D5DB")),
                ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("TOPPADDING", (0, 0), (-1, -1), 5),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
            ]
        )
    )
    elements.append(items_table)
    elements.append(Spacer(1, 0.15 * inch))

    totals = totals_rows(context)
    totals_table = Table(
        [[label, value] for label, value in totals],
        colWidths=[5.4 * inch, 1.3 * inch],
    )
    total_index = next(i for i, (label, _) in enumerate(totals) if label == "Total")
    totals_table.setStyle(
        TableStyle(
            [
                ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
                ("FONTNAME", (0, total_index), (-1, total_index), "Helvetica-Bold"),
                ("LINEABOVE", (0, total_index), (-1, total_index), 1, brand),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("TOPPADDING", (0, 0), (-1, -1), 3),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
            ]
        )
    )
    elements.append(totals_table)

    for heading, body in footer_sections(context):
        elements.append(Spacer(1, 0.25 * inch))
        elements.append(Paragraph(f"<b>{heading}</b>", styles["Heading4"]))
        elements.append(Paragraph(text(body), styles["BodyText"]))

    doc.build(elements)
    return buffer.getvalue()
