"""PDF certificate layout for an issued permit."""

import io
from datetime import datetime
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from permitdesk.core.modules.permit.models import CertificateData
from permitdesk.errors import RenderError
from permitdesk.utils import now

PAGE_SIZE = A4
PAGE_MARGIN = 50

DOCUMENT_TITLE = "Nepal Protected Areas Permit"
DOCUMENT_SUBTITLE = "Official Travel Authorization"
DOCUMENT_AUTHOR = "Nepal Protected Areas Permit System"

BOX_FILL = colors.HexColor("#f0f9ff")
BOX_BORDER = colors.HexColor("#0284c7")

NOT_PROVIDED = "Not provided"
DEFAULT_PURPOSE = "Tourism"
DEFAULT_DURATION = "7"

TERMS = (
    "1. This permit must be presented along with a valid ID document when entering protected areas.",
    "2. The permit holder must comply with all local regulations and guidelines within protected areas.",
    "3. This permit is non-transferable and valid only for the dates specified.",
    "4. The permit holder is responsible for their own safety and should follow ranger instructions at all times.",
)

DISCLAIMER = "This is an electronically generated document and does not require a signature."
VERIFICATION_LABEL = "QR Verification Code"
VERIFICATION_BOX_SIZE = 100


def render_permit_pdf(data: CertificateData, generated_at: datetime | None = None) -> bytes:
    """Render a permit certificate as PDF bytes.

    Content flows onto further pages if it does not fit on one.

    Raises:
        RenderError: If reportlab fails to build the document
    """
    buffer = io.BytesIO()
    try:
        doc = SimpleDocTemplate(
            buffer,
            pagesize=PAGE_SIZE,
            leftMargin=PAGE_MARGIN,
            rightMargin=PAGE_MARGIN,
            topMargin=PAGE_MARGIN,
            bottomMargin=PAGE_MARGIN,
            title=f"{DOCUMENT_TITLE} - {data.confirmation_id}",
            author=DOCUMENT_AUTHOR,
        )
        styles = _styles()
        story: list[Any] = []
        story += _title_block(styles)
        story += _confirmation_box(data, styles, doc.width)
        story += _applicant_section(data, styles)
        story += _visit_section(data, styles)
        story += _terms_section(styles)
        story += _footer(styles, generated_at or now(), doc.width)
        doc.build(story)
    except Exception as e:
        raise RenderError from e
    return buffer.getvalue()


def format_date(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "Title": ParagraphStyle(
            "PermitTitle", parent=base["Title"], fontName="Helvetica-Bold", fontSize=20, leading=24, alignment=TA_CENTER
        ),
        "Subtitle": ParagraphStyle(
            "PermitSubtitle", parent=base["Normal"], fontName="Helvetica", fontSize=14, leading=18, alignment=TA_CENTER
        ),
        "Heading": ParagraphStyle(
            "PermitHeading", parent=base["Heading2"], fontName="Helvetica-Bold", fontSize=16, leading=20, spaceAfter=10
        ),
        "SubHeading": ParagraphStyle(
            "PermitSubHeading", parent=base["Heading3"], fontName="Helvetica-Bold", fontSize=14, leading=18, spaceAfter=10
        ),
        "Body": ParagraphStyle(
            "PermitBody", parent=base["Normal"], fontName="Helvetica", fontSize=12, leading=15, spaceAfter=6
        ),
        "Small": ParagraphStyle(
            "PermitSmall", parent=base["Normal"], fontName="Helvetica", fontSize=10, leading=13, alignment=TA_LEFT
        ),
        "Footer": ParagraphStyle(
            "PermitFooter", parent=base["Normal"], fontName="Helvetica", fontSize=10, leading=13, alignment=TA_CENTER
        ),
        "FooterItalic": ParagraphStyle(
            "PermitFooterItalic",
            parent=base["Normal"],
            fontName="Helvetica-Oblique",
            fontSize=10,
            leading=13,
            alignment=TA_CENTER,
        ),
        "Caption": ParagraphStyle(
            "PermitCaption", parent=base["Normal"], fontName="Helvetica", fontSize=8, leading=10, alignment=TA_CENTER
        ),
    }


def _field(label: str, value: str, style: ParagraphStyle) -> Paragraph:
    return Paragraph(f"<b>{escape(label)}:</b> {escape(value)}", style)


def _title_block(styles: dict[str, ParagraphStyle]) -> list[Any]:
    return [
        Paragraph(DOCUMENT_TITLE, styles["Title"]),
        Paragraph(DOCUMENT_SUBTITLE, styles["Subtitle"]),
        Spacer(1, 36),
    ]


def _confirmation_box(data: CertificateData, styles: dict[str, ParagraphStyle], width: float) -> list[Any]:
    rows = [
        [Paragraph("<b>Confirmation Number:</b>", styles["Body"]), Paragraph(escape(data.confirmation_id), styles["Body"])],
        [Paragraph("<b>Valid From:</b>", styles["Body"]), Paragraph(format_date(data.valid_from), styles["Body"])],
        [Paragraph("<b>Valid Until:</b>", styles["Body"]), Paragraph(format_date(data.valid_until), styles["Body"])],
    ]
    table = Table(rows, colWidths=[150, width - 150])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), BOX_FILL),
                ("BOX", (0, 0), (-1, -1), 1, BOX_BORDER),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("LEFTPADDING", (0, 0), (-1, -1), 20),
                ("TOPPADDING", (0, 0), (-1, 0), 12),
                ("BOTTOMPADDING", (0, -1), (-1, -1), 12),
            ]
        )
    )
    return [table, Spacer(1, 30)]


def _applicant_section(data: CertificateData, styles: dict[str, ParagraphStyle]) -> list[Any]:
    fields = [
        ("Name", f"{data.first_name} {data.last_name}"),
        ("Email", data.email),
        ("Phone", data.phone or NOT_PROVIDED),
        ("Country", data.country),
        ("Address", data.address or NOT_PROVIDED),
    ]
    elements: list[Any] = [Paragraph("<u>Applicant Information</u>", styles["Heading"])]
    elements += [_field(label, value, styles["Body"]) for label, value in fields]
    elements.append(Spacer(1, 12))
    return elements


def _visit_section(data: CertificateData, styles: dict[str, ParagraphStyle]) -> list[Any]:
    return [
        Paragraph("<u>Visit Details</u>", styles["Heading"]),
        Paragraph("<b>Purpose of Visit:</b>", styles["Body"]),
        Paragraph(escape(data.visit_purpose or DEFAULT_PURPOSE), styles["Body"]),
        _field("Duration", f"{data.visit_duration or DEFAULT_DURATION} days", styles["Body"]),
        Spacer(1, 24),
    ]


def _terms_section(styles: dict[str, ParagraphStyle]) -> list[Any]:
    elements: list[Any] = [Paragraph("<u>Terms and Conditions</u>", styles["SubHeading"])]
    elements += [Paragraph(term, styles["Small"]) for term in TERMS]
    elements.append(Spacer(1, 24))
    return elements


def _footer(styles: dict[str, ParagraphStyle], generated_at: datetime, width: float) -> list[Any]:
    # Placeholder only; no verification code is embedded yet
    placeholder = Table([[""]], colWidths=[VERIFICATION_BOX_SIZE], rowHeights=[VERIFICATION_BOX_SIZE])
    placeholder.setStyle(TableStyle([("BOX", (0, 0), (-1, -1), 1, colors.black)]))

    text = [
        Paragraph(DISCLAIMER, styles["FooterItalic"]),
        Spacer(1, 6),
        Paragraph(f"Generated on: {generated_at.strftime('%Y-%m-%d %H:%M UTC')}", styles["Footer"]),
    ]
    verification = [placeholder, Spacer(1, 4), Paragraph(VERIFICATION_LABEL, styles["Caption"])]

    footer = Table([[text, verification]], colWidths=[width - VERIFICATION_BOX_SIZE - 10, VERIFICATION_BOX_SIZE + 10])
    footer.setStyle(
        TableStyle(
            [
                ("VALIGN", (0, 0), (0, 0), "MIDDLE"),
                ("VALIGN", (1, 0), (1, 0), "TOP"),
                ("LEFTPADDING", (0, 0), (-1, -1), 0),
                ("RIGHTPADDING", (0, 0), (-1, -1), 0),
            ]
        )
    )
    return [footer]
