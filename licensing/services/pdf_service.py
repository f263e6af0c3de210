import logging
from io import BytesIO
from typing import List, Optional

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, Image
from PIL import Image as PILImage

from licensing.utils.dates import utcnow
from licensing.utils.upload import read_stored
from licensing.workflow.status import DocumentType, POSITION_DISPLAY_NAMES, PositionType, status_display_name

logger = logging.getLogger(__name__)

CORPORATION_INFO = {
    "name": "Pune Municipal Corporation",
    "department": "Building Development Department",
    "address_line1": "PMC Building, Shivajinagar",
    "address_line2": "Pune, Maharashtra 411005",
}

ONES = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine", "Ten",
        "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen", "Seventeen",
        "Eighteen", "Nineteen"]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]


class PDFGenerationError(Exception):
    """Raised when a document cannot be rendered"""
    pass


def amount_in_words(amount: int) -> str:
    """Indian numbering: 3000 -> 'Three Thousand Rupees Only'."""
    if amount == 0:
        return "Zero Rupees Only"

    def below_thousand(n: int) -> str:
        words = []
        if n >= 100:
            words.append(f"{ONES[n // 100]} Hundred")
            n %= 100
        if n >= 20:
            words.append(TENS[n // 10] + (f" {ONES[n % 10]}" if n % 10 else ""))
        elif n:
            words.append(ONES[n])
        return " ".join(words)

    parts = []
    for divisor, label in ((10000000, "Crore"), (100000, "Lakh"), (1000, "Thousand")):
        if amount >= divisor:
            parts.append(f"{below_thousand(amount // divisor)} {label}")
            amount %= divisor
    if amount:
        parts.append(below_thousand(amount))
    return " ".join(parts) + " Rupees Only"


class PDFGenerator:
    """Renders workflow documents with ReportLab and returns the PDF bytes"""

    def __init__(self):
        styles = getSampleStyleSheet()
        self.title_style = ParagraphStyle(
            'TitleStyle',
            parent=styles['Title'],
            fontSize=16,
            textColor=colors.HexColor('#1a237e'),
            alignment=TA_CENTER,
            spaceAfter=12,
            fontName='Helvetica-Bold'
        )
        self.heading_style = ParagraphStyle(
            'Heading',
            parent=styles['Heading2'],
            fontSize=12,
            textColor=colors.HexColor('#283593'),
            spaceBefore=10,
            spaceAfter=6,
            fontName='Helvetica-Bold'
        )
        self.normal_style = ParagraphStyle(
            'NormalStyle',
            parent=styles['Normal'],
            fontSize=10,
            leading=14,
            fontName='Helvetica'
        )

    def _header(self, story: list, title: str):
        story.append(Paragraph(CORPORATION_INFO["name"].upper(), self.title_style))
        story.append(Paragraph(
            f"{CORPORATION_INFO['department']}<br/>{CORPORATION_INFO['address_line1']}, "
            f"{CORPORATION_INFO['address_line2']}",
            self.normal_style
        ))
        story.append(Spacer(1, 12))
        story.append(Paragraph(title, self.heading_style))

    def _table(self, rows: list, widths=(2.2 * inch, 4.3 * inch)) -> Table:
        table = Table(rows, colWidths=list(widths))
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.lightgrey),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('BACKGROUND', (0, 0), (0, -1), colors.HexColor('#e8eaf6')),
        ]))
        return table

    def _profile_picture(self, application) -> Optional[Image]:
        pictures = application.documents_of_type(DocumentType.PROFILE_PICTURE)
        if not pictures:
            return None
        try:
            pil_img = PILImage.open(BytesIO(read_stored(pictures[-1].storage_handle)))
            if pil_img.mode != 'RGB':
                pil_img = pil_img.convert('RGB')
            pil_img.thumbnail((400, 400), PILImage.Resampling.LANCZOS)
            img_bytes = BytesIO()
            pil_img.save(img_bytes, format='JPEG', quality=85)
            img_bytes.seek(0)
            return Image(img_bytes, width=1.2 * inch, height=1.5 * inch)
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Profile picture unusable for application {application.id}: {e}")
            return None

    def _signature_block(self, story: list, signatures: List):
        if not signatures:
            return
        story.append(Paragraph("Digital Signatures", self.heading_style))
        rows = [["Signed by", "Stage", "Signed at", "Comments"]]
        for signature in signatures:
            rows.append([
                signature.signer_role.replace("_", " ").title(),
                status_display_name(signature.stage_status),
                signature.signed_at.strftime("%d/%m/%Y %H:%M"),
                signature.comments or "",
            ])
        table = Table(rows, colWidths=[1.5 * inch, 2.3 * inch, 1.2 * inch, 1.5 * inch])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.lightgrey),
        ]))
        story.append(table)

    def _build(self, story: list) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=A4, rightMargin=54, leftMargin=54,
                                topMargin=54, bottomMargin=54)
        doc.build(story)
        return buffer.getvalue()

    def generate_recommendation_form(self, application, signatures: List) -> bytes:
        """Recommendation Form carried through AE, EE and CE stage-1 signatures."""
        try:
            logger.info(f"Generating Recommendation Form for application {application.id}")
            story = []
            self._header(story, "RECOMMENDATION FORM")

            local = application.get_address("local")
            rows = [
                ["Application No.", application.application_number or "-"],
                ["Position", POSITION_DISPLAY_NAMES[PositionType(application.position_type)]],
                ["Applicant", application.full_name],
                ["PAN", application.pan_number or "-"],
                ["Aadhar", application.aadhar_number or "-"],
                ["Local Address", f"{local.address_line1}, {local.city} {local.pin_code}" if local else "-"],
                ["Qualifications", "; ".join(q.degree_name for q in application.qualifications) or "-"],
                ["Experience (years)", str(round(sum(e.years_of_experience for e in application.experiences), 2))],
            ]
            if application.coa_number:
                rows.append(["COA Number", application.coa_number])

            picture = self._profile_picture(application)
            if picture:
                details = self._table(rows, widths=(1.8 * inch, 3.1 * inch))
                story.append(Table([[details, picture]], colWidths=[5 * inch, 1.5 * inch]))
            else:
                story.append(self._table(rows))

            self._signature_block(story, signatures)
            return self._build(story)
        except PDFGenerationError:
            raise
        except Exception as e:
            logger.error(f"Failed to generate Recommendation Form: {str(e)}")
            raise PDFGenerationError(f"Failed to generate Recommendation Form: {str(e)}")

    def generate_license_certificate(self, application, certificate_number: str, signatures: List) -> bytes:
        try:
            logger.info(f"Generating License Certificate {certificate_number}")
            story = []
            self._header(story, "LICENSE CERTIFICATE")
            position = POSITION_DISPLAY_NAMES[PositionType(application.position_type)]
            story.append(Paragraph(
                f"This is to certify that <b>{application.full_name}</b> is licensed to practise as "
                f"<b>{position}</b> within the limits of the {CORPORATION_INFO['name']}.",
                self.normal_style
            ))
            story.append(Spacer(1, 12))
            story.append(self._table([
                ["Certificate No.", certificate_number],
                ["Application No.", application.application_number or "-"],
                ["Issued On", utcnow().strftime("%d %B, %Y")],
            ]))
            self._signature_block(story, signatures)
            return self._build(story)
        except Exception as e:
            logger.error(f"Failed to generate License Certificate: {str(e)}")
            raise PDFGenerationError(f"Failed to generate License Certificate: {str(e)}")

    def generate_payment_challan(self, application, amount: int, challan_number: str, reference: str) -> bytes:
        try:
            logger.info(f"Generating Payment Challan {challan_number}")
            story = []
            self._header(story, "PAYMENT CHALLAN")
            story.append(self._table([
                ["Challan No.", challan_number],
                ["Application No.", application.application_number or "-"],
                ["Applicant", application.full_name],
                ["Position", POSITION_DISPLAY_NAMES[PositionType(application.position_type)]],
                ["Amount", f"Rs. {amount:,}"],
                ["Amount in Words", amount_in_words(amount)],
                ["Transaction Ref.", reference],
                ["Date", utcnow().strftime("%d/%m/%Y")],
            ]))
            return self._build(story)
        except Exception as e:
            logger.error(f"Failed to generate Payment Challan: {str(e)}")
            raise PDFGenerationError(f"Failed to generate Payment Challan: {str(e)}")


pdf_generator = PDFGenerator()
