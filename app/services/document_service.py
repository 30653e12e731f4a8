"""
Permission letter document rendering

Draws an approved letter as a single A4 PDF with reportlab. The validation
code and a QR code of the verification URL are printed in the signature
block so the document can be checked later.
"""

from datetime import date
from io import BytesIO
from typing import List, Optional, Tuple

import qrcode
from qrcode.constants import ERROR_CORRECT_M
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from app.config import settings
from app.models import PermissionLetter, utc_now
from app.utils.logger import logger
from app.utils.timestamp_policy import select_reference_timestamp
from app.utils.validation_code import derive_code
from app.utils.verify_payload import build_verification_url

DAYS_ID = ['Senin', 'Selasa', 'Rabu', 'Kamis', 'Jumat', 'Sabtu', 'Minggu']
MONTHS_ID = ['Januari', 'Februari', 'Maret', 'April', 'Mei', 'Juni', 'Juli',
             'Agustus', 'September', 'Oktober', 'November', 'Desember']

LETTER_TYPE_TITLES = {
    'dispensasi': 'DISPENSASI',
    'keterangan': 'KETERANGAN',
    'surat_tugas': 'TUGAS',
    'lomba': 'IZIN LOMBA',
}

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 18 * mm
TABLE_COLUMNS = [(10 * mm, "No"), (70 * mm, "Nama Siswa"), (45 * mm, "Kelas/Jabatan"), (49 * mm, "Keterangan")]
ROW_HEIGHT = 7 * mm
QR_SIZE = 32 * mm


class LetterNotApprovedError(Exception):
    pass


class DocumentRenderError(Exception):
    pass


def letter_type_title(letter_type: Optional[str]) -> str:
    return LETTER_TYPE_TITLES.get(letter_type or '', (letter_type or '').upper())


def format_date_indonesia(value: date) -> str:
    """Senin, 4 Maret 2024"""
    return f"{DAYS_ID[value.weekday()]}, {value.day} {MONTHS_ID[value.month - 1]} {value.year}"


def format_date_range(start: date, end: Optional[date] = None) -> str:
    end = end or start
    days = abs((end - start).days) + 1
    if start == end:
        return f"{format_date_indonesia(start)} (1 hari)"
    if start.month == end.month and start.year == end.year:
        return f"{start.day} s.d {end.day} {MONTHS_ID[end.month - 1]} {end.year} ({days} hari)"
    return f"{format_date_indonesia(start)} s.d {format_date_indonesia(end)} ({days} hari)"


def generate_qr_png(data: str) -> Optional[bytes]:
    """PNG bytes of a QR code, None if it could not be built."""
    try:
        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECT_M,
            box_size=10,
            border=1,
        )
        qr.add_data(data)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buffered = BytesIO()
        img.save(buffered, format="PNG")
        return buffered.getvalue()
    except Exception as e:
        logger.warning(f" QR code generation failed: {e}")
        return None


def _safe_text(value) -> str:
    # Standard PDF fonts only cover Latin-1
    return str(value if value is not None else '').encode('latin-1', 'replace').decode('latin-1')


def signature_date_line() -> str:
    """Place and date above the signature, on the same UTC clock as approvals."""
    return f"{settings.school_city}, {format_date_indonesia(utc_now().date())}"


def _truncate(c: canvas.Canvas, text: str, font: str, size: int, width: float) -> str:
    text = _safe_text(text)
    if c.stringWidth(text, font, size) <= width:
        return text
    while text and c.stringWidth(text + "...", font, size) > width:
        text = text[:-1]
    return text + "..."


class DocumentService:
    def issue_validation(self, letter: PermissionLetter, base_url: str) -> Tuple[str, str]:
        """Validation code and verification URL for an approved letter."""
        if letter.STATUS != "approved":
            raise LetterNotApprovedError(letter.LETTER_ID)

        reference = select_reference_timestamp(letter)
        if reference.is_fallback:
            raise DocumentRenderError(f"Letter {letter.LETTER_NUMBER} has no approval time")

        code = derive_code(letter.LETTER_ID, reference.value, settings.hmac_secret)
        url = build_verification_url(settings.public_base_url or base_url, letter.LETTER_NUMBER, code)
        return code, url

    def build_letter_pdf(self, letter: PermissionLetter, base_url: str) -> Tuple[bytes, str]:
        """Render the letter and return (pdf bytes, attachment filename)."""
        code, url = self.issue_validation(letter, base_url)
        pdf_bytes = self.render_letter_pdf(letter, code, url)
        logger.info(f" PDF generated: {letter.LETTER_NUMBER} ({len(pdf_bytes)} bytes)")
        return pdf_bytes, f"surat-{letter.LETTER_NUMBER}.pdf"

    def render_letter_pdf(self, letter: PermissionLetter, validation_code: str, verification_url: str) -> bytes:
        pdf_buffer = BytesIO()
        c = canvas.Canvas(pdf_buffer, pagesize=A4)
        c.setTitle(f"Surat {letter_type_title(letter.LETTER_TYPE)} {letter.LETTER_NUMBER}")

        y = self._draw_header(c)
        y = self._draw_title(c, letter, y)

        c.setFont("Times-Roman", 12)
        c.drawString(MARGIN, y, _safe_text(
            f"Yang bertanda tangan di bawah ini, Kepala {settings.school_name} menerangkan bahwa:"
        ))
        y -= 8 * mm

        y = self._draw_participants(c, letter.participants, y)
        y = self._draw_details(c, letter, y)

        if y < 75 * mm:
            c.showPage()
            y = PAGE_HEIGHT - MARGIN
        self._draw_signature(c, validation_code, verification_url, y)

        c.showPage()
        c.save()
        return pdf_buffer.getvalue()

    def _draw_header(self, c: canvas.Canvas) -> float:
        center = PAGE_WIDTH / 2
        y = PAGE_HEIGHT - MARGIN

        c.setFont("Times-Bold", 13)
        c.drawCentredString(center, y, _safe_text(settings.school_foundation))
        y -= 8 * mm
        c.setFont("Times-Bold", 20)
        c.drawCentredString(center, y, _safe_text(settings.school_name))
        y -= 6 * mm
        c.setFont("Times-Bold", 11)
        c.drawCentredString(center, y, _safe_text(settings.school_accreditation))
        y -= 5 * mm
        c.setFont("Times-Roman", 9)
        c.drawCentredString(center, y, _safe_text(settings.school_address))
        y -= 4 * mm
        c.drawCentredString(center, y, _safe_text(settings.school_contact))
        c.setFont("Times-Bold", 9)
        c.drawRightString(PAGE_WIDTH - MARGIN, y - 3 * mm, _safe_text(f"NPSN : {settings.school_npsn}"))

        y -= 5 * mm
        c.setLineWidth(2)
        c.line(MARGIN, y, PAGE_WIDTH - MARGIN, y)
        c.setLineWidth(1)
        return y - 10 * mm

    def _draw_title(self, c: canvas.Canvas, letter: PermissionLetter, y: float) -> float:
        center = PAGE_WIDTH / 2
        title = _safe_text(f"SURAT {letter_type_title(letter.LETTER_TYPE)}")

        c.setFont("Times-Bold", 14)
        c.drawCentredString(center, y, title)
        title_width = c.stringWidth(title, "Times-Bold", 14)
        c.line(center - title_width / 2, y - 1.5, center + title_width / 2, y - 1.5)
        y -= 6 * mm

        c.setFont("Times-Roman", 12)
        c.drawCentredString(center, y, _safe_text(f"Nomor: {letter.LETTER_NUMBER}"))
        return y - 12 * mm

    def _draw_table_header(self, c: canvas.Canvas, y: float) -> float:
        x = MARGIN
        c.setFont("Times-Bold", 11)
        for width, label in TABLE_COLUMNS:
            c.rect(x, y - ROW_HEIGHT, width, ROW_HEIGHT)
            c.drawCentredString(x + width / 2, y - ROW_HEIGHT + 2 * mm, label)
            x += width
        return y - ROW_HEIGHT

    def _draw_participants(self, c: canvas.Canvas, participants: List, y: float) -> float:
        table_width = sum(width for width, _ in TABLE_COLUMNS)
        y = self._draw_table_header(c, y)

        for index, participant in enumerate(participants, start=1):
            if y - ROW_HEIGHT < MARGIN:
                c.showPage()
                y = self._draw_table_header(c, PAGE_HEIGHT - MARGIN)

            cells = [str(index), participant.NAME, participant.CLASS_NAME, participant.REASON or '-']
            x = MARGIN
            c.setFont("Times-Roman", 11)
            for (width, _), cell in zip(TABLE_COLUMNS, cells):
                c.rect(x, y - ROW_HEIGHT, width, ROW_HEIGHT)
                c.drawString(x + 1.5 * mm, y - ROW_HEIGHT + 2 * mm,
                             _truncate(c, cell, "Times-Roman", 11, width - 3 * mm))
                x += width
            y -= ROW_HEIGHT

        c.setFont("Times-Bold", 11)
        c.rect(MARGIN, y - ROW_HEIGHT, table_width, ROW_HEIGHT)
        c.drawCentredString(MARGIN + table_width / 2, y - ROW_HEIGHT + 2 * mm,
                            f"Total Peserta: {len(participants)}")
        return y - ROW_HEIGHT - 8 * mm

    def _draw_details(self, c: canvas.Canvas, letter: PermissionLetter, y: float) -> float:
        if y < 60 * mm:
            c.showPage()
            y = PAGE_HEIGHT - MARGIN

        time_text = f"{letter.TIME_START} - {letter.TIME_END}" if letter.TIME_START and letter.TIME_END else "Sesuai jadwal"
        rows = [
            ("Kegiatan", letter.ACTIVITY),
            ("Tanggal", format_date_range(letter.DATE)),
            ("Tempat", letter.LOCATION),
            ("Waktu", time_text),
        ]

        c.setFont("Times-Roman", 12)
        for label, value in rows:
            c.drawString(MARGIN, y, label)
            c.drawString(MARGIN + 25 * mm, y, ":")
            c.drawString(MARGIN + 30 * mm, y, _safe_text(value))
            y -= 6 * mm

        y -= 4 * mm
        c.drawString(MARGIN, y, _safe_text(
            f"Demikian surat {letter_type_title(letter.LETTER_TYPE).lower()} ini dibuat "
            f"untuk dapat dipergunakan sebagaimana mestinya."
        ))
        return y - 12 * mm

    def _draw_signature(self, c: canvas.Canvas, validation_code: str, verification_url: str, y: float) -> None:
        center = PAGE_WIDTH - MARGIN - 35 * mm

        c.setFont("Times-Roman", 12)
        c.drawCentredString(center, y, _safe_text(signature_date_line()))
        y -= 4 * mm

        qr_png = generate_qr_png(verification_url)
        if qr_png:
            c.drawImage(ImageReader(BytesIO(qr_png)), center - QR_SIZE / 2, y - QR_SIZE,
                        width=QR_SIZE, height=QR_SIZE, preserveAspectRatio=True, mask='auto')
        y -= QR_SIZE + 4 * mm

        c.setFont("Courier-Bold", 10)
        c.drawCentredString(center, y, validation_code)
        y -= 4 * mm
        c.setFont("Helvetica", 7)
        c.setFillGray(0.4)
        c.drawCentredString(center, y, "Kode Validasi Dokumen")
        c.setFillGray(0)


document_service = DocumentService()
