from datetime import date, datetime

import pytest

from app.config import settings
from app.models import PermissionLetter, PermissionParticipant
from app.services.document_service import (
    DocumentRenderError,
    LetterNotApprovedError,
    document_service,
    format_date_indonesia,
    format_date_range,
    generate_qr_png,
    letter_type_title,
    signature_date_line,
)
from app.utils.validation_code import derive_code
from app.utils.verify_payload import decode_payload


def make_letter(**overrides) -> PermissionLetter:
    data = dict(
        LETTER_ID="L1",
        LETTER_NUMBER="001/IZIN/03/2024",
        DATE=date(2024, 3, 4),
        TIME_START="07:00",
        TIME_END="15:00",
        LOCATION="GOR Pajajaran",
        ACTIVITY="Lomba Futsal Antar Sekolah",
        LETTER_TYPE="lomba",
        STATUS="approved",
        APPROVED_AT=datetime(2024, 3, 1, 10, 0),
        CREATED_AT=datetime(2024, 2, 28, 9, 0),
    )
    data.update(overrides)
    letter = PermissionLetter(**data)
    letter.participants = [
        PermissionParticipant(PARTICIPANT_ID="P1", NAME="Andi Pratama", CLASS_NAME="XI RPL 1", POSITION=0),
        PermissionParticipant(PARTICIPANT_ID="P2", NAME="Budi Santoso", CLASS_NAME="XI TKJ 2", REASON="Kapten", POSITION=1),
    ]
    return letter


def test_indonesian_dates():
    assert format_date_indonesia(date(2024, 3, 4)) == "Senin, 4 Maret 2024"
    assert format_date_range(date(2024, 3, 4)) == "Senin, 4 Maret 2024 (1 hari)"
    assert format_date_range(date(2024, 3, 4), date(2024, 3, 6)) == "4 s.d 6 Maret 2024 (3 hari)"
    assert format_date_range(date(2024, 3, 30), date(2024, 4, 1)) == (
        "Sabtu, 30 Maret 2024 s.d Senin, 1 April 2024 (3 hari)"
    )


def test_letter_type_titles():
    assert letter_type_title("surat_tugas") == "TUGAS"
    assert letter_type_title("lomba") == "IZIN LOMBA"
    assert letter_type_title("lainnya") == "LAINNYA"
    assert letter_type_title(None) == ""


def test_qr_png():
    assert generate_qr_png("http://test/api/verify/001%2FIZIN%2F03%2F2024-ABC").startswith(b"\x89PNG")


def test_signature_date_follows_utc_clock(monkeypatch):
    monkeypatch.setattr(settings, "school_city", "Bogor")
    monkeypatch.setattr("app.services.document_service.utc_now", lambda: datetime(2024, 3, 4, 23, 59, 59))

    assert signature_date_line() == "Bogor, Senin, 4 Maret 2024"


def test_issue_validation_uses_approval_time():
    code, url = document_service.issue_validation(make_letter(), "http://test/api/")

    assert code == derive_code("L1", datetime(2024, 3, 1, 10, 0), settings.hmac_secret)
    assert url.startswith("http://test/api/verify/001%2FIZIN%2F03%2F2024-")
    decoded = decode_payload(url.rsplit("/verify/", 1)[1])
    assert decoded.letter_number == "001/IZIN/03/2024"
    assert decoded.code == code


def test_issue_validation_prefers_public_base_url(monkeypatch):
    monkeypatch.setattr(settings, "public_base_url", "https://surat.smkpesat.sch.id")

    _, url = document_service.issue_validation(make_letter(), "http://internal:8000/api")

    assert url.startswith("https://surat.smkpesat.sch.id/verify/")


def test_pending_letter_is_not_issued():
    with pytest.raises(LetterNotApprovedError):
        document_service.issue_validation(make_letter(STATUS="pending"), "http://test/api")


def test_letter_without_timestamps_is_not_issued():
    with pytest.raises(DocumentRenderError):
        document_service.issue_validation(make_letter(APPROVED_AT=None, CREATED_AT=None), "http://test/api")


def test_render_letter_pdf():
    letter = make_letter()

    pdf_bytes = document_service.render_letter_pdf(letter, "1234567890ABCDEF", "http://test/api/verify/x-1234567890ABCDEF")

    assert pdf_bytes.startswith(b"%PDF")
    assert pdf_bytes.rstrip().endswith(b"%%EOF")


def test_render_many_participants_spans_pages():
    letter = make_letter()
    letter.participants = [
        PermissionParticipant(PARTICIPANT_ID=f"P{i}", NAME=f"Siswa {i}", CLASS_NAME="XII RPL 1", POSITION=i)
        for i in range(60)
    ]

    pdf_bytes = document_service.render_letter_pdf(letter, "1234567890ABCDEF", "http://test/api/verify/x-1")
    single = document_service.render_letter_pdf(make_letter(), "1234567890ABCDEF", "http://test/api/verify/x-1")

    assert pdf_bytes.startswith(b"%PDF")
    assert len(pdf_bytes) > len(single)
