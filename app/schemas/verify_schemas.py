# app/schemas/verify_schemas.py
"""
Document verification schemas
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class VerificationReason(str, Enum):
    NOT_FOUND_OR_NOT_APPROVED = "not_found_or_not_approved"
    CODE_MISMATCH = "code_mismatch"
    MISSING_REFERENCE_TIMESTAMP = "missing_reference_timestamp"
    INFRASTRUCTURE_FAILURE = "infrastructure_failure"
    INVALID_REQUEST = "invalid_request"


VERIFICATION_MESSAGES = {
    None: "Dokumen valid dan asli",
    VerificationReason.NOT_FOUND_OR_NOT_APPROVED: "Nomor surat tidak ditemukan atau belum disetujui",
    VerificationReason.CODE_MISMATCH: "Kode validasi tidak cocok - dokumen mungkin telah diubah atau dipalsukan",
    VerificationReason.MISSING_REFERENCE_TIMESTAMP: "Surat tidak memiliki waktu persetujuan sehingga tidak dapat diverifikasi",
    VerificationReason.INFRASTRUCTURE_FAILURE: "Terjadi kesalahan dalam verifikasi dokumen, silakan coba lagi",
    VerificationReason.INVALID_REQUEST: "Nomor surat dan kode validasi harus diisi",
}


# Letter record as seen by the verification protocol
class VerifiableLetter(BaseModel):
    id: str
    letter_number: str
    status: str
    activity: Optional[str] = None
    location: Optional[str] = None
    date: Optional[str] = None
    letter_type: Optional[str] = None
    participant_count: int = 0
    creator_name: Optional[str] = None
    approver_name: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


# Fields disclosed to a successful verifier
class LetterDisclosure(BaseModel):
    letterNumber: str
    activity: Optional[str] = None
    location: Optional[str] = None
    date: Optional[str] = None
    letterType: Optional[str] = None
    status: str
    participantCount: int
    createdBy: Optional[str] = None
    approvedBy: Optional[str] = None
    approvedAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None


class VerificationResult(BaseModel):
    valid: bool
    reason: Optional[VerificationReason] = None
    disclosure: Optional[LetterDisclosure] = None

    @property
    def message(self) -> str:
        return VERIFICATION_MESSAGES[self.reason]


class VerifyDocumentRequest(BaseModel):
    letterNumber: Optional[str] = None
    validationCode: Optional[str] = None


class VerifyDocumentResponse(BaseModel):
    valid: bool
    message: str
    reason: Optional[VerificationReason] = None
    letterInfo: Optional[LetterDisclosure] = None
