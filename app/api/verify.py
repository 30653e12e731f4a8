# app/api/verify.py
"""
Public document verification API
"""

from functools import partial

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models import get_async_session
from app.schemas.verify_schemas import (
    VerificationReason,
    VerificationResult,
    VerifyDocumentRequest,
    VerifyDocumentResponse,
)
from app.services.letter_service import letter_service
from app.services.verification_service import VerificationService
from app.utils.verify_payload import decode_payload

router = APIRouter(tags=["verify"])

STATUS_CODES = {
    VerificationReason.INVALID_REQUEST: 400,
    VerificationReason.MISSING_REFERENCE_TIMESTAMP: 422,
    VerificationReason.INFRASTRUCTURE_FAILURE: 503,
}


def get_verification_service(session: AsyncSession = Depends(get_async_session)) -> VerificationService:
    return VerificationService(
        lookup=partial(letter_service.find_approved_by_number, session),
        secret=settings.hmac_secret,
    )


def to_response(result: VerificationResult, response: Response) -> VerifyDocumentResponse:
    response.status_code = STATUS_CODES.get(result.reason, 200)
    return VerifyDocumentResponse(
        valid=result.valid,
        message=result.message,
        reason=result.reason,
        letterInfo=result.disclosure,
    )


@router.post("/verify-document", response_model=VerifyDocumentResponse)
async def verify_document(
    request: VerifyDocumentRequest,
    response: Response,
    service: VerificationService = Depends(get_verification_service),
):
    """Check a letter number + validation code pair typed in by a user."""
    result = await service.verify(request.letterNumber, request.validationCode)
    return to_response(result, response)


@router.get("/verify/{payload:path}", response_model=VerifyDocumentResponse)
async def verify_payload(
    payload: str,
    response: Response,
    service: VerificationService = Depends(get_verification_service),
):
    """Target of the QR code: `<url-encoded letter number>-<code>`."""
    decoded = decode_payload(payload)
    result = await service.verify(decoded.letter_number, decoded.code)
    return to_response(result, response)
