"""
Document verification service

Answers a single question: is this (letter number, validation code) pair
valid right now? Every outcome, including storage failures, is returned as
a VerificationResult so callers can tell "invalid" apart from "could not
be checked".
"""

import hmac
from typing import Awaitable, Callable, Optional

from app.schemas.verify_schemas import (
    LetterDisclosure,
    VerifiableLetter,
    VerificationReason,
    VerificationResult,
)
from app.utils.logger import logger
from app.utils.timestamp_policy import select_reference_timestamp
from app.utils.validation_code import derive_code, normalize_code

# Looks up an approved letter by its exact number, None when absent
LetterLookup = Callable[[str], Awaitable[Optional[VerifiableLetter]]]


def build_disclosure(letter: VerifiableLetter) -> LetterDisclosure:
    return LetterDisclosure(
        letterNumber=letter.letter_number,
        activity=letter.activity,
        location=letter.location,
        date=letter.date,
        letterType=letter.letter_type,
        status=letter.status,
        participantCount=letter.participant_count,
        createdBy=letter.creator_name,
        approvedBy=letter.approver_name,
        approvedAt=letter.approved_at,
        createdAt=letter.created_at,
    )


class VerificationService:
    def __init__(self, lookup: LetterLookup, secret: Optional[str] = None):
        self.lookup = lookup
        self.secret = secret

    def expected_code(self, letter: VerifiableLetter) -> Optional[str]:
        """Code that should be printed on the letter, None if it has no reference timestamp."""
        reference = select_reference_timestamp(letter)
        if reference.is_fallback:
            return None
        return derive_code(letter.id, reference.value, self.secret)

    async def verify(self, letter_number: Optional[str], submitted_code: Optional[str]) -> VerificationResult:
        number = (letter_number or "").strip()
        code = normalize_code(submitted_code)

        if not number or not code:
            return VerificationResult(valid=False, reason=VerificationReason.INVALID_REQUEST)

        try:
            letter = await self.lookup(number)

            if letter is None or letter.status != "approved":
                logger.info(f" Verification: letter {number!r} not found or not approved")
                return VerificationResult(valid=False, reason=VerificationReason.NOT_FOUND_OR_NOT_APPROVED)

            expected = self.expected_code(letter)
            if expected is None:
                logger.warning(f" Verification: letter {number!r} has no reference timestamp")
                return VerificationResult(valid=False, reason=VerificationReason.MISSING_REFERENCE_TIMESTAMP)

            if not hmac.compare_digest(expected.encode("utf-8"), code.encode("utf-8")):
                logger.info(f" Verification: code mismatch for letter {number!r}")
                return VerificationResult(valid=False, reason=VerificationReason.CODE_MISMATCH)

            logger.info(f" Verification: letter {number!r} is valid")
            return VerificationResult(valid=True, disclosure=build_disclosure(letter))

        except Exception as e:
            logger.error(f" Verification failed for letter {number!r}: {e}", exc_info=True)
            return VerificationResult(valid=False, reason=VerificationReason.INFRASTRUCTURE_FAILURE)
