"""
Reference timestamp selection for validation codes.

The validation code printed on a letter is derived from exactly one
timestamp. Approval time wins, creation time is the fallback, and the
current instant is used only when a letter carries neither.
"""

from datetime import date, datetime, time, timezone
from typing import Any, Optional

from pydantic import BaseModel

from app.utils.logger import logger

SOURCE_APPROVED_AT = "approved_at"
SOURCE_CREATED_AT = "created_at"
SOURCE_FALLBACK_NOW = "fallback_now"


class LetterTimestamps(BaseModel):
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ReferenceTimestamp(BaseModel):
    value: datetime
    source: str

    @property
    def is_fallback(self) -> bool:
        return self.source == SOURCE_FALLBACK_NOW


def to_datetime_safe(value: Any) -> Optional[datetime]:
    """Coerce a datetime, date or ISO-8601 string to an aware UTC datetime.

    Returns None for anything that cannot be interpreted.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    # Naive values come from the database and are stored in UTC
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def timestamps_from_letter(letter: Any) -> LetterTimestamps:
    """Build a LetterTimestamps record from an ORM row, schema object or dict."""
    if isinstance(letter, LetterTimestamps):
        return letter

    if isinstance(letter, dict):
        approved = letter.get("approved_at")
        created = letter.get("created_at")
    else:
        approved = getattr(letter, "approved_at", None)
        created = getattr(letter, "created_at", None)
        if approved is None and created is None:
            approved = getattr(letter, "APPROVED_AT", None)
            created = getattr(letter, "CREATED_AT", None)

    return LetterTimestamps(
        approved_at=to_datetime_safe(approved),
        created_at=to_datetime_safe(created),
    )


def select_reference_timestamp(letter: Any) -> ReferenceTimestamp:
    """Pick the timestamp that governs code derivation for a letter. Never raises."""
    try:
        stamps = timestamps_from_letter(letter)
    except Exception as e:
        logger.warning(f" Unreadable letter timestamps, treating as absent: {e}")
        stamps = LetterTimestamps()

    if stamps.approved_at is not None:
        return ReferenceTimestamp(value=stamps.approved_at, source=SOURCE_APPROVED_AT)

    if stamps.created_at is not None:
        return ReferenceTimestamp(value=stamps.created_at, source=SOURCE_CREATED_AT)

    # Codes derived from this value cannot be reproduced later
    logger.warning(" Letter has neither approved_at nor created_at, falling back to current time")
    return ReferenceTimestamp(value=datetime.now(timezone.utc), source=SOURCE_FALLBACK_NOW)
