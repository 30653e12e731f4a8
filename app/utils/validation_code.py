"""
Validation code derivation (HMAC-SHA256).

The code is never stored. It is recomputed from the letter id and its
reference timestamp whenever a document is rendered or checked.
"""

import hashlib
import hmac
from datetime import datetime, timezone
from typing import Optional

from app.utils.logger import logger

# Documents issued without HMAC_SECRET configured were signed with this key
DEFAULT_HMAC_SECRET = "default-secret-key"

CODE_LENGTH = 16

_fallback_warned = False


def resolve_secret(secret: Optional[str]) -> str:
    """Return the configured secret, or the documented default when it is empty."""
    global _fallback_warned

    if secret:
        return secret

    if not _fallback_warned:
        logger.warning(
            " HMAC_SECRET is not configured, validation codes use the public default key. "
            "Set HMAC_SECRET before issuing documents."
        )
        _fallback_warned = True
    return DEFAULT_HMAC_SECRET


def is_default_secret(secret: Optional[str]) -> bool:
    return not secret or secret == DEFAULT_HMAC_SECRET


def format_reference_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix, e.g. 2024-03-01T10:00:00.000Z"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def derive_code(letter_id: str, reference_timestamp: datetime, secret: Optional[str]) -> str:
    message = f"{letter_id}-{format_reference_timestamp(reference_timestamp)}"
    digest = hmac.new(
        resolve_secret(secret).encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return digest[:CODE_LENGTH].upper()


def normalize_code(code: Optional[str]) -> str:
    """Strip every whitespace character and uppercase a submitted code."""
    if not code:
        return ""
    return "".join(code.split()).upper()
