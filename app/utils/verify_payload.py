"""
Verification payload: `<url-encoded letter number>-<validation code>`

The same string is the tail of the public verification URL and the
content of the QR code printed on the letter.
"""

from typing import Optional
from urllib.parse import quote, unquote

from pydantic import BaseModel

PAYLOAD_SEPARATOR = "-"


class DecodedPayload(BaseModel):
    letter_number: str
    code: str


def encode_payload(letter_number: str, code: str) -> str:
    # safe="" so the slashes in letter numbers never split the URL path
    return f"{quote(letter_number or '', safe='')}{PAYLOAD_SEPARATOR}{code}"


def _percent_decode(value: str) -> str:
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        return value


def decode_payload(payload: Optional[str]) -> DecodedPayload:
    raw = str(payload or "")
    last = raw.rfind(PAYLOAD_SEPARATOR)

    # No separator (or only a leading one): the whole string is the code
    if last <= 0:
        return DecodedPayload(letter_number="", code=raw)

    return DecodedPayload(
        letter_number=_percent_decode(raw[:last]),
        code=raw[last + 1:],
    )


def build_verification_url(base_url: str, letter_number: str, code: str) -> str:
    return f"{base_url.rstrip('/')}/verify/{encode_payload(letter_number, code)}"
