"""Opaque pagination cursors.

A cursor is URL-safe base64 over the JSON form of ``PageToken``: the absolute
offset into a filtered result set plus the fingerprint of the filters that
produced it.
"""

import base64
import binascii

from pydantic import ValidationError

from backend.models.entities import PageToken


class InvalidCursor(ValueError):
    """Raised when a cursor cannot be decoded or does not fit the request."""


def encode_cursor(offset: int, fingerprint: dict[str, object] | None = None) -> str:
    token = PageToken(offset=offset, filters=fingerprint or {})
    return base64.urlsafe_b64encode(token.model_dump_json().encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> PageToken:
    try:
        raw = base64.b64decode(cursor.encode("ascii"), altchars=b"-_", validate=True)
        return PageToken.model_validate_json(raw)
    except (binascii.Error, UnicodeError, ValidationError) as exc:
        raise InvalidCursor(f"Invalid page token: {cursor!r}") from exc
