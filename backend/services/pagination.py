from typing import Sequence

from backend.models.entities import PageResponse
from backend.services.cursor import InvalidCursor, decode_cursor, encode_cursor


def paginate_results(
    all_results: Sequence,
    page_token: str | None,
    page_size: int,
    fingerprint: dict[str, object],
) -> PageResponse:
    """Slice one page out of an already filtered, ordered result list.

    A token is only valid for the filter set it was issued under; a token
    carrying a different fingerprint is rejected rather than reinterpreted.
    """
    offset = 0
    if page_token:
        decoded = decode_cursor(page_token)
        if decoded.filters != fingerprint:
            raise InvalidCursor("Page token was issued for a different filter set")
        offset = decoded.offset

    total = len(all_results)
    results = list(all_results[offset : offset + page_size])
    has_more = offset + page_size < total
    has_previous = offset > 0

    return PageResponse(
        results=results,
        nextPageToken=encode_cursor(offset + page_size, fingerprint) if has_more else None,
        prevPageToken=(
            encode_cursor(max(0, offset - page_size), fingerprint) if has_previous else None
        ),
        totalSize=total,
    )
