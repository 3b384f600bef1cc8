import base64
import json

import pytest

from backend.services.cursor import InvalidCursor, decode_cursor, encode_cursor


def _b64(payload: str) -> str:
    return base64.urlsafe_b64encode(payload.encode()).decode()


def test_round_trip_preserves_offset_and_fingerprint():
    fingerprint = {"bridgeId": "B1", "status__in": ["error", "online"]}

    token = decode_cursor(encode_cursor(200, fingerprint))

    assert token.offset == 200
    assert token.filters == fingerprint


def test_round_trip_with_empty_fingerprint():
    token = decode_cursor(encode_cursor(0, {}))

    assert token.offset == 0
    assert token.filters == {}


def test_encoded_cursor_is_url_safe():
    cursor = encode_cursor(10**9, {"id__in": ["a/b+c?" * 20]})

    assert all(ch.isalnum() or ch in "-_=" for ch in cursor)


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "not a cursor",
        "ünïcode",
        _b64("not json"),
        _b64(json.dumps([1, 2, 3])),
        _b64(json.dumps({"filters": {}})),
        _b64(json.dumps({"offset": -5, "filters": {}})),
        _b64(json.dumps({"offset": "ten", "filters": {}})),
    ],
)
def test_decode_rejects_strings_not_produced_by_encode(raw):
    with pytest.raises(InvalidCursor):
        decode_cursor(raw)


def test_invalid_cursor_is_a_value_error():
    with pytest.raises(ValueError):
        decode_cursor("%%%")
