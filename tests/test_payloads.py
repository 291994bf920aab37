# tests/test_payloads.py
import asyncio
import base64

import pytest

from app.errors import BadRequestError, PayloadTooLargeError
from app.services.payloads import DATA_URI_PREFIX, decode_data_uri, payload_from_fields


def _collect(payload) -> bytes:
    async def run():
        return b"".join([c async for c in payload.chunks()])
    return asyncio.run(run())


def test_text_content():
    p = payload_from_fields("héllo", None, 100)
    assert p.size == len("héllo".encode("utf-8"))
    assert _collect(p) == "héllo".encode("utf-8")


def test_no_fields_means_empty_file():
    p = payload_from_fields(None, None, 100)
    assert p.size == 0
    assert _collect(p) == b""


def test_both_fields_rejected():
    with pytest.raises(BadRequestError):
        payload_from_fields("a", DATA_URI_PREFIX + "YQ==", 100)


def test_data_uri_decodes():
    data = b"\x00\xffbinary"
    assert decode_data_uri(DATA_URI_PREFIX + base64.b64encode(data).decode(), 100) == data


@pytest.mark.parametrize("bad", [
    "YWJj",                                   # no prefix
    "data:text/plain;base64,YWJj",            # wrong media type
    DATA_URI_PREFIX + "not base64!!",
    DATA_URI_PREFIX + "YWJ",                  # bad padding
])
def test_malformed_data_uri(bad):
    with pytest.raises(BadRequestError) as ei:
        decode_data_uri(bad, 100)
    assert ei.value.code == "INVALID_FILE_DATA"


def test_data_uri_size_checked_before_decoding():
    encoded = base64.b64encode(b"x" * 30).decode()
    with pytest.raises(PayloadTooLargeError):
        decode_data_uri(DATA_URI_PREFIX + encoded, 10)
