# app/services/payloads.py
from __future__ import annotations

import base64
import binascii
from typing import AsyncIterator, Optional

from app.errors import BadRequestError, PayloadTooLargeError

DATA_URI_PREFIX = "data:application/octet-stream;base64,"


class FilePayload:
    """
    Content to be written to a file.
    `size` is the byte count when known before any data is consumed.
    """
    size: Optional[int] = None

    def chunks(self) -> AsyncIterator[bytes]:
        raise NotImplementedError


class BytesPayload(FilePayload):
    def __init__(self, data: bytes):
        self.data = data
        self.size = len(data)

    async def chunks(self) -> AsyncIterator[bytes]:
        if self.data:
            yield self.data


class StreamPayload(FilePayload):
    """Bytes arriving incrementally (raw request body, multipart part)."""

    def __init__(self, source: AsyncIterator[bytes], size: Optional[int] = None):
        self._source = source
        self.size = size

    async def chunks(self) -> AsyncIterator[bytes]:
        async for chunk in self._source:
            if chunk:
                yield chunk

    @classmethod
    def from_upload(cls, upload, chunk_size: int) -> "StreamPayload":
        """Wrap an uploaded file part (anything with an async read(n))."""
        async def _read():
            while True:
                chunk = await upload.read(chunk_size)
                if not chunk:
                    break
                yield chunk

        return cls(_read(), getattr(upload, "size", None))


def _decoded_length(encoded: str) -> int:
    padding = len(encoded) - len(encoded.rstrip("="))
    return max(len(encoded) * 3 // 4 - padding, 0)


def decode_data_uri(file_data: str, max_bytes: int) -> bytes:
    """
    Decode a `data:application/octet-stream;base64,...` string.
    The size is checked from the encoded length before decoding.
    """
    if not isinstance(file_data, str) or not file_data.startswith(DATA_URI_PREFIX):
        raise BadRequestError(
            f'Invalid fileData format. Must be a data URI string starting with "{DATA_URI_PREFIX}"',
            code="INVALID_FILE_DATA",
        )
    encoded = "".join(file_data[len(DATA_URI_PREFIX):].split())
    if _decoded_length(encoded) > max_bytes:
        raise PayloadTooLargeError(f"Upload exceeds the {max_bytes} byte limit")
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise BadRequestError("fileData is not valid base64", code="INVALID_FILE_DATA")


def payload_from_fields(
    content: Optional[str], file_data: Optional[str], max_bytes: int
) -> FilePayload:
    """
    Pick the payload from the textual `content` or the encoded `fileData` field.
    Neither yields an empty file; both is ambiguous and rejected.
    """
    if content is not None and file_data is not None:
        raise BadRequestError("Provide either content or fileData, not both")
    if file_data is not None:
        return BytesPayload(decode_data_uri(file_data, max_bytes))
    return BytesPayload((content or "").encode("utf-8"))
