# app/services/filesystem.py
from __future__ import annotations

import asyncio
import logging
import os
import stat
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, List, Optional, Tuple

import aiofiles
import aiofiles.os

from app.errors import (
    AlreadyExistsError,
    ApiError,
    BadRequestError,
    BadTypeError,
    NotEmptyError,
    NotFoundError,
    ParentNotFoundError,
    PayloadTooLargeError,
    classify_os_error,
)
from app.logging import log_fs_call
from app.models import NodeDescriptor, NodeEntry, NodeStatError
from app.services.paths import PathSanitizer
from app.services.payloads import BytesPayload, FilePayload

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    ".txt": "text/plain",
    ".html": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".pdf": "application/pdf",
}
DEFAULT_MEDIA_TYPE = "application/octet-stream"


def media_type_for(name: str) -> str:
    return MEDIA_TYPES.get(os.path.splitext(name)[1].lower(), DEFAULT_MEDIA_TYPE)


class FileStream:
    """
    An opened file ready to be streamed. Yields at most `size` bytes (the
    size observed at open time) and closes the handle when iteration ends
    or is abandoned.
    """

    def __init__(self, path: str, size: int, media_type: str, handle, chunk_size: int):
        self.path = path
        self.size = size
        self.media_type = media_type
        self._handle = handle
        self._chunk_size = chunk_size

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        remaining = self.size
        try:
            while remaining > 0:
                chunk = await self._handle.read(min(self._chunk_size, remaining))
                if not chunk:
                    break
                remaining -= len(chunk)
                yield chunk
        finally:
            await self._handle.close()

    async def aclose(self) -> None:
        await self._handle.close()

    async def read_all(self) -> bytes:
        return b"".join([chunk async for chunk in self.iter_chunks()])


class FileSystemService:
    """
    Sandbox all file and directory operations inside the data root.

    Every public operation accepts a client-supplied path, runs it through
    the sanitizer, checks existence and node type, then acts. OS failures
    are translated into ApiError subclasses; nothing unstructured escapes.
    Directory creation and deletion are deliberately non-recursive.
    """

    def __init__(self, sanitizer: PathSanitizer, max_upload_bytes: int = 50 * 1024 * 1024,
                 chunk_size: int = 64 * 1024):
        self.sanitizer = sanitizer
        self.root = Path(sanitizer.root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.max_upload_bytes = max_upload_bytes
        self.chunk_size = chunk_size

    # ---------- Public API: files ----------

    async def list_directory(self, path: str = "") -> List[NodeEntry]:
        rel, target = self._locate(path)
        log_fs_call(logger, "list", rel)
        st = await self._stat(rel, target)
        if st is None:
            raise NotFoundError("Directory not found")
        if not stat.S_ISDIR(st.st_mode):
            raise BadTypeError("Path is a file, not a directory", code="NOT_A_DIRECTORY")
        try:
            names = await aiofiles.os.listdir(target)
        except OSError as exc:
            raise self._os_error(exc, rel) from exc
        return list(await asyncio.gather(*(self._describe(rel, target, n) for n in names)))

    async def open_file(self, path: str) -> FileStream:
        rel, target = self._locate(path)
        log_fs_call(logger, "read", rel)
        st = await self._require_file(rel, target)
        try:
            handle = await aiofiles.open(target, "rb")
        except OSError as exc:
            raise self._os_error(exc, rel) from exc
        return FileStream(rel, st.st_size, media_type_for(rel), handle, self.chunk_size)

    async def read_bytes(self, path: str) -> bytes:
        """Read a whole file into memory, bounded by the upload limit."""
        stream = await self.open_file(path)
        if stream.size > self.max_upload_bytes:
            await stream.aclose()
            raise PayloadTooLargeError(
                f"/{stream.path} exceeds the {self.max_upload_bytes} byte limit"
            )
        return await stream.read_all()

    async def create_file(self, path: str, payload: FilePayload) -> str:
        rel, target = self._locate(path)
        log_fs_call(logger, "create_file", rel)
        if not rel:
            raise BadTypeError("Path is a directory", code="TARGET_IS_DIRECTORY")

        parent_st = await self._stat(rel, target.parent)
        if parent_st is None:
            raise ParentNotFoundError("Parent directory not found")
        if not stat.S_ISDIR(parent_st.st_mode):
            raise BadTypeError("Parent path is not a directory", code="PARENT_NOT_DIRECTORY")

        st = await self._stat(rel, target)
        if st is not None and stat.S_ISDIR(st.st_mode):
            raise BadTypeError("Path is a directory", code="TARGET_IS_DIRECTORY")

        await self._write(rel, target, payload)
        return "File created successfully"

    async def update_file(self, path: str, content: str) -> str:
        rel, target = self._locate(path)
        log_fs_call(logger, "update_file", rel)
        await self._require_file(rel, target)
        await self._write(rel, target, BytesPayload(content.encode("utf-8")))
        return "File updated successfully"

    async def delete_file(self, path: str) -> str:
        rel, target = self._locate(path)
        log_fs_call(logger, "delete_file", rel)
        await self._require_file(rel, target)
        try:
            await aiofiles.os.remove(target)
        except OSError as exc:
            raise self._os_error(exc, rel) from exc
        return "File deleted successfully"

    # ---------- Public API: directories ----------

    async def create_directory(self, path: str) -> str:
        rel, target = self._locate(path)
        log_fs_call(logger, "create_directory", rel)
        if not rel:
            raise AlreadyExistsError("Directory already exists")

        parent_st = await self._stat(rel, target.parent)
        if parent_st is None:
            raise ParentNotFoundError("Parent directory not found")
        if not stat.S_ISDIR(parent_st.st_mode):
            raise BadTypeError("Parent path is not a directory", code="PARENT_NOT_DIRECTORY")

        try:
            await aiofiles.os.mkdir(target)
        except FileExistsError as exc:
            raise AlreadyExistsError("Path already exists") from exc
        except OSError as exc:
            raise self._os_error(exc, rel) from exc
        return "Directory created successfully"

    async def delete_directory(self, path: str) -> str:
        rel, target = self._locate(path)
        log_fs_call(logger, "delete_directory", rel)
        if not rel:
            raise BadRequestError("Cannot delete the root directory", code="ROOT_NOT_DELETABLE")

        st = await self._stat(rel, target)
        if st is None:
            raise NotFoundError("Directory not found")
        if not stat.S_ISDIR(st.st_mode):
            raise BadTypeError("Path is a file, not a directory", code="NOT_A_DIRECTORY")

        try:
            await aiofiles.os.rmdir(target)
        except OSError as exc:
            err = self._os_error(exc, rel)
            # Some platforms report a non-empty directory as EEXIST
            if isinstance(err, (NotEmptyError, AlreadyExistsError)):
                raise NotEmptyError("Directory is not empty") from exc
            raise err from exc
        return "Directory deleted successfully"

    # ---------- Internals ----------

    def _locate(self, path: str) -> Tuple[str, Path]:
        rel = self.sanitizer.sanitize(path)
        if "\x00" in rel:
            raise BadRequestError("Path contains a NUL byte")
        return rel, self.sanitizer.resolve(rel)

    def _os_error(self, exc: OSError, rel: str) -> ApiError:
        err = classify_os_error(exc, rel)
        if err.status_code >= 500:
            logger.error("unexpected filesystem error on /%s: %s", rel, exc)
        return err

    async def _stat(self, rel: str, target: Path) -> Optional[os.stat_result]:
        """stat() the target; None when it (or a path component) does not exist."""
        try:
            return await aiofiles.os.stat(target)
        except (FileNotFoundError, NotADirectoryError):
            return None
        except OSError as exc:
            raise self._os_error(exc, rel) from exc

    async def _require_file(self, rel: str, target: Path) -> os.stat_result:
        st = await self._stat(rel, target)
        if st is None:
            raise NotFoundError("File not found")
        if stat.S_ISDIR(st.st_mode):
            raise BadTypeError("Path is a directory, not a file", code="NOT_A_FILE")
        return st

    async def _describe(self, rel: str, target: Path, name: str) -> NodeEntry:
        child_rel = f"{rel}/{name}" if rel else name
        try:
            st = await aiofiles.os.stat(target / name)
        except OSError as exc:
            logger.warning("stat failed for /%s: %s", child_rel, exc)
            return NodeStatError(name=name, path=child_rel)
        return NodeDescriptor(
            name=name,
            path=child_rel,
            is_directory=stat.S_ISDIR(st.st_mode),
            size=st.st_size,
            modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )

    async def _write(self, rel: str, target: Path, payload: FilePayload) -> None:
        limit = self.max_upload_bytes
        if payload.size is not None and payload.size > limit:
            raise PayloadTooLargeError(f"Upload exceeds the {limit} byte limit")

        # Stream beside the target; the target is only replaced once the
        # whole payload arrived within the limit
        tmp = target.with_name(f".{target.name}.{uuid.uuid4().hex}.part")
        written = 0
        try:
            async with aiofiles.open(tmp, "wb") as f:
                async for chunk in payload.chunks():
                    written += len(chunk)
                    if written > limit:
                        raise PayloadTooLargeError(f"Upload exceeds the {limit} byte limit")
                    await f.write(chunk)
            await aiofiles.os.replace(tmp, target)
        except OSError as exc:
            await self._discard(tmp)
            raise self._os_error(exc, rel) from exc
        except BaseException:
            await self._discard(tmp)
            raise

    async def _discard(self, target: Path) -> None:
        try:
            await aiofiles.os.remove(target)
        except FileNotFoundError:
            pass
