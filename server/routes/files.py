# server/routes/files.py
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field, ValidationError
from starlette.datastructures import UploadFile

from app.errors import BadRequestError, PayloadTooLargeError
from app.models import dump_entries
from app.services.payloads import FilePayload, StreamPayload, payload_from_fields
from server.routes.auth import MessageOut


class CreateFileIn(BaseModel):
    content: Optional[str] = Field(None, description="UTF-8 text content")
    fileData: Optional[str] = Field(
        None, description="Binary content as data:application/octet-stream;base64,..."
    )


class UpdateFileIn(BaseModel):
    content: str = Field(..., description="Replacement UTF-8 text content")


def _declared_length(request: Request) -> Optional[int]:
    raw = request.headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        raise BadRequestError("Invalid Content-Length header")


async def payload_from_request(request: Request, max_bytes: int, chunk_size: int) -> FilePayload:
    """
    Select the create-file payload by content type:
      multipart/form      -> `file` part (streamed), else `content`/`fileData` fields
      application/json    -> {content} or {fileData}
      anything else       -> raw body, streamed
    """
    ctype = request.headers.get("content-type", "").lower()
    declared = _declared_length(request)

    if ctype.startswith("multipart/form-data") or ctype.startswith(
        "application/x-www-form-urlencoded"
    ):
        form = await request.form()
        upload = form.get("file")
        if isinstance(upload, UploadFile):
            return StreamPayload.from_upload(upload, chunk_size)
        content = form.get("content")
        file_data = form.get("fileData")
        return payload_from_fields(
            content if isinstance(content, str) else None,
            file_data if isinstance(file_data, str) else None,
            max_bytes,
        )

    if ctype.startswith("application/json"):
        # base64 inflates by 4/3; leave room for the JSON envelope
        if declared is not None and declared > max_bytes * 4 // 3 + 64 * 1024:
            raise PayloadTooLargeError(f"Upload exceeds the {max_bytes} byte limit")
        try:
            body = await request.json()
        except ValueError:
            raise BadRequestError("Malformed JSON body")
        if not isinstance(body, dict):
            raise BadRequestError("JSON body must be an object")
        try:
            data = CreateFileIn.model_validate(body)
        except ValidationError as exc:
            raise BadRequestError(f"Invalid request body: {exc.errors()[0]['msg']}")
        return payload_from_fields(data.content, data.fileData, max_bytes)

    if declared is not None and declared > max_bytes:
        raise PayloadTooLargeError(f"Upload exceeds the {max_bytes} byte limit")
    return StreamPayload(request.stream(), declared)


def register_file_routes(app: FastAPI, fs_service, require_token: Callable[..., Any]):
    """
    Thin HTTP adapters over the filesystem service:
    - extract the raw path and body
    - call the service (sanitizing + checks + I/O)
    - serialize the result
    """
    deps = [Depends(require_token)]

    @app.get("/api/files", dependencies=deps)
    async def list_root() -> List[Dict[str, Any]]:
        return dump_entries(await fs_service.list_directory(""))

    @app.get("/api/files/{path:path}", dependencies=deps)
    async def read_file(path: str) -> StreamingResponse:
        stream = await fs_service.open_file(path)
        return StreamingResponse(
            stream.iter_chunks(),
            headers={"Content-Type": stream.media_type, "Content-Length": str(stream.size)},
        )

    @app.post("/api/files/{path:path}", dependencies=deps, response_model=MessageOut)
    async def create_file(path: str, request: Request) -> MessageOut:
        payload = await payload_from_request(
            request, fs_service.max_upload_bytes, fs_service.chunk_size
        )
        return MessageOut(message=await fs_service.create_file(path, payload))

    @app.put("/api/files/{path:path}", dependencies=deps, response_model=MessageOut)
    async def update_file(path: str, body: UpdateFileIn) -> MessageOut:
        return MessageOut(message=await fs_service.update_file(path, body.content))

    @app.delete("/api/files/{path:path}", dependencies=deps, response_model=MessageOut)
    async def delete_file(path: str) -> MessageOut:
        return MessageOut(message=await fs_service.delete_file(path))
