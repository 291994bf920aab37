# server/routes/directories.py
from typing import Any, Callable, Dict, List

from fastapi import Depends, FastAPI

from app.errors import BadRequestError
from app.models import dump_entries
from server.routes.auth import MessageOut


def register_directory_routes(app: FastAPI, fs_service, require_token: Callable[..., Any]):
    deps = [Depends(require_token)]

    @app.get("/api/directories", dependencies=deps)
    async def list_root() -> List[Dict[str, Any]]:
        return dump_entries(await fs_service.list_directory(""))

    @app.get("/api/directories/{path:path}", dependencies=deps)
    async def list_directory(path: str) -> List[Dict[str, Any]]:
        return dump_entries(await fs_service.list_directory(path))

    @app.post("/api/directories/{path:path}", dependencies=deps, response_model=MessageOut)
    async def create_directory(path: str) -> MessageOut:
        return MessageOut(message=await fs_service.create_directory(path))

    # The root is not addressable as a child path
    @app.delete("/api/directories", dependencies=deps)
    async def delete_root() -> MessageOut:
        raise BadRequestError("Cannot delete the root directory", code="ROOT_NOT_DELETABLE")

    @app.delete("/api/directories/{path:path}", dependencies=deps, response_model=MessageOut)
    async def delete_directory(path: str) -> MessageOut:
        return MessageOut(message=await fs_service.delete_directory(path))
