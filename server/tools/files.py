# server/tools/files.py
from typing import Any, Dict, List

from pydantic import BaseModel, Field
from fastmcp import FastMCP

from app.models import dump_entries
from app.services.payloads import BytesPayload


class PathIn(BaseModel):
    path: str = Field("", description="Path relative to the data root ('' for the root)")


class FsWriteIn(BaseModel):
    path: str = Field(..., description="Relative path under the data root")
    content: str = Field(..., description="UTF-8 text content to write")


def register_file_tools(mcp: FastMCP, fs_service):
    """
    Very thin tool adapters:
    - validate/deserialize inputs (Pydantic)
    - call the service (sandboxing + checks)
    - return the result
    """

    @mcp.tool(name="fs_list", description="List the entries of a directory under the data root")
    async def fs_list(input: PathIn) -> List[Dict[str, Any]]:
        return dump_entries(await fs_service.list_directory(input.path))

    @mcp.tool(name="fs_read", description="Read a file under the data root as UTF-8 text")
    async def fs_read(input: PathIn) -> str:
        data = await fs_service.read_bytes(input.path)
        return data.decode("utf-8", "replace")

    @mcp.tool(name="fs_write", description="Create or overwrite a text file (parent must exist)")
    async def fs_write(input: FsWriteIn) -> str:
        return await fs_service.create_file(input.path, BytesPayload(input.content.encode("utf-8")))

    @mcp.tool(name="fs_update", description="Replace the content of an existing text file")
    async def fs_update(input: FsWriteIn) -> str:
        return await fs_service.update_file(input.path, input.content)

    @mcp.tool(name="fs_delete", description="Delete a single file")
    async def fs_delete(input: PathIn) -> str:
        return await fs_service.delete_file(input.path)


def register_directory_tools(mcp: FastMCP, fs_service):
    @mcp.tool(name="dir_create", description="Create one directory (parent must exist)")
    async def dir_create(input: PathIn) -> str:
        return await fs_service.create_directory(input.path)

    @mcp.tool(name="dir_delete", description="Delete an empty directory")
    async def dir_delete(input: PathIn) -> str:
        return await fs_service.delete_directory(input.path)
