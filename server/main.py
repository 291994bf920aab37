# server/main.py
from fastmcp import FastMCP

from app.di import build_container
from app.logging import configure_logging
from server.tools.files import register_directory_tools, register_file_tools

def create_app() -> FastMCP:
    """
    Build DI container, create FastMCP host, and register tools.
    Same sanitizer and operation layer as the HTTP surface.
    """
    container = build_container()
    configure_logging(container.settings.LOG_LEVEL)

    mcp = FastMCP("LocalFilesystem", version="0.1.0")

    # Register tools (thin adapters)
    register_file_tools(mcp, container.fs_service)
    register_directory_tools(mcp, container.fs_service)

    return mcp


if __name__ == "__main__":
    app = create_app()
    # stdio transport: client (agent/IDE) launches this process and speaks JSON-RPC on stdin/stdout
    app.run(transport="stdio")
