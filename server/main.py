# server/main.py
from typing import Optional

from fastmcp import FastMCP
from app.di import Container, build_container
from app.logging import configure_logging
from server.tools.volume import register_volume_tools

def create_app(container: Optional[Container] = None) -> FastMCP:
    """
    Stdio tool host over the same VolumeService the HTTP app uses,
    so both transports share one sandbox.
    """
    container = container or build_container()

    mcp = FastMCP("VolumeFiles", version="0.1.0")
    register_volume_tools(mcp, container.volume_service)

    return mcp


if __name__ == "__main__":
    # logs go to stderr; stdout carries the tool protocol
    configure_logging()
    create_app().run(transport="stdio")
