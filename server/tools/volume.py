# server/tools/volume.py
from typing import Any, Dict, List

from pydantic import BaseModel, Field
from fastmcp import FastMCP

from app.errors import NotFound


class VolumePathIn(BaseModel):
    path: str = Field("/", description="Path relative to the volume root")


class VolumeWriteIn(BaseModel):
    path: str = Field(..., description="File path relative to the volume root")
    content: str = Field(..., description="UTF-8 text that replaces the whole file")


class VolumeTools:
    """
    Tool bodies over the volume service; same sandbox rules as the HTTP surface.
    """

    def __init__(self, volume):
        self.volume = volume

    def list(self, args: VolumePathIn) -> List[Dict[str, Any]]:
        target = self.volume.resolve(args.path)
        return [e.model_dump(by_alias=True) for e in self.volume.list_dir(target)]

    def read(self, args: VolumePathIn) -> str:
        target = self.volume.resolve(args.path)
        if self.volume.kind(target) != "file":
            raise NotFound(f"not a file: {args.path}")
        return self.volume.read_text(target)

    def write(self, args: VolumeWriteIn) -> str:
        self.volume.write_file(self.volume.resolve(args.path), args.content.encode("utf-8"))
        return "OK"

    def mkdir(self, args: VolumePathIn) -> str:
        self.volume.mkdir(self.volume.resolve(args.path))
        return "OK"

    def delete(self, args: VolumePathIn) -> Dict[str, Any]:
        return {"deleted": self.volume.delete(self.volume.resolve(args.path))}

    def extract(self, args: VolumePathIn) -> Dict[str, Any]:
        destination, count = self.volume.extract(self.volume.resolve(args.path))
        return {"extracted": count, "destination": self.volume.display_path(destination)}


def register_volume_tools(mcp: FastMCP, volume):
    """
    Very thin tool adapters:
    - validate/deserialize inputs (Pydantic)
    - call the service (business logic + sandbox)
    - return the result
    """
    tools = VolumeTools(volume)

    @mcp.tool(name="volume_list", description="List a directory of the volume")
    def volume_list(input: VolumePathIn) -> list:
        return tools.list(input)

    @mcp.tool(name="volume_read", description="Read a text file from the volume")
    def volume_read(input: VolumePathIn) -> str:
        return tools.read(input)

    @mcp.tool(name="volume_write", description="Replace a text file's content on the volume")
    def volume_write(input: VolumeWriteIn) -> str:
        return tools.write(input)

    @mcp.tool(name="volume_mkdir", description="Create a directory (and parents) on the volume")
    def volume_mkdir(input: VolumePathIn) -> str:
        return tools.mkdir(input)

    @mcp.tool(name="volume_delete", description="Recursively delete a file or directory on the volume")
    def volume_delete(input: VolumePathIn) -> dict:
        return tools.delete(input)

    @mcp.tool(name="volume_extract", description="Extract a zip archive into its containing directory")
    def volume_extract(input: VolumePathIn) -> dict:
        return tools.extract(input)

    return tools
