"""
Listing models.

A directory listing is a sequence of per-entry results: either a
NodeDescriptor for an entry that could be inspected, or a NodeStatError for
one whose metadata could not be read. One bad entry never fails the listing.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field


class NodeDescriptor(BaseModel):
    """Metadata for one file or directory entry."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    path: str = Field(description="Path relative to the root directory")
    is_directory: bool = Field(alias="isDirectory")
    size: int = Field(description="Size in bytes")
    modified: datetime = Field(description="Last modification time (UTC)")


class NodeStatError(BaseModel):
    """
    An entry that was enumerated but could not be inspected. Carries the
    same fields as NodeDescriptor, with placeholder values, plus `error`.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str
    path: str
    is_directory: bool = Field(False, alias="isDirectory")
    size: int = 0
    modified: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    error: str = "Failed to read file stats"


NodeEntry = Union[NodeDescriptor, NodeStatError]


def dump_entries(entries: List[NodeEntry]) -> List[Dict[str, Any]]:
    return [e.model_dump(mode="json", by_alias=True) for e in entries]
