"""
Board API schemas.
Type-safe contracts for the board endpoints.
"""

from typing import List, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator

from wt_sdk.schemas.common import FileParam, Multipart
from wt_sdk.uploads.targets import UploadTarget, board_target


# ============================================================================
# Items
# ============================================================================

class Meta(BaseModel):
    """Extra information on a link item."""
    title: Optional[str] = None


class Item(BaseModel):
    """A board item, either of type "file" or "link"."""
    id: Optional[str] = None
    name: Optional[str] = None
    url: Optional[str] = None
    size: Optional[int] = None
    type: Optional[str] = None
    multipart: Optional[Multipart] = None
    meta: Optional[Meta] = None


class Link(BaseModel):
    """A link to add to a board."""
    url: str
    title: Optional[str] = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """Require an absolute URL with scheme and host."""
        parts = urlsplit(value)
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"invalid link URL: {value!r}")
        return value


class AddFilesRequest(BaseModel):
    """Files to register on a board."""
    files: List[FileParam]


# ============================================================================
# Boards
# ============================================================================

class BoardRequest(BaseModel):
    """Parameters to create a board."""
    name: str
    description: Optional[str] = None


class Board(BaseModel):
    """A board. Boards stay mutable and are never finalized."""
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    state: Optional[str] = None
    url: Optional[str] = None
    items: List[Item] = Field(default_factory=list)

    def upload_target(self) -> UploadTarget:
        return board_target(self.id or "")
