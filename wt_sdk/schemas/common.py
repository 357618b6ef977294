"""
Common schemas shared by transfers and boards.
"""

from typing import Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard API error body."""
    success: bool = False
    message: Optional[str] = None


class AuthorizeResponse(BaseModel):
    """Response from the authorize endpoint."""
    success: bool
    token: Optional[str] = None


class Multipart(BaseModel):
    """
    Server-declared chunking parameters for one remote file.

    `id` is only sent for board items, whose upload-URL endpoint needs it.
    """
    id: Optional[str] = None
    part_numbers: Optional[int] = None
    chunk_size: Optional[int] = None


class FileParam(BaseModel):
    """A file announced to the API before upload."""
    name: str
    size: int


class UploadURL(BaseModel):
    """Single-use signed URL for one chunk."""
    success: Optional[bool] = None
    url: Optional[str] = None
