"""
Transfer API schemas.
Type-safe contracts for the transfer endpoints.
"""

from typing import List, Optional
from pydantic import BaseModel, Field

from wt_sdk.schemas.common import FileParam, Multipart
from wt_sdk.uploads.targets import UploadTarget, transfer_target


# ============================================================================
# Files
# ============================================================================

class RemoteFile(BaseModel):
    """A file as registered by the API, with its multipart info."""
    id: Optional[str] = None
    name: Optional[str] = None
    size: Optional[int] = None
    type: Optional[str] = None
    multipart: Optional[Multipart] = None


# ============================================================================
# Transfers
# ============================================================================

class TransferRequest(BaseModel):
    """Parameters to create a transfer."""
    message: Optional[str] = None
    files: List[FileParam] = Field(default_factory=list)


class Transfer(BaseModel):
    """A transfer. `url` stays empty until the transfer is finalized."""
    success: Optional[bool] = None
    id: Optional[str] = None
    message: Optional[str] = None
    state: Optional[str] = None
    expires_at: Optional[str] = None
    url: Optional[str] = None
    files: List[RemoteFile] = Field(default_factory=list)

    def upload_target(self) -> UploadTarget:
        return transfer_target(self.id or "")


# ============================================================================
# Completion
# ============================================================================

class CompleteFileRequest(BaseModel):
    """Body of the upload-complete call for a transfer file."""
    part_numbers: int


class CompletedFile(BaseModel):
    """Per-file record returned once a transfer file is marked complete."""
    id: Optional[str] = None
    retries: Optional[int] = None
    name: Optional[str] = None
    size: Optional[int] = None
    chunk_size: Optional[int] = None
