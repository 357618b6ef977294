"""
Upload targets.
The owner-side capability shared by transfers and boards, so upload code
never needs to know which kind of resource it is writing into.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from wt_sdk.core.errors import ValidationError


def escape_segment(value: str) -> str:
    """URL-escape a single path segment."""
    return quote(str(value), safe="")


@dataclass(frozen=True)
class UploadTarget:
    """
    Where the chunks of a file are registered.

    Attributes:
        owner_id: Server-assigned id of the transfer or board
        endpoint_prefix: "transfers" or "boards"
        requires_multipart_id: Boards key file storage by multipart id too,
            so their upload-URL path carries it as an extra segment
    """
    owner_id: str
    endpoint_prefix: str
    requires_multipart_id: bool = False

    def __post_init__(self):
        if not self.owner_id:
            raise ValidationError(f"{self.endpoint_prefix} id must not be blank")

    @property
    def base_path(self) -> str:
        return f"{self.endpoint_prefix}/{escape_segment(self.owner_id)}"

    def file_path(self, file_id: str) -> str:
        return f"{self.base_path}/files/{escape_segment(file_id)}"

    def upload_url_path(self, file_id: str, ordinal: int, multipart_id: Optional[str] = None) -> str:
        """Path of the signed-URL endpoint for one chunk."""
        path = f"{self.file_path(file_id)}/upload-url/{ordinal}"
        if self.requires_multipart_id:
            if not multipart_id:
                raise ValidationError(
                    f"file {file_id} of {self.endpoint_prefix} {self.owner_id} has no multipart id"
                )
            path = f"{path}/{escape_segment(multipart_id)}"
        return path

    def upload_complete_path(self, file_id: str) -> str:
        return f"{self.file_path(file_id)}/upload-complete"


def transfer_target(transfer_id: str) -> UploadTarget:
    return UploadTarget(owner_id=transfer_id, endpoint_prefix="transfers")


def board_target(board_id: str) -> UploadTarget:
    return UploadTarget(owner_id=board_id, endpoint_prefix="boards", requires_multipart_id=True)
