"""
Signed URL resolution.
Asks the API for a single-use storage URL for one chunk of one file.
"""

import logging
from typing import Optional

from wt_sdk.core.errors import SignedURLError, TransportError
from wt_sdk.core.http import APIClient
from wt_sdk.schemas.common import UploadURL
from wt_sdk.uploads.targets import UploadTarget

logger = logging.getLogger(__name__)


class SignedURLResolver:
    """Requests upload URLs for transfer and board files."""

    def __init__(self, api: APIClient):
        self.api = api

    async def resolve(
        self,
        target: UploadTarget,
        file_id: str,
        ordinal: int,
        multipart_id: Optional[str] = None
    ) -> UploadURL:
        """
        Request the upload URL of chunk `ordinal` (1-based).

        Every call is a fresh POST; URLs are single use and never cached.

        Raises:
            SignedURLError: If the API cannot be reached, answers with a non-2xx
                status or returns no usable URL
            ValidationError: If a board file has no multipart id
        """
        path = target.upload_url_path(file_id, ordinal, multipart_id)

        try:
            upload_url = await self.api.request("POST", path, response_model=UploadURL)
        except TransportError as e:
            logger.warning(f"Upload URL for part {ordinal} of file {file_id} failed: {e}")
            raise SignedURLError(
                e.message,
                status_code=e.status_code,
                method=e.method,
                url=e.url,
                ordinal=ordinal
            ) from e

        if upload_url is None or not upload_url.url or upload_url.success is False:
            logger.warning(f"No upload URL returned for part {ordinal} of file {file_id}")
            raise SignedURLError(
                "no upload URL returned",
                method="POST",
                url=str(self.api.build_url(path)),
                ordinal=ordinal
            )

        logger.debug(f"Resolved upload URL for part {ordinal} of file {file_id}")
        return upload_url
