"""
Chunk uploads.
PUTs the raw bytes of one chunk to a signed object-storage URL.
"""

import logging
from typing import Optional, Union

import httpx

from wt_sdk.core.config import settings
from wt_sdk.core.errors import ChunkUploadError, surface_cancellation
from wt_sdk.schemas.common import UploadURL

logger = logging.getLogger(__name__)


class ChunkUploader:
    """
    Sends chunks to object storage.

    The HTTP client must not carry API credentials: signed URLs authorize
    themselves and storage rejects unexpected auth headers.
    """

    def __init__(self, http: httpx.AsyncClient, body_limit: Optional[int] = None):
        self.http = http
        self.body_limit = settings.WT_ERROR_BODY_LIMIT if body_limit is None else body_limit

    async def upload_bytes(
        self,
        upload_url: Union[UploadURL, str],
        payload: bytes,
        ordinal: Optional[int] = None
    ) -> None:
        """
        Upload one chunk.

        Args:
            upload_url: Signed URL (schema or plain string)
            payload: Chunk bytes
            ordinal: 1-based chunk number, used for error reporting

        Raises:
            ChunkUploadError: Blank URL, blank payload, transport failure or non-2xx status
            CancellationError: If the caller cancelled the upload
        """
        url = upload_url.url if isinstance(upload_url, UploadURL) else upload_url

        if not url:
            raise ChunkUploadError("blank URL", ordinal=ordinal)
        if not payload:
            raise ChunkUploadError(f"blank data for URL: {url}", url=url, ordinal=ordinal)

        try:
            with surface_cancellation():
                async with self.http.stream("PUT", url, content=payload) as response:
                    if 200 <= response.status_code <= 299:
                        logger.debug(f"Uploaded {len(payload)} bytes (part {ordinal})")
                        return
                    body = await self._read_prefix(response)
        except httpx.TransportError as e:
            logger.warning(f"PUT {url} failed: {e}")
            raise ChunkUploadError(
                f"PUT {url}: {str(e) or type(e).__name__}", url=url, ordinal=ordinal
            ) from e

        logger.warning(f"Storage rejected part {ordinal}: HTTP {response.status_code}")
        raise ChunkUploadError(
            "upload bytes error",
            method="PUT",
            url=url,
            status_code=response.status_code,
            body=body,
            ordinal=ordinal
        )

    async def _read_prefix(self, response: httpx.Response) -> str:
        """Read at most `body_limit` bytes of an error body."""
        buf = bytearray()
        async for chunk in response.aiter_bytes():
            buf.extend(chunk)
            if len(buf) >= self.body_limit:
                break
        return bytes(buf[:self.body_limit]).decode("utf-8", errors="replace")
