"""
WeTransfer API client.
Wires the REST transport, the upload engine and the services together.
"""

import logging
from typing import Optional

import httpx

from wt_sdk.core.auth import authorize
from wt_sdk.core.config import settings
from wt_sdk.core.http import APIClient
from wt_sdk.services.boards import BoardsService
from wt_sdk.services.transfers import TransfersService
from wt_sdk.uploads.chunks import ChunkUploader
from wt_sdk.uploads.orchestrator import UploadOrchestrator
from wt_sdk.uploads.resolver import SignedURLResolver

logger = logging.getLogger(__name__)


class Client:
    """
    Entry point of the library.

    Example:
        async with await Client.authorized("my-api-key") as client:
            transfer = await client.transfers.create("Hi!", Buffer("pony.txt", b"yeehaaa"))
            print(transfer.url)
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        storage_client: Optional[httpx.AsyncClient] = None,
        max_concurrent_files: Optional[int] = None
    ):
        """
        Args:
            api_key: API key sent as x-api-key on every request
            base_url: API base URL, defaults to WT_BASE_URL
            http_client: Client for API calls, created when omitted
            storage_client: Client for raw chunk PUTs; must not carry API
                credentials. Created when omitted
            max_concurrent_files: Files uploaded in parallel per transfer
        """
        self.api = APIClient(api_key, base_url=base_url, http_client=http_client)

        self._owns_storage_client = storage_client is None
        self.storage = storage_client or httpx.AsyncClient(
            timeout=settings.WT_REQUEST_TIMEOUT,
            follow_redirects=True
        )

        self.orchestrator = UploadOrchestrator(
            SignedURLResolver(self.api),
            ChunkUploader(self.storage),
            max_concurrent_files=max_concurrent_files
        )
        self.transfers = TransfersService(self.api, self.orchestrator)
        self.boards = BoardsService(self.api, self.orchestrator)

    @classmethod
    async def authorized(cls, api_key: str, **kwargs) -> "Client":
        """Create a client and authorize it in one go."""
        client = cls(api_key, **kwargs)
        try:
            await client.authorize()
        except BaseException:
            await client.aclose()
            raise
        return client

    @classmethod
    def from_settings(cls, **kwargs) -> "Client":
        """Create a client from WT_API_KEY and WT_BASE_URL."""
        return cls(settings.WT_API_KEY, base_url=settings.WT_BASE_URL, **kwargs)

    async def authorize(self) -> None:
        await authorize(self.api)

    async def aclose(self) -> None:
        """Close HTTP clients created by this instance."""
        await self.api.aclose()
        if self._owns_storage_client:
            await self.storage.aclose()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
