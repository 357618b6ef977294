"""
REST transport for the WeTransfer API.
Builds authenticated JSON requests and decodes responses into schemas.
"""

import json
import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from wt_sdk.core.config import settings
from wt_sdk.core.errors import TransportError, ValidationError, surface_cancellation
from wt_sdk.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/json"


def _encode(body: Any) -> Any:
    """Turn schemas (or lists of schemas) into JSON-ready data."""
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json")
    if isinstance(body, (list, tuple)):
        return [_encode(item) for item in body]
    return body


class APIClient:
    """
    Authenticated JSON client for the API.

    The bearer token is set once by `authorize` and only read afterwards.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        if not api_key:
            raise ValidationError("API key must not be blank")

        base_url = base_url or settings.WT_BASE_URL
        if not base_url.endswith("/"):
            raise ValidationError(f"base URL must have a trailing slash, but {base_url!r} does not")

        self.api_key = api_key
        self.base_url = httpx.URL(base_url)
        self.user_agent = user_agent or settings.WT_USER_AGENT
        self.token: Optional[str] = None

        self._owns_client = http_client is None
        self.http = http_client or httpx.AsyncClient(
            timeout=timeout or settings.WT_REQUEST_TIMEOUT,
            follow_redirects=True
        )

    def build_url(self, path: str) -> httpx.URL:
        """Resolve a relative API path against the base URL."""
        return self.base_url.join(path)

    def headers(self) -> dict:
        headers = {
            "Content-Type": CONTENT_TYPE,
            "User-Agent": self.user_agent,
            "x-api-key": self.api_key,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        response_model: Any = None
    ) -> Any:
        """
        Send an API request and decode the response.

        Args:
            method: HTTP method
            path: Path relative to the base URL, without a leading slash
            body: Optional schema, list of schemas or JSON-ready data
            response_model: Optional type to validate the JSON response into

        Returns:
            The decoded response, or None when no model is given or the body is empty

        Raises:
            TransportError: On network failure, non-2xx status or undecodable body
            CancellationError: If the caller cancelled the request
        """
        url = self.build_url(path)
        content = None
        if body is not None:
            content = json.dumps(_encode(body), ensure_ascii=False).encode("utf-8")

        logger.debug(f"{method} {url}")

        try:
            with surface_cancellation():
                response = await self.http.request(
                    method, url, content=content, headers=self.headers()
                )
        except httpx.TransportError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise TransportError(str(e) or type(e).__name__, method=method, url=str(url)) from e

        check_response(response)

        if response_model is None or not response.content:
            return None

        try:
            return TypeAdapter(response_model).validate_json(response.content)
        except PydanticValidationError as e:
            raise TransportError(
                f"invalid response body: {e}",
                status_code=response.status_code,
                method=method,
                url=str(url)
            ) from e

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this transport created it."""
        if self._owns_client:
            await self.http.aclose()


def check_response(response: httpx.Response) -> None:
    """
    Raise TransportError for any status outside [200, 299].

    The server message is taken from the JSON error body; non-JSON bodies are
    kept as raw text.
    """
    if 200 <= response.status_code <= 299:
        return

    message = response.text.strip()
    try:
        error = ErrorResponse.model_validate_json(response.content)
        if error.message:
            message = error.message
    except PydanticValidationError:
        pass

    raise TransportError(
        message,
        status_code=response.status_code,
        method=response.request.method,
        url=str(response.request.url)
    )
