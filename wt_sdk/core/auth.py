"""
Authorization for the WeTransfer API.
Exchanges the API key for a bearer token.
"""

import logging

from wt_sdk.core.errors import TransportError
from wt_sdk.core.http import APIClient
from wt_sdk.schemas.common import AuthorizeResponse

logger = logging.getLogger(__name__)


async def authorize(api: APIClient) -> str:
    """
    Authorize the client and store the bearer token on it.

    Args:
        api: REST transport carrying the API key

    Returns:
        The bearer token

    Raises:
        TransportError: If the API rejects the key or returns no token
    """
    response = await api.request("POST", "authorize", response_model=AuthorizeResponse)

    if response is None or not response.token:
        raise TransportError("authorize returned no token", method="POST", url=str(api.build_url("authorize")))

    api.token = response.token
    logger.info("Client authorized")
    return response.token
