"""
Async client for the WeTransfer API.
Typed models, authorization and a chunked upload engine shared by
transfers and boards.
"""

__version__ = "0.1.0"

from wt_sdk.client import Client  # noqa: F401
from wt_sdk.core.errors import (  # noqa: F401
    AggregatedFileError,
    AggregatedTransferError,
    CancellationError,
    ChunkUploadError,
    SignedURLError,
    SourceReadError,
    TransportError,
    ValidationError,
    WTError,
)
from wt_sdk.services.boards import new_link  # noqa: F401
from wt_sdk.uploads.sources import Buffer, LocalFile, Uploadable  # noqa: F401
