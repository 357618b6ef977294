"""
Client exceptions.

Every failure raised by the library derives from WTError. Cancellation is
the exception: it stays a plain asyncio.CancelledError (exported as
CancellationError) so task.cancel(), asyncio.timeout() and wait_for() keep
working for callers.
"""

import asyncio
from contextlib import contextmanager
from typing import Iterator, List, Optional


class WTError(Exception):
    """
    Base exception for all client errors.

    Attributes:
        message: Human-readable error message
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(WTError):
    """
    Local validation failed before any network call was made.

    Raised for blank names, blank content, empty file lists, unsupported
    source types and unmatched sources.
    """


class TransportError(WTError):
    """
    A REST call failed.

    Carries the HTTP status (None when the request never got a response)
    and the message reported by the server.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        method: Optional[str] = None,
        url: Optional[str] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.method = method
        self.url = url

    def __str__(self) -> str:
        if self.method and self.url:
            status = self.status_code if self.status_code is not None else "-"
            return f"{self.method} {self.url}: {status} {self.message}"
        return self.message


class SignedURLError(TransportError):
    """Resolving the upload URL of one chunk failed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
        ordinal: Optional[int] = None
    ):
        super().__init__(message, status_code=status_code, method=method, url=url)
        self.ordinal = ordinal

    def __str__(self) -> str:
        return f"request upload URL part {self.ordinal} error, {super().__str__()}"


class ChunkUploadError(WTError):
    """
    Object storage rejected (or never received) the bytes of one chunk.

    Attributes:
        method: HTTP method used (always PUT)
        url: Signed URL the chunk was sent to
        status_code: Storage response status, None on transport failure
        body: Bounded prefix of the storage error body
        ordinal: 1-based chunk number, when known
    """

    def __init__(
        self,
        message: str,
        method: str = "PUT",
        url: str = "",
        status_code: Optional[int] = None,
        body: str = "",
        ordinal: Optional[int] = None
    ):
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code
        self.body = body
        self.ordinal = ordinal

    def __str__(self) -> str:
        prefix = f"upload part {self.ordinal} error, " if self.ordinal is not None else ""
        if self.status_code is None:
            return f"{prefix}{self.message}"
        return f"{prefix}upload bytes error {self.method} {self.url}: {self.status_code} {self.body}"


class SourceReadError(WTError):
    """Reading a local source failed mid-upload. Never aggregated."""

    def __init__(self, message: str, name: str = ""):
        super().__init__(message)
        self.name = name


class _AggregatedError(WTError):
    """Shared formatting for multi-errors."""

    def __init__(self, message: str, errors: List[BaseException]):
        super().__init__(message)
        self.errors = list(errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __str__(self) -> str:
        lines = [f"{self.message}:"]
        lines.extend(f"  - {err}" for err in self.errors)
        return "\n".join(lines)


class AggregatedFileError(_AggregatedError):
    """One or more chunks of a single file failed."""

    def __init__(self, owner_id: str, file_id: str, errors: List[BaseException]):
        super().__init__(
            f"upload {owner_id} file {file_id} failed with {len(errors)} error(s)",
            errors
        )
        self.owner_id = owner_id
        self.file_id = file_id


class AggregatedTransferError(_AggregatedError):
    """One or more files of a transfer or board operation failed."""

    def __init__(self, owner_id: str, errors: List[BaseException], action: str = "upload"):
        super().__init__(
            f"{action} {owner_id} failed with {len(errors)} error(s)",
            errors
        )
        self.owner_id = owner_id
        self.action = action


# Cancellation stays the exact asyncio.CancelledError type: asyncio.timeout()
# on Python 3.11 only converts that exact type into TimeoutError.
CancellationError = asyncio.CancelledError

DEFAULT_CANCEL_REASON = "operation cancelled"


def cancellation_reason(exc: BaseException) -> str:
    """Return the message a cancellation was raised with."""
    if exc.args and exc.args[0]:
        return str(exc.args[0])
    return DEFAULT_CANCEL_REASON


@contextmanager
def surface_cancellation() -> Iterator[None]:
    """
    Make sure cancellation of the wrapped await carries a reason.

    The cancel message is kept as the first argument; a cancel without one
    is re-raised with DEFAULT_CANCEL_REASON.
    """
    try:
        yield
    except asyncio.CancelledError as exc:
        if exc.args and exc.args[0]:
            raise
        raise asyncio.CancelledError(DEFAULT_CANCEL_REASON) from exc
