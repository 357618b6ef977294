"""
Upload orchestration.
Drives every chunk of a file through URL resolution and upload, and
aggregates failures per file and per transfer.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from wt_sdk.core.config import settings
from wt_sdk.core.errors import (
    AggregatedFileError,
    AggregatedTransferError,
    ChunkUploadError,
    SignedURLError,
    SourceReadError,
    ValidationError,
)
from wt_sdk.uploads.chunks import ChunkUploader
from wt_sdk.uploads.descriptor import FileTransfer
from wt_sdk.uploads.resolver import SignedURLResolver
from wt_sdk.uploads.targets import UploadTarget

logger = logging.getLogger(__name__)


class UploadOrchestrator:
    """
    Uploads files chunk by chunk.

    A failing chunk never stops its siblings: chunks are independent writes,
    so every failure is collected and reported together, letting callers
    retry only what is missing. Local read failures and cancellation are
    not collected; they abort the upload immediately.
    """

    def __init__(
        self,
        resolver: SignedURLResolver,
        uploader: ChunkUploader,
        max_concurrent_files: Optional[int] = None
    ):
        self.resolver = resolver
        self.uploader = uploader
        if max_concurrent_files is None:
            max_concurrent_files = settings.WT_MAX_CONCURRENT_FILES
        if max_concurrent_files < 1:
            raise ValidationError(f"max_concurrent_files must be at least 1, got {max_concurrent_files}")
        self.max_concurrent_files = max_concurrent_files

    async def upload(self, target: UploadTarget, file_transfer: FileTransfer) -> None:
        """
        Upload all chunks of one file.

        Args:
            target: Transfer or board the file belongs to
            file_transfer: Local source paired with its remote file

        Raises:
            AggregatedFileError: If one or more chunks failed
            SourceReadError: If reading the local source failed
            CancellationError: If the caller cancelled the upload
        """
        file_id = file_transfer.file_id
        multipart_id, part_numbers, chunk_size = file_transfer.multipart_values()

        if part_numbers <= 0:
            logger.debug(f"File {file_id} has no parts to upload")
            return

        errors: List[Exception] = []

        with file_transfer.source.open() as stream:
            for ordinal in range(1, part_numbers + 1):
                try:
                    # Off the event loop so sibling files keep uploading
                    chunk = await asyncio.to_thread(stream.read, chunk_size)
                except OSError as e:
                    raise SourceReadError(
                        f"reading part {ordinal} of {file_transfer.source.name} failed: {e}",
                        name=file_transfer.source.name
                    ) from e

                if not chunk:
                    logger.warning(
                        f"Source {file_transfer.source.name} ended before part {ordinal} "
                        f"of {part_numbers}"
                    )
                    break

                try:
                    upload_url = await self.resolver.resolve(target, file_id, ordinal, multipart_id)
                    await self.uploader.upload_bytes(upload_url, chunk, ordinal=ordinal)
                except (SignedURLError, ChunkUploadError) as e:
                    errors.append(e)
                    continue

                logger.debug(f"Uploaded part {ordinal}/{part_numbers} of file {file_id}")

        if errors:
            error = AggregatedFileError(target.owner_id, file_id, errors)
            logger.warning(str(error))
            raise error

        logger.info(f"Uploaded file {file_id} ({file_transfer.source.name}) to {target.owner_id}")

    async def upload_all(self, target: UploadTarget, file_transfers: Sequence[FileTransfer]) -> None:
        """
        Upload several files of the same transfer or board.

        At most `max_concurrent_files` files are in flight; with the default
        of 1 files go strictly one after another.

        Raises:
            AggregatedTransferError: If any file failed, listing only the failed files
        """
        semaphore = asyncio.Semaphore(self.max_concurrent_files)

        async def run(file_transfer: FileTransfer) -> Optional[AggregatedFileError]:
            async with semaphore:
                try:
                    await self.upload(target, file_transfer)
                except AggregatedFileError as e:
                    return e
                return None

        if self.max_concurrent_files == 1:
            results = [await run(file_transfer) for file_transfer in file_transfers]
        else:
            tasks = [asyncio.create_task(run(file_transfer)) for file_transfer in file_transfers]
            try:
                results = await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

        errors = [result for result in results if result is not None]
        if errors:
            error = AggregatedTransferError(target.owner_id, errors)
            logger.error(str(error))
            raise error
