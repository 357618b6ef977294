"""
Transfers service.
Creates transfers, uploads their files, then completes and finalizes them.
"""

import logging
from typing import List, Optional

from wt_sdk.core.errors import AggregatedTransferError, TransportError, ValidationError
from wt_sdk.core.http import APIClient
from wt_sdk.schemas.transfers import CompletedFile, CompleteFileRequest, Transfer, TransferRequest
from wt_sdk.uploads.descriptor import check_unique_names, pair_by_name
from wt_sdk.uploads.orchestrator import UploadOrchestrator
from wt_sdk.uploads.sources import Uploadable, as_uploadable
from wt_sdk.uploads.targets import transfer_target

logger = logging.getLogger(__name__)


class TransfersService:
    """Transfer endpoints of the API."""

    def __init__(self, api: APIClient, orchestrator: UploadOrchestrator):
        self.api = api
        self.orchestrator = orchestrator

    async def create(self, message: Optional[str], *sources) -> Transfer:
        """
        Create a transfer, upload every source and finalize it.

        Args:
            message: Optional message shown to recipients
            *sources: Buffers, local files, paths or open file objects

        Returns:
            The finalized transfer, with its download URL

        Raises:
            ValidationError: Before any network call, for empty or invalid sources
            AggregatedTransferError: If any chunk failed; nothing is completed then
            TransportError: If creating, completing or finalizing fails
        """
        uploadables = [as_uploadable(source) for source in sources]
        check_unique_names(uploadables)

        transfer = await self.create_transfer(message, uploadables)
        target = transfer.upload_target()

        file_transfers = pair_by_name(uploadables, transfer.files)
        await self.orchestrator.upload_all(target, file_transfers)

        await self.complete(transfer)
        return await self.finalize(target.owner_id)

    async def create_transfer(self, message: Optional[str], sources: List[Uploadable]) -> Transfer:
        """Announce the files of a new transfer and return its remote record."""
        if not sources:
            raise ValidationError("blank files")

        request = TransferRequest(
            message=message,
            files=[source.to_param() for source in sources]
        )
        transfer = await self.api.request("POST", "transfers", request, response_model=Transfer)
        if transfer is None or not transfer.id:
            raise TransportError(
                "create transfer returned no id",
                method="POST",
                url=str(self.api.build_url("transfers"))
            )

        logger.info(f"Created transfer {transfer.id} with {len(transfer.files)} file(s)")
        return transfer

    async def complete(self, transfer: Transfer) -> List[CompletedFile]:
        """
        Mark every file of the transfer as uploaded.

        Each file is completed independently, but the result is all or
        nothing: any failure raises and no records are returned.

        Raises:
            AggregatedTransferError: If completing one or more files failed
        """
        target = transfer.upload_target()
        completed = []
        errors = []

        for remote in transfer.files:
            part_numbers = remote.multipart.part_numbers if remote.multipart else 0
            try:
                record = await self.api.request(
                    "PUT",
                    target.upload_complete_path(remote.id or ""),
                    CompleteFileRequest(part_numbers=part_numbers or 0),
                    response_model=CompletedFile
                )
            except TransportError as e:
                logger.warning(f"Completing file {remote.id} of transfer {target.owner_id} failed: {e}")
                errors.append(e)
                continue
            completed.append(record or CompletedFile(id=remote.id))

        if errors:
            raise AggregatedTransferError(target.owner_id, errors, action="completing transfer")

        return completed

    async def finalize(self, transfer_id: str) -> Transfer:
        """
        Close the transfer. It is immutable and downloadable afterwards.

        Only call this once `complete` succeeded for every file.
        """
        path = f"{transfer_target(transfer_id).base_path}/finalize"
        transfer = await self.api.request("PUT", path, response_model=Transfer)
        if transfer is None:
            raise TransportError("finalize returned no transfer", method="PUT", url=str(self.api.build_url(path)))

        logger.info(f"Finalized transfer {transfer_id} ({transfer.state}): {transfer.url}")
        return transfer

    async def find(self, transfer_id: str) -> Transfer:
        """Retrieve a transfer by id."""
        path = transfer_target(transfer_id).base_path
        transfer = await self.api.request("GET", path, response_model=Transfer)
        if transfer is None:
            raise TransportError("find transfer returned no transfer", method="GET", url=str(self.api.build_url(path)))
        return transfer
