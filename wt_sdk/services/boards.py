"""
Boards service.
Creates boards and adds links and files to them. Boards have no finalize
step: they stay mutable after files are completed.
"""

import logging
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from wt_sdk.core.errors import AggregatedTransferError, TransportError, ValidationError
from wt_sdk.core.http import APIClient
from wt_sdk.schemas.boards import AddFilesRequest, Board, BoardRequest, Item, Link
from wt_sdk.uploads.descriptor import check_unique_names, pair_by_name
from wt_sdk.uploads.orchestrator import UploadOrchestrator
from wt_sdk.uploads.sources import as_uploadable
from wt_sdk.uploads.targets import board_target

logger = logging.getLogger(__name__)


def new_link(url: str, title: Optional[str] = None) -> Link:
    """
    Build a validated link.

    Raises:
        ValidationError: If the URL is not absolute
    """
    try:
        return Link(url=url, title=title)
    except PydanticValidationError as e:
        raise ValidationError(f"invalid link {url!r}") from e


class BoardsService:
    """Board endpoints of the API."""

    def __init__(self, api: APIClient, orchestrator: UploadOrchestrator):
        self.api = api
        self.orchestrator = orchestrator

    async def create(self, name: str, description: Optional[str] = None) -> Board:
        """Create an empty board. Name is required, description is optional."""
        if not name or not name.strip():
            raise ValidationError("blank name")

        board = await self.api.request(
            "POST", "boards", BoardRequest(name=name, description=description), response_model=Board
        )
        if board is None or not board.id:
            raise TransportError(
                "create board returned no id", method="POST", url=str(self.api.build_url("boards"))
            )
        logger.info(f"Created board {board.id}")
        return board

    async def find(self, board_id: str) -> Board:
        """Retrieve a board by id."""
        path = board_target(board_id).base_path
        board = await self.api.request("GET", path, response_model=Board)
        if board is None:
            raise TransportError("find board returned no board", method="GET", url=str(self.api.build_url(path)))
        return board

    async def add_links(self, board: Board, *links: Optional[Link]) -> List[Item]:
        """
        Add link items to a board.

        `None` entries are ignored.

        Raises:
            ValidationError: If no links remain
        """
        links = [link for link in links if link is not None]
        if not links:
            raise ValidationError("no links provided")

        target = board.upload_target()
        items = await self.api.request(
            "POST", f"{target.base_path}/links", links, response_model=List[Item]
        )
        logger.info(f"Added {len(links)} link(s) to board {target.owner_id}")
        return items or []

    async def add_files(self, board: Board, *sources) -> List[Item]:
        """
        Register files on a board, upload them and mark them complete.

        Args:
            board: Board to add the files to
            *sources: Buffers, local files, paths or open file objects

        Returns:
            The board file items

        Raises:
            ValidationError: Before any network call, for empty or invalid sources
            AggregatedTransferError: If any chunk failed; nothing is completed then
        """
        uploadables = [as_uploadable(source) for source in sources]
        check_unique_names(uploadables)

        target = board.upload_target()
        items = await self.api.request(
            "POST",
            f"{target.base_path}/files",
            AddFilesRequest(files=[source.to_param() for source in uploadables]),
            response_model=List[Item]
        )
        items = items or []
        logger.info(f"Registered {len(items)} file(s) on board {target.owner_id}")

        file_transfers = pair_by_name(uploadables, items)
        await self.orchestrator.upload_all(target, file_transfers)

        await self.complete(board, [file_transfer.remote for file_transfer in file_transfers])
        return items

    async def complete(self, board: Board, items: List[Item]) -> None:
        """
        Mark board file items as uploaded.

        Raises:
            AggregatedTransferError: If completing one or more items failed
        """
        target = board.upload_target()
        errors = []

        for item in items:
            try:
                await self.api.request("PUT", target.upload_complete_path(item.id or ""))
            except TransportError as e:
                logger.warning(f"Completing item {item.id} of board {target.owner_id} failed: {e}")
                errors.append(e)

        if errors:
            raise AggregatedTransferError(target.owner_id, errors, action="completing board")
