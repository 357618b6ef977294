"""
File transfer descriptors.
Pairs a local Uploadable with the remote file the API registered for it.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from wt_sdk.core.errors import ValidationError
from wt_sdk.schemas.boards import Item
from wt_sdk.schemas.transfers import RemoteFile
from wt_sdk.uploads.sources import Uploadable

RemoteDescriptor = Union[RemoteFile, Item]


@dataclass(frozen=True)
class FileTransfer:
    """An Uploadable and its server-side identity."""
    source: Uploadable
    remote: RemoteDescriptor

    @property
    def file_id(self) -> str:
        return self.remote.id or ""

    @property
    def name(self) -> str:
        return self.remote.name or ""

    def multipart_values(self) -> Tuple[Optional[str], int, int]:
        """
        Return (multipart_id, part_numbers, chunk_size).

        Files without multipart info report zero parts and are not uploaded.
        """
        multipart = self.remote.multipart
        if multipart is None:
            return None, 0, 0
        return multipart.id, multipart.part_numbers or 0, multipart.chunk_size or 0


def check_unique_names(sources: Sequence[Uploadable]) -> None:
    """
    Reject source lists that pairing by name could not tell apart.

    Raises:
        ValidationError: If the list is empty or two sources share a name
    """
    if not sources:
        raise ValidationError("blank files")

    seen = set()
    duplicates = []
    for source in sources:
        if source.name in seen:
            duplicates.append(source.name)
        seen.add(source.name)

    if duplicates:
        raise ValidationError(f"duplicate file names: {', '.join(sorted(set(duplicates)))}")


def pair_by_name(
    sources: Sequence[Uploadable],
    remotes: Sequence[RemoteDescriptor]
) -> List[FileTransfer]:
    """
    Match every source with the remote file of the same name.

    Pairing follows the order of `remotes`; remote entries without a matching
    source (e.g. link items) are skipped.

    Raises:
        ValidationError: If any source has no remote counterpart
    """
    by_name = {source.name: source for source in sources}
    pairs = []
    matched = set()

    for remote in remotes:
        source = by_name.get(remote.name or "")
        if source is None or remote.name in matched:
            continue
        matched.add(remote.name)
        pairs.append(FileTransfer(source=source, remote=remote))

    unmatched = [source.name for source in sources if source.name not in matched]
    if unmatched:
        raise ValidationError(
            f"no remote file returned for: {', '.join(unmatched)}"
        )

    return pairs
