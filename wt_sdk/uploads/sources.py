"""
Uploadable sources.
Local files and in-memory buffers that can be sent as transfer or board files.
"""

import io
import logging
import os
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import BinaryIO, ContextManager, Iterator, Union

from wt_sdk.core.errors import ValidationError
from wt_sdk.schemas.common import FileParam
from wt_sdk.utils.names import sanitize_name

logger = logging.getLogger(__name__)


class Uploadable(ABC):
    """
    Something with a name and a size that can be read from byte 0.

    Subclasses implement `open()`; the stream it yields is owned by the
    caller for the duration of the `with` block and closed on exit.
    """

    def __init__(self, name: str, size: int):
        self._name = name
        self._size = size

    @property
    def name(self) -> str:
        return self._name

    @property
    def size(self) -> int:
        return self._size

    @abstractmethod
    def open(self) -> ContextManager[BinaryIO]:
        """Open the source for reading from byte 0."""

    def to_param(self) -> FileParam:
        return FileParam(name=self.name, size=self.size)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, size={self.size})"


class LocalFile(Uploadable):
    """A file on disk. Name and size come from a stat of the path."""

    def __init__(self, path: Union[str, os.PathLike]):
        self.path = os.fspath(path)
        try:
            stat = os.stat(self.path)
        except OSError as e:
            raise ValidationError(f"cannot read {self.path}: {e}") from e

        if not os.path.isfile(self.path):
            raise ValidationError(f"not a regular file: {self.path}")

        name = sanitize_name(os.path.basename(self.path))
        if not name:
            raise ValidationError(f"blank name after sanitizing {self.path}")

        super().__init__(name, stat.st_size)

    @contextmanager
    def open(self) -> Iterator[BinaryIO]:
        with open(self.path, "rb") as fh:
            logger.debug(f"Opened {self.path} for upload")
            yield fh


class Buffer(Uploadable):
    """In-memory bytes sent as a file."""

    def __init__(self, name: str, data: bytes):
        if not data:
            raise ValidationError("blank content")
        if not name:
            raise ValidationError("blank name")

        clean = sanitize_name(name)
        if not clean:
            raise ValidationError(f"blank name after sanitizing {name!r}")

        self.data = bytes(data)
        super().__init__(clean, len(self.data))

    @classmethod
    def from_string(cls, content: str, name: str, encoding: str = "utf-8") -> "Buffer":
        return cls(name, content.encode(encoding))

    @contextmanager
    def open(self) -> Iterator[BinaryIO]:
        with io.BytesIO(self.data) as stream:
            yield stream


def as_uploadable(value) -> Uploadable:
    """
    Coerce a caller-supplied value into an Uploadable.

    Accepts Uploadable instances, paths (str or os.PathLike) and open file
    objects that expose a `name` pointing at a file on disk.

    Raises:
        ValidationError: If the value is of an unsupported type
    """
    if isinstance(value, Uploadable):
        return value
    if isinstance(value, (str, os.PathLike)):
        return LocalFile(value)
    if isinstance(value, io.IOBase) and isinstance(getattr(value, "name", None), str):
        return LocalFile(value.name)
    raise ValidationError(
        f"unsupported source type {type(value).__name__}; "
        "allowed types are str, os.PathLike, file objects, Buffer and LocalFile"
    )
