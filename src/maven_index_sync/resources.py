"""Resource handlers giving byte-stream access to named index resources."""

from __future__ import annotations

import shutil
from typing import TYPE_CHECKING, Any, BinaryIO, Protocol, runtime_checkable

from upath import UPath

from maven_index_sync.exceptions import ResourceClosedError
from maven_index_sync.log import get_logger


if TYPE_CHECKING:
    import os


logger = get_logger(__name__)


@runtime_checkable
class ResourceHandler(Protocol):
    """Read access to named resources of one index location."""

    def open(self, name: str) -> BinaryIO:
        """Open the named resource for reading.

        Raises:
            FileNotFoundError: If the resource does not exist.
        """
        ...

    def close(self) -> None:
        """Release the handler."""
        ...


@runtime_checkable
class WritableResourceHandler(ResourceHandler, Protocol):
    """Resource handler that can also store resources."""

    def save(self, name: str, stream: BinaryIO) -> None:
        """Store the content of `stream` under `name`, replacing existing content."""
        ...


class FsspecResourceHandler:
    """Resource handler for any location fsspec can reach.

    Works for local directories as well as `memory://`, `http(s)://` and other
    fsspec protocols. Extra keyword arguments are passed on as storage options.
    """

    def __init__(self, root: str | os.PathLike[str], **storage_options: Any):
        self.root = UPath(root, **storage_options)
        self.closed = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.root)!r})"

    def _path(self, name: str) -> UPath:
        if self.closed:
            msg = f"Resource handler for {self.root} is closed"
            raise ResourceClosedError(msg)
        return self.root / name

    def open(self, name: str) -> BinaryIO:
        path = self._path(name)
        logger.debug("Opening resource", path=str(path))
        return path.open("rb")  # type: ignore[return-value]

    def save(self, name: str, stream: BinaryIO) -> None:
        path = self._path(name)
        logger.debug("Saving resource", path=str(path))
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as target:
            shutil.copyfileobj(stream, target)

    def close(self) -> None:
        self.closed = True
