"""Forward-only, one-at-a-time access to planned index chunks."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, BinaryIO, Self

from maven_index_sync.exceptions import ChunkOpenError
from maven_index_sync.log import get_logger


if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

    from maven_index_sync.resources import ResourceHandler


logger = get_logger(__name__)


@dataclass
class ChunkHandle:
    """An opened chunk resource.

    Only valid until the sequencer that produced it advances or is closed.
    """

    name: str
    stream: BinaryIO

    def read(self, size: int = -1) -> bytes:
        return self.stream.read(size)

    @property
    def closed(self) -> bool:
        return self.stream.closed

    def close(self) -> None:
        self.stream.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


class SequencerState(Enum):
    IDLE = "idle"
    ITERATING = "iterating"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class ChunkSequencer(Iterator[ChunkHandle]):
    """Lazily opens chunks in planned order, keeping at most one open.

    Advancing closes the previously returned handle before opening the next.
    The last handle stays open until `close()` is called. A failure to switch
    chunks aborts the sequence; nothing is retried.
    """

    def __init__(self, handler: ResourceHandler, chunk_names: Sequence[str]):
        self._handler = handler
        self._names = tuple(chunk_names)
        self._position = 0
        self._current: ChunkHandle | None = None
        self.state = SequencerState.IDLE if self._names else SequencerState.EXHAUSTED

    @property
    def current(self) -> ChunkHandle | None:
        """The live handle, if any."""
        return self._current

    def has_next(self) -> bool:
        """Whether another chunk can be opened. Opens nothing."""
        return self.state is not SequencerState.FAILED and self._position < len(self._names)

    def __next__(self) -> ChunkHandle:
        if not self.has_next():
            raise StopIteration
        name = self._names[self._position]
        try:
            self._close_current()
            stream = self._handler.open(name)
        except OSError as e:
            self.state = SequencerState.FAILED
            logger.warning("Failed to open index chunk", chunk=name, error=str(e))
            raise ChunkOpenError(name) from e
        except BaseException:
            # any failure ends the sequence, so no chunk is ever skipped
            self.state = SequencerState.FAILED
            raise
        self._position += 1
        self._current = ChunkHandle(name, stream)
        self.state = (
            SequencerState.ITERATING if self.has_next() else SequencerState.EXHAUSTED
        )
        logger.debug("Opened index chunk", chunk=name, position=self._position)
        return self._current

    def close(self) -> None:
        """Close the live handle, if any. The sequence cannot be resumed afterwards."""
        self._close_current()
        if self.state is not SequencerState.FAILED:
            self._position = len(self._names)
            self.state = SequencerState.EXHAUSTED

    def _close_current(self) -> None:
        current, self._current = self._current, None
        if current is not None:
            current.close()
