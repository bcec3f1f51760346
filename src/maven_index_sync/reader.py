"""Index reader session handling incremental updates where possible."""

from __future__ import annotations

from typing import TYPE_CHECKING, Self

from maven_index_sync.exceptions import CorruptMetadataError, ResourceClosedError
from maven_index_sync.finalizer import DEFAULT_COMMENT, finalize
from maven_index_sync.log import get_logger
from maven_index_sync.metadata import PROPERTIES_NAME, TIMESTAMP_KEY, IndexMetadata
from maven_index_sync.planner import decide
from maven_index_sync.properties import load_properties
from maven_index_sync.sequencer import ChunkSequencer


if TYPE_CHECKING:
    from datetime import datetime
    from types import TracebackType

    from maven_index_sync.planner import SyncDecision
    from maven_index_sync.resources import ResourceHandler, WritableResourceHandler


logger = get_logger(__name__)


class IndexReader:
    """One sync session of a local index copy against a remote index.

    The decision between a full and an incremental update is made once, on
    construction. Iterating yields the chunks to apply, in order. After all
    of them have been integrated, `finalize_and_close()` stores the remote
    metadata locally so the next session can update incrementally. To abort
    without recording progress, call `close()` instead.

    Used as a context manager, a clean exit finalizes and an exit by exception
    only closes.
    """

    def __init__(
        self,
        local: WritableResourceHandler | None,
        remote: ResourceHandler,
        *,
        comment: str = DEFAULT_COMMENT,
    ):
        """Load metadata from both sides and plan the update.

        Args:
            local: Handler of the local copy, None to always read the full index
            remote: Handler of the published index
            comment: Provenance label written into the stored metadata

        Raises:
            ValueError: If no remote handler is given.
            IdentityMismatchError: If local and remote index IDs differ.
            CorruptMetadataError: If metadata cannot be parsed.
        """
        if remote is None:
            msg = "Remote resource handler is required"
            raise ValueError(msg)
        self._local = local
        self._remote = remote
        self._comment = comment
        self._sequencer: ChunkSequencer | None = None
        self._closed = False

        self.remote_metadata = IndexMetadata.from_properties(
            load_properties(remote.open(PROPERTIES_NAME))
        )
        self.local_metadata = self._load_local_metadata()
        self.decision: SyncDecision = decide(self.local_metadata, self.remote_metadata)
        # only the remote timestamp is reported, so a local one may be unparsable
        if self.remote_metadata.published_at is None:
            raw = self.remote_metadata.raw_timestamp
            msg = f"Index properties corrupted: invalid {TIMESTAMP_KEY} {raw!r}"
            raise CorruptMetadataError(msg)
        logger.info(
            "Index sync planned",
            index_id=self.index_id,
            incremental=self.is_incremental,
            chunks=len(self.chunk_names),
        )

    def _load_local_metadata(self) -> IndexMetadata | None:
        if self._local is None:
            return None
        try:
            stream = self._local.open(PROPERTIES_NAME)
        except FileNotFoundError:
            logger.info("No local index metadata, reading full index")
            return None
        return IndexMetadata.from_properties(load_properties(stream))

    @property
    def index_id(self) -> str | None:
        """Index context ID the published index has set."""
        return self.remote_metadata.index_id

    @property
    def published_timestamp(self) -> datetime:
        """When the remote index was last published.

        Always the remote metadata's timestamp. The local copy's timestamp is
        never consulted, so an unparsable local value does not fail the session.
        """
        assert self.remote_metadata.published_at is not None
        return self.remote_metadata.published_at

    @property
    def is_incremental(self) -> bool:
        """Whether only the diff since the last update will be read."""
        return self.decision.is_incremental

    @property
    def chunk_names(self) -> tuple[str, ...]:
        """Chunks to pull from the remote, in order. Empty if the local copy is current."""
        return self.decision.chunk_names

    @property
    def closed(self) -> bool:
        return self._closed

    def iterate(self) -> ChunkSequencer:
        """Start a new pass over the planned chunks.

        Any chunk still open from an earlier pass is closed first. The caller
        must either consume the sequence fully or close the session.
        """
        if self._closed:
            msg = "Index reader is closed"
            raise ResourceClosedError(msg)
        if self._sequencer is not None:
            self._sequencer.close()
        self._sequencer = ChunkSequencer(self._remote, self.chunk_names)
        return self._sequencer

    __iter__ = iterate

    def finalize_and_close(self) -> None:
        """Record the update locally and release all resources.

        Only call this once every chunk has been integrated. A failure to store
        the metadata propagates after the handlers have been closed.
        """
        if self._closed:
            return
        self._closed = True
        try:
            self._close_sequencer()
        except Exception:
            self._release_handlers()
            raise
        finalize(self._remote, self._local, self.remote_metadata, self._comment)

    def close(self) -> None:
        """Release all resources without recording the update locally."""
        if self._closed:
            return
        self._closed = True
        try:
            self._close_sequencer()
        finally:
            self._release_handlers()

    def _release_handlers(self) -> None:
        try:
            self._remote.close()
        finally:
            if self._local is not None:
                self._local.close()

    def _close_sequencer(self) -> None:
        if self._sequencer is not None:
            self._sequencer.close()
            self._sequencer = None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.finalize_and_close()
        else:
            self.close()
