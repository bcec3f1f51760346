"""Errors raised while negotiating and running an index sync session."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Phase of a sync session in which an error happened."""

    CONSTRUCTION = "construction"
    """Session could not be set up. No session exists, nothing was fetched."""

    ITERATION = "iteration"
    """Chunk consumption was aborted. The caller decides whether to retry."""

    FINALIZATION = "finalization"
    """Local state was not updated. Treat the local copy as not synchronized."""

    USAGE = "usage"
    """A closed session or resource handler was used. Nothing was read or written."""


class IndexSyncError(Exception):
    """Base class for all index sync errors."""

    kind: ErrorKind = ErrorKind.CONSTRUCTION


class CorruptMetadataError(IndexSyncError):
    """Index metadata could not be parsed."""

    kind = ErrorKind.CONSTRUCTION


class IdentityMismatchError(IndexSyncError):
    """Local and remote metadata belong to different indexes."""

    kind = ErrorKind.CONSTRUCTION

    def __init__(self, local_id: str | None, remote_id: str | None):
        self.local_id = local_id
        self.remote_id = remote_id
        msg = f"Local and remote index IDs do not match or are missing: {local_id}, {remote_id}"
        super().__init__(msg)


class ChunkOpenError(IndexSyncError):
    """A chunk resource could not be opened (or its predecessor closed)."""

    kind = ErrorKind.ITERATION

    def __init__(self, chunk_name: str):
        self.chunk_name = chunk_name
        super().__init__(f"IO problem while switching to chunk {chunk_name!r}")


class ResourceClosedError(IndexSyncError):
    """A resource handler was used after it was closed."""

    kind = ErrorKind.USAGE
