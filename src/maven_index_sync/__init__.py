"""Incremental synchronization of published Maven repository indexes.

This package provides:
- Loading of the published index metadata (`.properties`)
- Planning of full vs. incremental updates against a local copy
- Sequential, one-chunk-at-a-time access to the chunks to apply
- Recording of the applied update for the next incremental session
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from maven_index_sync.config import SyncConfig
from maven_index_sync.exceptions import (
    ChunkOpenError,
    CorruptMetadataError,
    ErrorKind,
    IdentityMismatchError,
    IndexSyncError,
    ResourceClosedError,
)
from maven_index_sync.finalizer import finalize
from maven_index_sync.metadata import (
    INDEX_FILE_PREFIX,
    PROPERTIES_NAME,
    IndexMetadata,
    format_timestamp,
    parse_timestamp,
)
from maven_index_sync.planner import FullSyncReason, SyncDecision, SyncMode, decide
from maven_index_sync.properties import dumps_properties, load_properties, loads_properties
from maven_index_sync.reader import IndexReader
from maven_index_sync.resources import (
    FsspecResourceHandler,
    ResourceHandler,
    WritableResourceHandler,
)
from maven_index_sync.sequencer import ChunkHandle, ChunkSequencer


try:
    __version__ = version("maven-index-sync")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "INDEX_FILE_PREFIX",
    "PROPERTIES_NAME",
    "ChunkHandle",
    "ChunkOpenError",
    "ChunkSequencer",
    "CorruptMetadataError",
    "ErrorKind",
    "FsspecResourceHandler",
    "FullSyncReason",
    "IdentityMismatchError",
    "IndexMetadata",
    "IndexReader",
    "IndexSyncError",
    "ResourceClosedError",
    "ResourceHandler",
    "SyncConfig",
    "SyncDecision",
    "SyncMode",
    "WritableResourceHandler",
    "__version__",
    "decide",
    "dumps_properties",
    "finalize",
    "format_timestamp",
    "load_properties",
    "loads_properties",
    "parse_timestamp",
]
