"""Decide between a full and an incremental index update."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from maven_index_sync.exceptions import IdentityMismatchError
from maven_index_sync.log import get_logger
from maven_index_sync.metadata import INDEX_FILE_PREFIX


if TYPE_CHECKING:
    from maven_index_sync.metadata import IndexMetadata


logger = get_logger(__name__)

FULL_CHUNK_NAME = f"{INDEX_FILE_PREFIX}.gz"


class SyncMode(Enum):
    """How the local copy gets updated."""

    FULL = "full"
    """Fetch the whole index."""

    INCREMENTAL = "incremental"
    """Fetch only the chunks published since the local counter."""


class FullSyncReason(Enum):
    """Why an incremental update was not possible.

    None of these are errors: each one downgrades the decision to a full update.
    """

    NO_LOCAL_STATE = "no_local_state"
    CHAIN_MISMATCH = "chain_mismatch"
    COUNTER_UNPARSABLE = "counter_unparsable"
    CHAIN_PRUNED = "chain_pruned"


@dataclass(frozen=True)
class SyncDecision:
    """Outcome of planning: the mode and the ordered chunks to fetch."""

    mode: SyncMode
    chunk_names: tuple[str, ...]
    """Chunk resource names in fetch (and apply) order."""

    reason: FullSyncReason | None = None
    """Set for full updates only."""

    @property
    def is_incremental(self) -> bool:
        return self.mode is SyncMode.INCREMENTAL

    @classmethod
    def full(cls, reason: FullSyncReason) -> SyncDecision:
        return cls(SyncMode.FULL, (FULL_CHUNK_NAME,), reason)

    @classmethod
    def incremental(cls, first: int, last: int) -> SyncDecision:
        names = tuple(chunk_name(counter) for counter in range(first, last + 1))
        return cls(SyncMode.INCREMENTAL, names)


def chunk_name(counter: int) -> str:
    """Resource name of the incremental chunk with the given counter."""
    return f"{INDEX_FILE_PREFIX}.{counter}.gz"


def decide(local: IndexMetadata | None, remote: IndexMetadata) -> SyncDecision:
    """Compute the sync decision for a local copy against a remote index.

    Args:
        local: Metadata of the local copy, None if there is none yet
        remote: Metadata currently published by the remote

    Raises:
        IdentityMismatchError: If local is given and the index IDs differ or are missing.
    """
    if local is None:
        decision = SyncDecision.full(FullSyncReason.NO_LOCAL_STATE)
    else:
        if local.index_id is None or remote.index_id is None or local.index_id != remote.index_id:
            raise IdentityMismatchError(local.index_id, remote.index_id)
        decision = _plan_against(local, remote)
    logger.debug(
        "Planned index sync",
        mode=decision.mode.value,
        reason=decision.reason.value if decision.reason else None,
        chunks=len(decision.chunk_names),
    )
    return decision


def _plan_against(local: IndexMetadata, remote: IndexMetadata) -> SyncDecision:
    if local.chain_id is None or remote.chain_id is None or local.chain_id != remote.chain_id:
        return SyncDecision.full(FullSyncReason.CHAIN_MISMATCH)

    current = local.last_incremental
    latest = remote.last_incremental
    if current is None or latest is None:
        return SyncDecision.full(FullSyncReason.COUNTER_UNPARSABLE)

    # the remote must still enlist the chunk local stopped at, or the one right after it
    if not {current, current + 1} & remote.incremental_markers:
        return SyncDecision.full(FullSyncReason.CHAIN_PRUNED)

    return SyncDecision.incremental(current + 1, latest)
