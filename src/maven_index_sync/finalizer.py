"""Persist remote metadata locally once a sync session has been applied."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

from maven_index_sync.log import get_logger
from maven_index_sync.metadata import PROPERTIES_NAME
from maven_index_sync.properties import store_properties


if TYPE_CHECKING:
    from maven_index_sync.metadata import IndexMetadata
    from maven_index_sync.resources import ResourceHandler, WritableResourceHandler


logger = get_logger(__name__)

DEFAULT_COMMENT = "Maven Indexer Reader"


def finalize(
    remote: ResourceHandler,
    local: WritableResourceHandler | None,
    remote_metadata: IndexMetadata,
    comment: str = DEFAULT_COMMENT,
) -> None:
    """Close both handlers, storing the remote metadata into `local` first.

    Only call this once everything the session produced has been applied,
    otherwise the next session plans against chunks that were never absorbed.
    The local handler is closed even if saving fails; the failure propagates.
    """
    if local is None:
        remote.close()
        return
    try:
        remote.close()
        with io.BytesIO() as buffer:
            store_properties(remote_metadata.properties, buffer, comment)
            buffer.seek(0)
            local.save(PROPERTIES_NAME, buffer)
        logger.info("Stored index metadata locally", index_id=remote_metadata.index_id)
    finally:
        local.close()
