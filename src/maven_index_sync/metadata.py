"""Typed view over published index metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo
import re
from types import MappingProxyType
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Mapping


INDEX_FILE_PREFIX = "nexus-maven-repository-index"
PROPERTIES_NAME = f"{INDEX_FILE_PREFIX}.properties"

INDEX_ID_KEY = "nexus.index.id"
TIMESTAMP_KEY = "nexus.index.timestamp"
CHAIN_ID_KEY = "nexus.index.chain-id"
LAST_INCREMENTAL_KEY = "nexus.index.last-incremental"
INCREMENTAL_KEY_PREFIX = "nexus.index.incremental-"

TIMESTAMP_PATTERN = "%Y%m%d%H%M%S.%f %z"
"""strptime equivalent of the published `yyyyMMddHHmmss.SSS Z` pattern."""

_INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_timestamp(
    text: str,
    pattern: str = TIMESTAMP_PATTERN,
    tz: tzinfo = UTC,
) -> datetime:
    """Parse a published index timestamp.

    Values without an offset are taken to be in `tz`; the result is always
    expressed in `tz`.

    Raises:
        ValueError: If the text does not match the pattern.
    """
    parsed = datetime.strptime(text.strip(), pattern)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed.astimezone(tz)


def format_timestamp(value: datetime, tz: tzinfo = UTC) -> str:
    """Format a datetime the way index publishers write `nexus.index.timestamp`."""
    value = value.astimezone(tz)
    return f"{value:%Y%m%d%H%M%S}.{value.microsecond // 1000:03d} {value:%z}"


def parse_counter(value: str | None) -> int | None:
    """Parse an incremental counter, returning None when absent or not an integer."""
    if value is None or not _INTEGER.fullmatch(value):
        return None
    return int(value)


@dataclass(frozen=True)
class IndexMetadata:
    """Immutable, typed view over one loaded metadata mapping.

    Only `index_id` is significant for identity; every other field may be
    missing or unparsable, in which case it is None (or empty).
    """

    properties: Mapping[str, str] = field(repr=False)
    """The full original mapping, read-only."""

    index_id: str | None = None
    """Logical identity of the published index."""

    published_at: datetime | None = None
    """When the index was published, None if missing or unparsable."""

    chain_id: str | None = None
    """Identity of the unbroken lineage of incremental publications."""

    last_incremental: int | None = None
    """Counter of the newest published incremental chunk."""

    incremental_markers: frozenset[int] = frozenset()
    """Counters still enlisted by `nexus.index.incremental-*` keys."""

    @classmethod
    def from_properties(cls, properties: Mapping[str, str]) -> IndexMetadata:
        frozen = MappingProxyType(dict(properties))
        markers = {
            counter
            for key, value in frozen.items()
            if key.startswith(INCREMENTAL_KEY_PREFIX)
            and (counter := parse_counter(value)) is not None
        }
        return cls(
            properties=frozen,
            index_id=frozen.get(INDEX_ID_KEY),
            published_at=_parse_optional_timestamp(frozen.get(TIMESTAMP_KEY)),
            chain_id=frozen.get(CHAIN_ID_KEY),
            last_incremental=parse_counter(frozen.get(LAST_INCREMENTAL_KEY)),
            incremental_markers=frozenset(markers),
        )

    @property
    def raw_timestamp(self) -> str | None:
        return self.properties.get(TIMESTAMP_KEY)


def _parse_optional_timestamp(text: str | None) -> datetime | None:
    if text is None:
        return None
    try:
        return parse_timestamp(text)
    except ValueError:
        return None
