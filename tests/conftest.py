"""Test configuration and shared fixtures."""

from __future__ import annotations

import io
from typing import BinaryIO

import pytest

from maven_index_sync.metadata import PROPERTIES_NAME
from maven_index_sync.properties import dumps_properties


TIMESTAMP = "20240115103000.123 +0000"


def index_properties(
    index_id: str | None = "central",
    *,
    chain_id: str | None = "chain-1",
    last_incremental: int | str | None = None,
    markers: list[int | str] | None = None,
    timestamp: str | None = TIMESTAMP,
) -> dict[str, str]:
    """Build a metadata mapping as an index publisher would write it."""
    props: dict[str, str] = {}
    if index_id is not None:
        props["nexus.index.id"] = index_id
    if timestamp is not None:
        props["nexus.index.timestamp"] = timestamp
    if chain_id is not None:
        props["nexus.index.chain-id"] = chain_id
    if last_incremental is not None:
        props["nexus.index.last-incremental"] = str(last_incremental)
    for i, marker in enumerate(markers or []):
        props[f"nexus.index.incremental-{i}"] = str(marker)
    return props


class TrackedStream(io.BytesIO):
    """BytesIO that reports open/close to an event log."""

    def __init__(
        self,
        name: str,
        data: bytes,
        events: list[tuple[str, str]],
        *,
        fail_close: bool = False,
    ):
        super().__init__(data)
        self.name = name
        self._events = events
        self._fail_close = fail_close

    def close(self) -> None:
        if self._fail_close and not self.closed:
            self._fail_close = False
            msg = f"cannot close {self.name}"
            raise OSError(msg)
        if not self.closed:
            self._events.append(("close", self.name))
        super().close()


class MemoryHandler:
    """In-memory writable resource handler recording every interaction."""

    def __init__(
        self,
        resources: dict[str, bytes] | None = None,
        *,
        events: list[tuple[str, str]] | None = None,
        fail_open: set[str] | None = None,
        open_errors: dict[str, Exception] | None = None,
        fail_close: set[str] | None = None,
        fail_save: bool = False,
    ):
        self.resources = dict(resources or {})
        self.events = events if events is not None else []
        self.fail_open = fail_open or set()
        self.open_errors = open_errors or {}
        self.fail_close = fail_close or set()
        self.fail_save = fail_save
        self.closed = False
        self.streams: list[TrackedStream] = []

    def open(self, name: str) -> BinaryIO:
        if name in self.fail_open:
            msg = f"cannot open {name}"
            raise OSError(msg)
        if name in self.open_errors:
            raise self.open_errors[name]
        if name not in self.resources:
            raise FileNotFoundError(name)
        self.events.append(("open", name))
        stream = TrackedStream(
            name, self.resources[name], self.events, fail_close=name in self.fail_close
        )
        self.streams.append(stream)
        return stream

    def save(self, name: str, stream: BinaryIO) -> None:
        if self.fail_save:
            msg = f"cannot save {name}"
            raise OSError(msg)
        self.events.append(("save", name))
        self.resources[name] = stream.read()

    def close(self) -> None:
        self.events.append(("close-handler", "handler"))
        self.closed = True


def handler_with(props: dict[str, str] | None, **kwargs) -> MemoryHandler:
    """Create a handler holding the given metadata and every chunk it might need."""
    resources: dict[str, bytes] = {}
    if props is not None:
        resources[PROPERTIES_NAME] = dumps_properties(props).encode("latin-1")
    resources["nexus-maven-repository-index.gz"] = b"full"
    for counter in range(1, 20):
        resources[f"nexus-maven-repository-index.{counter}.gz"] = f"chunk-{counter}".encode()
    return MemoryHandler(resources, **kwargs)


@pytest.fixture
def remote() -> MemoryHandler:
    """Remote publishing chain-1 up to incremental 8, still enlisting 6-8."""
    return handler_with(index_properties(last_incremental=8, markers=[6, 7, 8]))


@pytest.fixture
def local() -> MemoryHandler:
    """Local copy that last applied incremental 5 of chain-1."""
    return handler_with(index_properties(last_incremental=5, markers=[3, 4, 5]))
