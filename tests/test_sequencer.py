"""Tests for one-at-a-time chunk access."""

from __future__ import annotations

from conftest import MemoryHandler, handler_with
import pytest

from maven_index_sync.exceptions import ChunkOpenError, ErrorKind
from maven_index_sync.planner import chunk_name
from maven_index_sync.sequencer import ChunkSequencer, SequencerState


NAMES = [chunk_name(6), chunk_name(7), chunk_name(8)]


def test_yields_chunks_in_order():
    handler = handler_with(None)
    sequencer = ChunkSequencer(handler, NAMES)
    contents = [(chunk.name, chunk.read()) for chunk in sequencer]
    assert contents == [
        (NAMES[0], b"chunk-6"),
        (NAMES[1], b"chunk-7"),
        (NAMES[2], b"chunk-8"),
    ]


def test_closes_previous_before_opening_next():
    handler = handler_with(None)
    sequencer = ChunkSequencer(handler, NAMES)
    for _ in sequencer:
        pass
    assert handler.events == [
        ("open", NAMES[0]),
        ("close", NAMES[0]),
        ("open", NAMES[1]),
        ("close", NAMES[1]),
        ("open", NAMES[2]),
    ]


def test_never_two_open_at_once():
    handler = handler_with(None)
    sequencer = ChunkSequencer(handler, NAMES)
    while sequencer.has_next():
        next(sequencer)
        assert sum(not stream.closed for stream in handler.streams) == 1


def test_last_chunk_stays_open_until_close():
    handler = handler_with(None)
    sequencer = ChunkSequencer(handler, NAMES)
    last = list(sequencer)[-1]
    assert not sequencer.has_next()
    assert sequencer.state is SequencerState.EXHAUSTED
    assert not last.closed
    sequencer.close()
    assert last.closed
    assert sequencer.current is None


def test_has_next_opens_nothing():
    handler = handler_with(None)
    sequencer = ChunkSequencer(handler, NAMES)
    assert sequencer.state is SequencerState.IDLE
    assert sequencer.has_next()
    assert handler.events == []
    next(sequencer)
    assert sequencer.state is SequencerState.ITERATING


def test_empty_sequence():
    sequencer = ChunkSequencer(MemoryHandler(), [])
    assert not sequencer.has_next()
    assert sequencer.state is SequencerState.EXHAUSTED
    assert list(sequencer) == []


def test_open_failure_aborts_without_retry():
    handler = handler_with(None, fail_open={NAMES[1]})
    sequencer = ChunkSequencer(handler, NAMES)
    first = next(sequencer)
    with pytest.raises(ChunkOpenError) as exc_info:
        next(sequencer)
    error = exc_info.value
    assert error.chunk_name == NAMES[1]
    assert error.kind is ErrorKind.ITERATION
    assert isinstance(error.__cause__, OSError)
    assert first.closed
    assert sequencer.state is SequencerState.FAILED
    assert not sequencer.has_next()
    assert list(sequencer) == []
    assert ("open", NAMES[2]) not in handler.events


def test_missing_chunk_is_an_open_error():
    sequencer = ChunkSequencer(MemoryHandler(), ["nexus-maven-repository-index.gz"])
    with pytest.raises(ChunkOpenError):
        next(sequencer)


def test_close_stops_iteration():
    handler = handler_with(None)
    sequencer = ChunkSequencer(handler, NAMES)
    first = next(sequencer)
    sequencer.close()
    assert first.closed
    assert not sequencer.has_next()
    assert list(sequencer) == []


def test_chunk_handle_context_manager():
    handler = handler_with(None)
    sequencer = ChunkSequencer(handler, NAMES[:1])
    with next(sequencer) as chunk:
        assert chunk.read(5) == b"chunk"
    assert chunk.closed


def test_unexpected_open_error_aborts_without_skipping():
    handler = handler_with(None, open_errors={NAMES[1]: RuntimeError("server error")})
    sequencer = ChunkSequencer(handler, NAMES)
    next(sequencer)
    with pytest.raises(RuntimeError, match="server error"):
        next(sequencer)
    assert sequencer.state is SequencerState.FAILED
    assert not sequencer.has_next()
    assert list(sequencer) == []
    assert ("open", NAMES[2]) not in handler.events


def test_failure_to_close_previous_is_an_open_error():
    handler = handler_with(None, fail_close={NAMES[0]})
    sequencer = ChunkSequencer(handler, NAMES)
    next(sequencer)
    with pytest.raises(ChunkOpenError) as exc_info:
        next(sequencer)
    assert exc_info.value.chunk_name == NAMES[1]
    assert isinstance(exc_info.value.__cause__, OSError)
    assert sequencer.state is SequencerState.FAILED
    assert not sequencer.has_next()
    assert list(sequencer) == []
    assert handler.events == [("open", NAMES[0])]
