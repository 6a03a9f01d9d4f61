"""Tests for per-session audio accumulation and the batch slot."""

import pytest

from errors import BatchInFlight
from services.accumulator import SessionAudioAccumulator

from conftest import DeferredSpawner


def test_take_batch_returns_all_pending_chunks_in_order():
    """Chunks are concatenated in arrival order and the count resets."""
    acc = SessionAudioAccumulator(threshold=5)
    for chunk in (b"a", b"bb", b"ccc"):
        acc.append_chunk("s1", chunk)

    assert acc.pending_count("s1") == 3
    assert acc.take_batch("s1") == b"abbccc"
    assert acc.pending_count("s1") == 0
    assert acc.is_processing("s1")


def test_no_chunk_lost_or_duplicated_across_batches():
    """Each take returns exactly the chunks appended since the previous one."""
    acc = SessionAudioAccumulator(threshold=2)
    seen = []
    sizes = [3, 1, 4, 2]
    n = 0
    for size in sizes:
        for _ in range(size):
            acc.append_chunk("s1", bytes([n]))
            n += 1
        assert acc.pending_count("s1") == size
        seen.append(acc.take_batch("s1"))
        assert acc.pending_count("s1") == 0
        acc.release_batch("s1")

    assert b"".join(seen) == bytes(range(n))
    assert [len(b) for b in seen] == sizes


def test_second_take_while_outstanding_is_rejected():
    acc = SessionAudioAccumulator(threshold=1)
    acc.append_chunk("s1", b"x")
    acc.take_batch("s1")
    acc.append_chunk("s1", b"y")

    with pytest.raises(BatchInFlight):
        acc.take_batch("s1")

    # the rejected take left the pending chunk alone
    assert acc.pending_count("s1") == 1
    acc.release_batch("s1")
    assert acc.take_batch("s1") == b"y"


def test_should_dispatch_requires_threshold_and_free_slot():
    acc = SessionAudioAccumulator(threshold=3)
    assert not acc.should_dispatch("unknown")

    acc.append_chunk("s1", b"1")
    acc.append_chunk("s1", b"2")
    assert not acc.should_dispatch("s1")
    acc.append_chunk("s1", b"3")
    assert acc.should_dispatch("s1")

    acc.take_batch("s1")
    for chunk in (b"4", b"5", b"6"):
        acc.append_chunk("s1", chunk)
    assert not acc.should_dispatch("s1")

    acc.release_batch("s1")
    assert acc.should_dispatch("s1")


def test_intake_continues_while_batch_in_flight():
    """Appends never wait on the running batch; the next batch waits for the slot."""
    spawner = DeferredSpawner()
    acc = SessionAudioAccumulator(threshold=2, spawn=spawner)
    batches = []

    acc.append_chunk("s1", b"a")
    acc.append_chunk("s1", b"b")
    acc.dispatch("s1", lambda sid, audio: batches.append(audio))

    for chunk in (b"c", b"d", b"e"):
        acc.append_chunk("s1", chunk)
    assert acc.pending_count("s1") == 3
    assert not acc.should_dispatch("s1")
    assert batches == []

    spawner.run_all()
    assert batches == [b"ab"]
    assert not acc.is_processing("s1")
    assert acc.should_dispatch("s1")

    acc.dispatch("s1", lambda sid, audio: batches.append(audio))
    spawner.run_all()
    assert batches == [b"ab", b"cde"]


def test_slot_released_when_worker_fails():
    acc = SessionAudioAccumulator(threshold=1)

    def boom(session_id, audio):
        raise RuntimeError("backend exploded")

    acc.append_chunk("s1", b"a")
    acc.dispatch("s1", boom)

    assert not acc.is_processing("s1")
    acc.append_chunk("s1", b"b")
    assert acc.should_dispatch("s1")


def test_dispatch_keeps_task_handle_while_running():
    spawner = DeferredSpawner()
    acc = SessionAudioAccumulator(threshold=1, spawn=spawner)
    acc.append_chunk("s1", b"a")

    task = acc.dispatch("s1", lambda sid, audio: None)

    assert acc._states["s1"].task is task
    spawner.run_all()
    assert acc._states["s1"].task is None


def test_flush_remaining_runs_below_threshold():
    acc = SessionAudioAccumulator(threshold=5)
    batches = []
    for chunk in (b"1", b"2", b"3"):
        acc.append_chunk("s1", chunk)

    assert acc.flush_remaining("s1", lambda sid, audio: batches.append(audio))
    assert batches == [b"123"]
    assert acc.pending_count("s1") == 0


def test_flush_remaining_skipped_while_batch_in_flight():
    spawner = DeferredSpawner()
    acc = SessionAudioAccumulator(threshold=1, spawn=spawner)
    acc.append_chunk("s1", b"a")
    acc.dispatch("s1", lambda sid, audio: None)
    acc.append_chunk("s1", b"b")

    assert not acc.flush_remaining("s1", lambda sid, audio: None)
    assert acc.pending_count("s1") == 1


def test_flush_remaining_swallows_worker_errors():
    acc = SessionAudioAccumulator(threshold=5)
    acc.append_chunk("s1", b"a")

    def boom(session_id, audio):
        raise RuntimeError("nope")

    assert acc.flush_remaining("s1", boom)
    assert not acc.is_processing("s1")


def test_flush_remaining_with_nothing_pending():
    acc = SessionAudioAccumulator(threshold=5)
    assert not acc.flush_remaining("s1", lambda sid, audio: None)


def test_dispose_drops_pending_chunks():
    acc = SessionAudioAccumulator(threshold=5)
    acc.append_chunk("s1", b"a")

    assert acc.dispose("s1")
    assert "s1" not in acc
    assert acc.pending_count("s1") == 0
    assert not acc.dispose("s1")


def test_restarted_session_waits_for_batch_still_in_flight():
    """Disposing during a batch keeps the slot busy for a session restarted under the same id."""
    spawner = DeferredSpawner()
    acc = SessionAudioAccumulator(threshold=2, spawn=spawner)
    batches = []
    worker = lambda sid, audio: batches.append(audio)

    acc.append_chunk("s1", b"a")
    acc.append_chunk("s1", b"b")
    acc.dispatch("s1", worker)
    acc.append_chunk("s1", b"dropped")
    acc.dispose("s1")

    assert "s1" not in acc
    assert acc.pending_count("s1") == 0

    acc.append_chunk("s1", b"c")
    acc.append_chunk("s1", b"d")
    assert not acc.should_dispatch("s1")
    with pytest.raises(BatchInFlight):
        acc.take_batch("s1")
    assert len(spawner.pending) == 1

    spawner.run_all()
    assert batches == [b"ab"]
    assert acc.should_dispatch("s1")
    acc.dispatch("s1", worker)
    spawner.run_all()
    assert batches == [b"ab", b"cd"]


def test_disposed_session_is_removed_when_its_batch_ends():
    spawner = DeferredSpawner()
    acc = SessionAudioAccumulator(threshold=1, spawn=spawner)
    acc.append_chunk("s1", b"a")
    acc.dispatch("s1", lambda sid, audio: None)

    acc.dispose("s1")
    assert acc.is_processing("s1")

    spawner.run_all()
    assert not acc.is_processing("s1")
    assert "s1" not in acc._states


def test_sessions_are_independent():
    acc = SessionAudioAccumulator(threshold=1)
    acc.append_chunk("s1", b"a")
    acc.take_batch("s1")
    acc.append_chunk("s2", b"b")

    assert acc.should_dispatch("s2")
    assert acc.take_batch("s2") == b"b"


def test_threshold_must_be_positive():
    with pytest.raises(ValueError):
        SessionAudioAccumulator(threshold=0)
