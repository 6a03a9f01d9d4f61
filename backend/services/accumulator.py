"""
Per-session audio accumulation and batch dispatch.

Intake never waits on transcription: chunks are appended whatever the
state of the session's batch slot. The slot holds at most one running
batch per session, so batches for a session are transcribed one after
the other, in dispatch order.
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, List

from errors import BatchInFlight
import config

logger = logging.getLogger(__name__)


def run_inline(fn, *args, **kwargs):
    """Spawner that runs the batch in the caller's context."""
    fn(*args, **kwargs)
    return None


@dataclass
class AccumulatorState:
    chunks: List[bytes] = field(default_factory=list)
    count: int = 0
    processing: bool = False
    task: Any = None
    retired: bool = False


class SessionAudioAccumulator:
    """
    Session id -> pending chunks + single batch slot.

    ``spawn`` schedules a batch worker and returns a task handle; in the
    server it is ``socketio.start_background_task``.
    """

    def __init__(self, threshold=None, spawn=None):
        self.threshold = threshold if threshold is not None else config.BATCH_THRESHOLD
        if self.threshold < 1:
            raise ValueError("batch threshold must be at least 1 chunk")
        self._spawn = spawn or run_inline
        self._states = {}
        self._lock = threading.Lock()

    def __contains__(self, session_id):
        state = self._states.get(session_id)
        return state is not None and not state.retired

    def _state(self, session_id):
        state = self._states.get(session_id)
        if state is None:
            state = self._states[session_id] = AccumulatorState()
        return state

    def append_chunk(self, session_id, raw):
        """Queue a chunk. Returns the number of pending chunks."""
        with self._lock:
            state = self._state(session_id)
            state.chunks.append(raw)
            state.count += 1
            state.retired = False
            return state.count

    def pending_count(self, session_id):
        state = self._states.get(session_id)
        return state.count if state else 0

    def is_processing(self, session_id):
        state = self._states.get(session_id)
        return bool(state and state.processing)

    def should_dispatch(self, session_id):
        state = self._states.get(session_id)
        if state is None:
            return False
        return state.count >= self.threshold and not state.processing

    def _take(self, session_id):
        with self._lock:
            state = self._state(session_id)
            if state.processing:
                raise BatchInFlight(session_id)
            audio = b"".join(state.chunks)
            state.chunks = []
            state.count = 0
            state.processing = True
            state.task = None
            return state, audio

    def take_batch(self, session_id):
        """Remove all pending chunks as one buffer and occupy the batch slot."""
        return self._take(session_id)[1]

    def release_batch(self, session_id):
        """Free the batch slot, whether the batch succeeded or not."""
        with self._lock:
            state = self._states.get(session_id)
            if state is not None:
                state.processing = False
                state.task = None

    def _run(self, worker, session_id, audio, state):
        try:
            worker(session_id, audio)
        except Exception:
            logger.exception("[TX] batch worker failed for session %s", session_id)
        finally:
            # a disposed session keeps its entry until its last batch ends
            with self._lock:
                state.processing = False
                state.task = None
                if state.retired and self._states.get(session_id) is state:
                    del self._states[session_id]

    def dispatch(self, session_id, worker):
        """
        Take the pending batch and hand it to ``worker(session_id, audio)``
        through the spawner. Returns the task handle (None when run inline).
        """
        state, audio = self._take(session_id)
        logger.info("[TX] dispatching %d bytes for session %s", len(audio), session_id)
        task = self._spawn(self._run, worker, session_id, audio, state)

        with self._lock:
            # an inline spawner has already released the slot
            if state.processing and state.task is None:
                state.task = task
        return task

    def flush_remaining(self, session_id, worker):
        """
        Transcribe leftover chunks synchronously before teardown.
        Best-effort: errors are logged, never raised. Returns True if a
        batch was run.
        """
        state = self._states.get(session_id)
        if state is None or not state.chunks or state.processing:
            return False

        logger.info("[TX] processing remaining %d chunks for session %s", state.count, session_id)
        try:
            state, audio = self._take(session_id)
        except BatchInFlight:
            return False
        self._run(worker, session_id, audio, state)
        return True

    def dispose(self, session_id):
        """
        Drop all state for the session. Pending chunks are discarded.
        While a batch is in flight the entry stays, retired and busy, so a
        reconnect to the same session id cannot start a second batch.
        """
        with self._lock:
            state = self._states.get(session_id)
            if state is None:
                return False
            dropped = state.count
            if state.processing:
                state.chunks = []
                state.count = 0
                state.retired = True
            else:
                del self._states[session_id]
        if dropped:
            logger.info("[TX] dropped %d pending chunks for session %s", dropped, session_id)
        return True
