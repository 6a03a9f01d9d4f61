"""
Audio pipeline - session lifecycle for the Socket.IO handlers.

Handlers translate wire events; this class owns the registry, the
accumulator and the orchestrator and decides when batches run.
"""
import logging
from functools import partial

from services.sessions import now_ms

logger = logging.getLogger(__name__)


def _drop(event, payload, to=None):
    logger.debug("[WS] no notifier, dropping %s for %s", event, to)


class AudioPipeline:
    def __init__(self, registry, accumulator, orchestrator, store, notify=None):
        self.registry = registry
        self.accumulator = accumulator
        self.orchestrator = orchestrator
        self.store = store
        self.notify = notify or _drop

    def start_session(self, sid, session_id):
        conn = self.registry.start(sid, session_id)
        try:
            self.store.ensure_session(session_id)
        except Exception:
            logger.exception("[STORE] could not create session %s", session_id)
        logger.info("[WS] session started: %s by %s", session_id, sid)
        return {"sessionId": session_id, "timestamp": conn.started_at}

    def receive_chunk(self, sid, session_id, audio, metadata=None):
        """Queue a chunk and return the acknowledgment payload. Raises InvalidSession."""
        self.registry.require(sid, session_id)
        chunk_number = self.registry.record_chunk(sid)
        pending = self.accumulator.append_chunk(session_id, audio)

        logger.debug(
            "[AUDIO] session=%s chunk=#%d bytes=%d pending=%d mime=%s",
            session_id, chunk_number, len(audio), pending, (metadata or {}).get("mimeType"),
        )
        return {"chunkNumber": chunk_number, "timestamp": now_ms()}

    def maybe_dispatch(self, sid, session_id):
        """Start a batch if the threshold is reached and the slot is free."""
        if not self.accumulator.should_dispatch(session_id):
            return False
        self.accumulator.dispatch(session_id, partial(self._process_batch, sid))
        return True

    def _process_batch(self, sid, session_id, audio):
        outcome = self.orchestrator.run(session_id, audio)

        if outcome.failed:
            self.notify(
                "transcription-error",
                {"sessionId": session_id, "error": "; ".join(outcome.failures) or "transcription failed"},
                to=sid,
            )
        elif outcome.text:
            self.notify(
                "transcription",
                {"sessionId": session_id, "text": outcome.text, "tier": outcome.tier},
                to=sid,
            )
        return outcome

    def stop_session(self, sid, session_id):
        """
        Flush what is left, tear the session down and return the
        ``session-stopped`` payload; None when the connection is idle.
        """
        conn = self.registry.get(sid)
        if conn is None:
            logger.info("[WS] stop-session for %s from idle sid=%s", session_id, sid)
            return None
        if conn.session_id != session_id:
            logger.warning(
                "[WS] stop-session for %s but sid=%s is recording %s", session_id, sid, conn.session_id
            )

        self.accumulator.flush_remaining(conn.session_id, partial(self._process_batch, sid))
        self.accumulator.dispose(conn.session_id)
        self.registry.stop(sid)

        logger.info("[WS] session stopped: %s", conn.session_id)
        return {
            "sessionId": conn.session_id,
            "chunksReceived": conn.chunks_received,
            "duration": conn.duration_ms,
        }

    def disconnect(self, sid):
        """Drop the connection; pending chunks are discarded, not flushed."""
        conn = self.registry.disconnect(sid)
        if conn is None:
            return None
        if conn.session_id not in self.registry.active_sessions():
            self.accumulator.dispose(conn.session_id)
        return conn
