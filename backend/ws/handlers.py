"""
Socket.IO event handlers.
"""
import base64
import binascii
import logging
from flask import request
from flask_socketio import emit

from errors import InvalidSession

logger = logging.getLogger(__name__)


def coerce_audio(audio_data):
    """
    Normalise the ``audioData`` field to bytes.
    Accepts binary attachments, lists of byte values and base64 strings.
    """
    if audio_data is None:
        return b""
    if isinstance(audio_data, (bytes, bytearray, memoryview)):
        return bytes(audio_data)
    if isinstance(audio_data, str):
        try:
            return base64.b64decode(audio_data, validate=True)
        except binascii.Error as e:
            raise ValueError("audioData is not valid base64") from e
    if isinstance(audio_data, (list, tuple)):
        try:
            return bytes(audio_data)
        except (TypeError, ValueError) as e:
            raise ValueError("audioData list must hold byte values") from e
    raise ValueError(f"unsupported audioData type {type(audio_data).__name__}")


def register_socket_handlers(socketio, pipeline):
    """Register all Socket.IO event handlers."""

    @socketio.on("connect")
    def on_connect():
        logger.info("[WS] client connected: %s", request.sid)

    @socketio.on("disconnect")
    def on_disconnect(*args):
        logger.info("[WS] client disconnected: %s", request.sid)
        pipeline.disconnect(request.sid)

    @socketio.on("start-session")
    def on_start_session(data):
        session_id = (data or {}).get("sessionId")
        if not session_id:
            emit("error", {"message": "sessionId is required"})
            return

        emit("session-started", pipeline.start_session(request.sid, session_id))

    @socketio.on("audio-chunk")
    def on_audio_chunk(data):
        data = data or {}
        session_id = data.get("sessionId")

        try:
            raw = coerce_audio(data.get("audioData"))
            ack = pipeline.receive_chunk(request.sid, session_id, raw, data.get("metadata"))
        except (InvalidSession, ValueError) as e:
            emit("error", {"message": str(e)})
            return

        # acknowledge before any transcription work
        emit("chunk-received", ack)

        pipeline.maybe_dispatch(request.sid, session_id)

    @socketio.on("stop-session")
    def on_stop_session(data):
        session_id = (data or {}).get("sessionId")
        logger.info("[WS] stop-session received session=%s", session_id)

        stopped = pipeline.stop_session(request.sid, session_id)
        if stopped is not None:
            emit("session-stopped", stopped)
