"""
Speech capture backend - entrypoint.

This is the main entry point that wires together all modules.
"""
if __name__ == "__main__":
    import eventlet
    eventlet.monkey_patch()

import logging

from flask import Flask
from flask_socketio import SocketIO
from flask_cors import CORS

import config
from adapters.factory import build_tiers, report_tiers
from api.routes import register_routes
from services.accumulator import SessionAudioAccumulator
from services.pipeline import AudioPipeline
from services.publisher import WordPublisher
from services.sessions import SessionRegistry
from services.transcription import TranscriptionOrchestrator
from services.users import UserStore
from session_store import create_store
from ws.handlers import register_socket_handlers


def configure_logging(level=None):
    logging.basicConfig(
        level=(level or config.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(store=None, tiers=None, spawn=None, async_mode=None, batch_threshold=None, publish_mode=None):
    """
    Build the Flask app and its Socket.IO server.
    Returns (app, socketio).
    """
    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.SECRET_KEY

    # Enable CORS for all routes (allows frontend to fetch from different port)
    CORS(app, origins=config.CORS_ORIGINS)

    socketio = SocketIO(app, cors_allowed_origins=config.CORS_ORIGINS, async_mode=async_mode)

    store = store if store is not None else create_store()
    tiers = tiers if tiers is not None else build_tiers()

    publisher = WordPublisher(store, mode=publish_mode or config.WORD_PUBLISH_MODE)
    orchestrator = TranscriptionOrchestrator(tiers, publisher)
    accumulator = SessionAudioAccumulator(
        threshold=batch_threshold,
        spawn=spawn or socketio.start_background_task,
    )
    pipeline = AudioPipeline(SessionRegistry(), accumulator, orchestrator, store, notify=socketio.emit)

    register_routes(app, store, UserStore(), tiers=orchestrator.tier_names)
    register_socket_handlers(socketio, pipeline)

    app.extensions["audio_pipeline"] = pipeline
    return app, socketio


# Main entry point
if __name__ == "__main__":
    configure_logging()
    config.log_boot_info()
    app, socketio = create_app(async_mode="eventlet")
    report_tiers(app.extensions["audio_pipeline"].orchestrator.tiers)
    socketio.run(app, host="0.0.0.0", port=config.PORT, debug=True, use_reloader=False)
