"""
Configuration and constants for the backend.
"""
import logging
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Paths
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
TEMP_DIR = os.getenv("TEMP_DIR", os.path.join(BASE_DIR, "temp"))

# Server configuration
PORT = int(os.getenv("PORT", 4000))
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-in-production")
_origins = os.getenv("CORS_ORIGINS", "*").strip()
CORS_ORIGINS = "*" if _origins == "*" else [o.strip() for o in _origins.split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Batching: one chunk is roughly one second of audio
BATCH_THRESHOLD = int(os.getenv("BATCH_THRESHOLD", 5))

# Transcription tiers, tried in this order
STT_TIERS = [
    t.strip().lower()
    for t in os.getenv("STT_TIERS", "local,openai,deepgram,simulation").split(",")
    if t.strip()
]
STT_LANGUAGE = os.getenv("STT_LANGUAGE", "en")
STT_TIMEOUT = float(os.getenv("STT_TIMEOUT", 30))

# Local Whisper service (OpenAI-compatible endpoint)
LOCAL_STT_URL = os.getenv("LOCAL_STT_URL", "http://localhost:8080")
LOCAL_STT_MODEL = os.getenv("LOCAL_STT_MODEL", "whisper-tiny")

# OpenAI
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_STT_MODEL = os.getenv("OPENAI_STT_MODEL", "whisper-1")

# Deepgram
DEEPGRAM_API_KEY = os.getenv("DEEPGRAM_API_KEY")
DEEPGRAM_MODEL = os.getenv("DEEPGRAM_MODEL", "nova-2")

# Simulation tier
_seed = os.getenv("SIMULATION_SEED")
SIMULATION_SEED = int(_seed) if _seed else None

# "words" publishes one entry per token, "phrase" one entry per batch
WORD_PUBLISH_MODE = os.getenv("WORD_PUBLISH_MODE", "words").lower()

# MongoDB (optional, memory store otherwise)
MONGODB_URI = os.getenv("MONGODB_URI")
MONGODB_DB = os.getenv("MONGODB_DB", "speech_sessions")


def log_boot_info():
    """Boot logging."""
    logger.info("[BOOT] BASE_DIR=%s", BASE_DIR)
    logger.info("[BOOT] TEMP_DIR=%s", TEMP_DIR)
    logger.info("[BOOT] PORT=%s", PORT)
    logger.info("[BOOT] BATCH_THRESHOLD=%s STT_TIERS=%s", BATCH_THRESHOLD, ",".join(STT_TIERS))
    if not OPENAI_API_KEY:
        logger.warning("[WARN] OPENAI_API_KEY not found in .env - openai tier disabled")
    else:
        logger.info("[BOOT] OPENAI_API_KEY loaded (length=%d)", len(OPENAI_API_KEY))
    if not DEEPGRAM_API_KEY:
        logger.warning("[WARN] DEEPGRAM_API_KEY not found in .env - deepgram tier disabled")
    else:
        logger.info("[BOOT] DEEPGRAM_API_KEY loaded (length=%d)", len(DEEPGRAM_API_KEY))
