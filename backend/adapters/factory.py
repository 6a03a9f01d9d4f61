"""Tier factory for transcription adapters.

Builds the ordered tier list from ``STT_TIERS``. Cloud tiers without a
credential are skipped, and the simulation tier is always the last one.
"""
import logging

from adapters.deepgram_adapter import DeepgramAdapter
from adapters.local_whisper_adapter import LocalWhisperAdapter
from adapters.openai_adapter import OpenAIWhisperAdapter
from adapters.simulation_adapter import SimulationAdapter
import config

logger = logging.getLogger(__name__)

_ALIAS_MAP = {
    "local": "local",
    "whisper": "local",
    "ollama": "local",
    "openai": "openai",
    "cloud": "openai",
    "deepgram": "deepgram",
    "dg": "deepgram",
    "simulation": "simulation",
    "fallback": "simulation",
    "sim": "simulation",
}


def build_tier(name):
    """Instantiate one tier by name. Returns None when its credential is missing."""
    key = _ALIAS_MAP.get(name.strip().lower())
    if key == "local":
        return LocalWhisperAdapter()
    if key == "openai":
        if not config.OPENAI_API_KEY:
            logger.info("[STT] openai tier skipped: no OPENAI_API_KEY")
            return None
        return OpenAIWhisperAdapter()
    if key == "deepgram":
        if not config.DEEPGRAM_API_KEY:
            logger.info("[STT] deepgram tier skipped: no DEEPGRAM_API_KEY")
            return None
        return DeepgramAdapter()
    if key == "simulation":
        return SimulationAdapter(seed=config.SIMULATION_SEED)
    raise ValueError(f"Unknown transcription tier: {name}")


def build_tiers(names=None):
    """Build the ordered tier list; duplicates are ignored, simulation goes last."""
    tiers = []
    seen = set()
    for name in names if names is not None else config.STT_TIERS:
        tier = build_tier(name)
        if tier is None or tier.name in seen or tier.name == SimulationAdapter.name:
            continue
        seen.add(tier.name)
        tiers.append(tier)

    tiers.append(SimulationAdapter(seed=config.SIMULATION_SEED))

    logger.info("[STT] tiers: %s", " -> ".join(t.name for t in tiers))
    return tiers


def report_tiers(tiers):
    """Log which tiers are reachable right now."""
    for position, tier in enumerate(tiers, start=1):
        status = "enabled" if tier.is_available() else "unreachable"
        logger.info("[BOOT]  Tier %d - %s: %s", position, tier.name, status)
