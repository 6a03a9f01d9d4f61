"""
Transcription service - tiered fallback over the configured adapters.

Tiers are tried one at a time in priority order. The first tier that
answers wins, including an answer of "no speech"; only a failure moves
on to the next tier. Results from different tiers are never mixed.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from errors import TranscriptionBackendError

logger = logging.getLogger(__name__)


@dataclass
class TranscriptionOutcome:
    text: Optional[str] = None
    tier: Optional[str] = None
    failures: List[str] = field(default_factory=list)

    @property
    def failed(self):
        """True when no tier produced an answer."""
        return self.tier is None


class TranscriptionOrchestrator:
    def __init__(self, tiers, publisher=None):
        if not tiers:
            raise ValueError("at least one transcription tier is required")
        self.tiers = list(tiers)
        self.publisher = publisher

    @property
    def tier_names(self):
        return [t.name for t in self.tiers]

    def run(self, session_id, audio):
        """Transcribe one batch. Never raises."""
        outcome = TranscriptionOutcome()

        logger.info("[STT] processing %d bytes of audio for session %s", len(audio), session_id)

        for position, tier in enumerate(self.tiers, start=1):
            started = time.monotonic()
            try:
                text = tier.transcribe(audio, session_id)
            except TranscriptionBackendError as e:
                logger.warning("[STT] [Tier %d] %s failed: %s", position, tier.name, e.reason)
                outcome.failures.append(f"{tier.name}: {e.reason}")
                continue
            except Exception as e:
                logger.exception("[STT] [Tier %d] %s crashed", position, tier.name)
                outcome.failures.append(f"{tier.name}: {e}")
                continue

            outcome.text = text
            outcome.tier = tier.name
            elapsed = time.monotonic() - started
            if text:
                logger.info(
                    "[STT] [Tier %d] %s transcribed %r for session %s (%.2fs)",
                    position, tier.name, text, session_id, elapsed,
                )
            else:
                logger.info("[STT] [Tier %d] %s: no speech detected for session %s", position, tier.name, session_id)
            break
        else:
            logger.error("[STT] all tiers failed for session %s", session_id)
            return outcome

        if outcome.text and self.publisher is not None:
            try:
                self.publisher.publish(session_id, outcome.text)
            except Exception:
                logger.exception("[STORE] publishing failed for session %s", session_id)

        return outcome

    def transcribe(self, session_id, audio):
        """Text of the batch, or None for no speech / total failure."""
        return self.run(session_id, audio).text
