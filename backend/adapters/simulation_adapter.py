"""
Simulation adapter - last tier, never fails.
"""
import random

from adapters.base import TranscriptionAdapter

VOCABULARY = (
    "hello",
    "world",
    "test",
    "audio",
    "stream",
    "speech",
    "recognition",
    "system",
)


class SimulationAdapter(TranscriptionAdapter):
    name = "simulation"

    def __init__(self, seed=None, vocabulary=VOCABULARY):
        self._rng = random.Random(seed)
        self.vocabulary = tuple(vocabulary)

    def transcribe(self, audio, session_id="anonymous"):
        return self._rng.choice(self.vocabulary)
