"""
Common pieces for transcription tier adapters.

Every tier exposes ``transcribe(audio, session_id)`` which returns the
recognised text, ``None`` when no speech was detected, or raises
``BackendUnavailable`` / ``BackendError``.
"""
import logging
import os
import time
import uuid
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class TranscriptionAdapter:
    """Base class for a transcription tier."""

    name = "base"

    def transcribe(self, audio, session_id="anonymous"):
        raise NotImplementedError

    def is_available(self):
        return True

    def __repr__(self):
        return f"<{type(self).__name__} tier={self.name}>"


def clean_text(text):
    """Strip a backend answer; blank answers mean no speech."""
    if text is None:
        return None
    text = text.strip()
    return text or None


@contextmanager
def temporary_audio_file(audio, session_id, directory, suffix=".webm"):
    """
    Materialise a batch as a file for backends that need one.
    The file is removed on every exit path.
    """
    os.makedirs(directory, exist_ok=True)
    filename = f"{session_id}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{suffix}"
    path = os.path.join(directory, filename)

    with open(path, "wb") as f:
        f.write(audio)

    try:
        yield path
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("[STT] could not remove temp file %s: %s", path, e)
