"""
Deepgram adapter - prerecorded transcription of a whole batch.
"""
import logging
import httpx
from deepgram import DeepgramClient

from adapters.base import TranscriptionAdapter, clean_text
from errors import BackendError, BackendUnavailable
import config

logger = logging.getLogger(__name__)


def create_client(api_key=None):
    """
    Create a new Deepgram client.
    Returns DeepgramClient instance.
    """
    return DeepgramClient(api_key=api_key or config.DEEPGRAM_API_KEY)


class DeepgramAdapter(TranscriptionAdapter):
    name = "deepgram"

    def __init__(self, api_key=None, model=None, language=None, client=None):
        self.api_key = api_key if api_key is not None else config.DEEPGRAM_API_KEY
        self.model = model or config.DEEPGRAM_MODEL
        self.language = language or config.STT_LANGUAGE
        self._client = client

    def is_available(self):
        """Check if Deepgram is configured."""
        return bool(self.api_key)

    def transcribe(self, audio, session_id="anonymous"):
        if not self.api_key:
            raise BackendUnavailable(self.name, "Deepgram API key not configured")

        if self._client is None:
            self._client = create_client(self.api_key)

        try:
            response = self._client.listen.v1.media.transcribe_file(
                request=audio,
                model=self.model,
                language=self.language,
                punctuate=True,
                smart_format=True,
            )
        except httpx.TransportError as e:
            raise BackendUnavailable(self.name, str(e)) from e
        except Exception as e:
            # SDK raises its own ApiError for non-2xx answers
            raise BackendError(self.name, str(e)) from e

        try:
            alternatives = response.results.channels[0].alternatives
        except (AttributeError, IndexError, TypeError) as e:
            raise BackendError(self.name, "malformed response: no channels") from e

        if not alternatives:
            return None

        transcript = getattr(alternatives[0], "transcript", None)
        if transcript is not None and not isinstance(transcript, str):
            raise BackendError(self.name, "malformed response: transcript is not text")

        logger.debug("[DG] transcribed %d bytes for session %s", len(audio), session_id)
        return clean_text(transcript)
