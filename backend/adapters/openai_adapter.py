"""
OpenAI Whisper adapter - cloud tier.
"""
import logging
import openai

from adapters.base import TranscriptionAdapter, clean_text, temporary_audio_file
from errors import BackendError, BackendUnavailable
import config

logger = logging.getLogger(__name__)


class OpenAIWhisperAdapter(TranscriptionAdapter):
    name = "openai"

    def __init__(self, api_key=None, model=None, language=None, temp_dir=None, timeout=None, client=None):
        self.api_key = api_key if api_key is not None else config.OPENAI_API_KEY
        self.model = model or config.OPENAI_STT_MODEL
        self.language = language or config.STT_LANGUAGE
        self.temp_dir = temp_dir or config.TEMP_DIR
        self.timeout = timeout if timeout is not None else config.STT_TIMEOUT
        self._client = client

    def is_available(self):
        """Check if OpenAI is configured."""
        return bool(self.api_key)

    def _get_client(self):
        if self._client is None:
            self._client = openai.OpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    def transcribe(self, audio, session_id="anonymous"):
        if not self.api_key:
            raise BackendUnavailable(self.name, "OpenAI API key not configured")

        client = self._get_client()

        with temporary_audio_file(audio, session_id, self.temp_dir) as path:
            try:
                with open(path, "rb") as f:
                    transcription = client.audio.transcriptions.create(
                        file=f,
                        model=self.model,
                        language=self.language,
                        response_format="json",
                    )
            except (openai.APIConnectionError, openai.APITimeoutError) as e:
                raise BackendUnavailable(self.name, str(e)) from e
            except openai.APIError as e:
                raise BackendError(self.name, str(e)) from e

        if not hasattr(transcription, "text"):
            raise BackendError(self.name, "transcription response has no text")
        if transcription.text is not None and not isinstance(transcription.text, str):
            raise BackendError(self.name, "malformed transcription response")

        return clean_text(transcription.text)
