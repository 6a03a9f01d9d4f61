"""
Local Whisper adapter - talks to a Whisper service on the local network.

The service is expected to expose the OpenAI-compatible
``/v1/audio/transcriptions`` endpoint (faster-whisper-server, LocalAI,
whisper.cpp server with the OpenAI shim, ...).
"""
import logging
import os
import httpx

from adapters.base import TranscriptionAdapter, clean_text, temporary_audio_file
from errors import BackendError, BackendUnavailable
import config

logger = logging.getLogger(__name__)

TRANSCRIBE_PATH = "/v1/audio/transcriptions"


class LocalWhisperAdapter(TranscriptionAdapter):
    name = "local"

    def __init__(
        self,
        base_url=None,
        model=None,
        language=None,
        temp_dir=None,
        timeout=None,
        http_client=None,
    ):
        self.base_url = (base_url or config.LOCAL_STT_URL).rstrip("/")
        self.model = model or config.LOCAL_STT_MODEL
        self.language = language or config.STT_LANGUAGE
        self.temp_dir = temp_dir or config.TEMP_DIR
        self._http = http_client or httpx.Client(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else config.STT_TIMEOUT,
        )

    def is_available(self):
        """Ask the service for its health; used for the boot report only."""
        try:
            return self._http.get("/health", timeout=2.0).is_success
        except httpx.HTTPError:
            return False

    def transcribe(self, audio, session_id="anonymous"):
        with temporary_audio_file(audio, session_id, self.temp_dir) as path:
            try:
                with open(path, "rb") as f:
                    response = self._http.post(
                        TRANSCRIBE_PATH,
                        files={"file": (os.path.basename(path), f, "audio/webm")},
                        data={
                            "model": self.model,
                            "language": self.language,
                            "response_format": "json",
                        },
                    )
            except httpx.TransportError as e:
                raise BackendUnavailable(self.name, f"service unreachable at {self.base_url}: {e}") from e

        if response.status_code >= 400:
            raise BackendError(self.name, f"HTTP {response.status_code}: {response.text[:200]}")

        try:
            payload = response.json()
        except ValueError as e:
            raise BackendError(self.name, "response body is not JSON") from e

        if not isinstance(payload, dict) or "text" not in payload:
            raise BackendError(self.name, "response has no 'text' field")

        text = payload["text"]
        if text is not None and not isinstance(text, str):
            raise BackendError(self.name, f"unexpected text type {type(text).__name__}")

        logger.debug("[STT] local transcribed %d bytes for session %s", len(audio), session_id)
        return clean_text(text)
