"""
Error types shared by the audio pipeline, the adapters and the session store.
"""


class TranscriptionBackendError(Exception):
    """Base class for a tier that could not produce a transcription."""

    def __init__(self, tier, reason):
        super().__init__(f"{tier}: {reason}")
        self.tier = tier
        self.reason = reason


class BackendUnavailable(TranscriptionBackendError):
    """The tier's dependency (service, network, credential) is absent."""


class BackendError(TranscriptionBackendError):
    """The tier's dependency answered with an error or a malformed body."""


class InvalidSession(Exception):
    """A chunk arrived for an idle connection or for another session."""


class PublishError(Exception):
    """A word could not be written to the session store."""


class SessionNotFound(LookupError):
    """No speech session with the given id."""


class BatchInFlight(RuntimeError):
    """A batch is already being transcribed for this session."""
