"""Shared fixtures: stand-in tiers, spawners and app factories."""

import pytest

from adapters.base import TranscriptionAdapter
from app import create_app
from errors import BackendError, BackendUnavailable
from services.accumulator import run_inline
from session_store import MemorySessionStore


class FixedAdapter(TranscriptionAdapter):
    """Answers every batch with the same text and records what it saw."""

    def __init__(self, text, name="fixed"):
        self.text = text
        self.name = name
        self.calls = []

    def transcribe(self, audio, session_id="anonymous"):
        self.calls.append((session_id, audio))
        return self.text


class FailingAdapter(TranscriptionAdapter):
    def __init__(self, name="failing", unavailable=True):
        self.name = name
        self.unavailable = unavailable
        self.calls = 0

    def transcribe(self, audio, session_id="anonymous"):
        self.calls += 1
        if self.unavailable:
            raise BackendUnavailable(self.name, "service unreachable")
        raise BackendError(self.name, "malformed response")


class DeferredSpawner:
    """Keeps batch workers until the test runs them, like a busy event loop."""

    def __init__(self):
        self.pending = []

    def __call__(self, fn, *args, **kwargs):
        task = (fn, args, kwargs)
        self.pending.append(task)
        return task

    def run_all(self):
        while self.pending:
            fn, args, kwargs = self.pending.pop(0)
            fn(*args, **kwargs)


def payloads(events, name):
    """Payloads of the Socket.IO events called ``name``."""
    return [evt["args"][0] for evt in events if evt["name"] == name]


@pytest.fixture
def store():
    return MemorySessionStore()


@pytest.fixture
def make_app(store):
    """Factory for (app, socketio) with test tiers and an inline spawner."""

    def _make(tiers, spawn=run_inline, batch_threshold=5, publish_mode="words"):
        return create_app(
            store=store,
            tiers=tiers,
            spawn=spawn,
            async_mode="threading",
            batch_threshold=batch_threshold,
            publish_mode=publish_mode,
        )

    return _make
