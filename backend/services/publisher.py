"""
Word publisher - recognised text -> session store.
"""
import logging

from errors import PublishError

logger = logging.getLogger(__name__)

MODES = ("words", "phrase")


def tokenize(text):
    """Whitespace split, lower-cased, empty tokens dropped."""
    if not text:
        return []
    return [w.lower() for w in text.split() if w]


class WordPublisher:
    def __init__(self, store, mode="words"):
        if mode not in MODES:
            raise ValueError(f"Unknown publish mode: {mode}")
        self.store = store
        self.mode = mode

    def publish(self, session_id, text):
        """
        Write the words of ``text`` to the store.
        Returns the number of entries written.
        """
        words = tokenize(text)
        if not words:
            return 0

        entries = words if self.mode == "words" else [" ".join(words)]

        written = 0
        for entry in entries:
            try:
                self.store.create_or_append_word(session_id, entry)
                written += 1
                logger.debug("[STORE] word saved: %r for session %s", entry, session_id)
            except PublishError as e:
                logger.error("[STORE] error saving word %r for session %s: %s", entry, session_id, e)

        return written
