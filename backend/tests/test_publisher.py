"""Tests for the word publisher."""

import pytest

from errors import PublishError
from services.publisher import WordPublisher, tokenize
from session_store import MemorySessionStore


class FlakyStore(MemorySessionStore):
    """Fails the write of one particular word."""

    def __init__(self, bad_word):
        super().__init__()
        self.bad_word = bad_word

    def create_or_append_word(self, session_id, word):
        if word == self.bad_word:
            raise PublishError("write rejected")
        return super().create_or_append_word(session_id, word)


def test_tokenize_lowercases_and_drops_empty_tokens():
    assert tokenize("  Hello\tWORLD \n again  ") == ["hello", "world", "again"]
    assert tokenize("") == []
    assert tokenize(None) == []
    assert tokenize("   ") == []


def test_words_mode_writes_one_entry_per_word(store):
    publisher = WordPublisher(store)

    assert publisher.publish("s1", "The Quick fox") == 3

    assert [w.word for w in store.get_session("s1").words] == ["the", "quick", "fox"]


def test_phrase_mode_writes_a_single_entry(store):
    publisher = WordPublisher(store, mode="phrase")

    assert publisher.publish("s1", "The  Quick fox") == 1

    assert [w.word for w in store.get_session("s1").words] == ["the quick fox"]


def test_blank_text_writes_nothing(store):
    assert WordPublisher(store).publish("s1", "   ") == 0
    assert store.list_sessions() == []


def test_failed_write_does_not_abort_remaining_words():
    store = FlakyStore(bad_word="quick")
    publisher = WordPublisher(store)

    assert publisher.publish("s1", "the quick fox") == 2

    assert [w.word for w in store.get_session("s1").words] == ["the", "fox"]


def test_unknown_mode_rejected(store):
    with pytest.raises(ValueError):
        WordPublisher(store, mode="sentences")
