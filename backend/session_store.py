"""
Speech session store - recognised words per session.

Two backends share one interface:
- MemorySessionStore: process-local, the default.
- MongoSessionStore: MongoDB, used when MONGODB_URI is set and reachable.
"""
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional

from pymongo import ASCENDING, MongoClient
from pymongo.errors import PyMongoError

from errors import PublishError, SessionNotFound
import config

logger = logging.getLogger(__name__)


def now_ms():
    return int(time.time() * 1000)


@dataclass
class SpeechWord:
    word: str
    timestamp: int

    def to_dict(self):
        return {"word": self.word, "timestamp": self.timestamp}


@dataclass
class SpeechSession:
    session_id: str
    words: List[SpeechWord] = field(default_factory=list)
    created_at: int = field(default_factory=now_ms)
    updated_at: int = field(default_factory=now_ms)

    def to_dict(self):
        return {
            "sessionId": self.session_id,
            "words": [w.to_dict() for w in self.words],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class AppendResult:
    is_new_session: bool
    word_count: int
    session: Optional[SpeechSession] = None


class MemorySessionStore:
    """In-memory store. Nothing survives a restart."""

    name = "memory"

    def __init__(self):
        self._sessions = {}
        self._lock = threading.Lock()

    def ensure_session(self, session_id):
        with self._lock:
            if session_id in self._sessions:
                return False
            self._sessions[session_id] = SpeechSession(session_id)
            return True

    def create_or_append_word(self, session_id, word):
        ts = now_ms()
        try:
            result = self._col.update_one(
                {"sessionId": session_id},
                {
                    "$setOnInsert": {"sessionId": session_id, "createdAt": ts},
                    "$push": {"words": {"word": word, "timestamp": ts}},
                    "$set": {"updatedAt": ts},
                },
                upsert=True,
            )
            doc = self._col.find_one({"sessionId": session_id}, {"_id": 0})
        except PyMongoError as e:
            raise PublishError(f"mongo write failed for session {session_id}: {e}") from e
        if doc is None:
            raise PublishError(f"session {session_id} vanished after write")
        sess = self._from_doc(doc)
        return AppendResult(result.upserted_id is not None, len(sess.words), sess)

    def get_session(self, session_id):
        doc = self._col.find_one({"sessionId": session_id}, {"_id": 0})
        if doc is None:
            raise SessionNotFound(session_id)
        return self._from_doc(doc)

    def list_sessions(self):
        return [d["sessionId"] for d in self._col.find({}, {"_id": 0, "sessionId": 1}).sort("updatedAt", -1)]

    def delete_session(self, session_id):
        result = self._col.delete_one({"sessionId": session_id})
        if result.deleted_count == 0:
            raise SessionNotFound(session_id)


def connect_mongo(uri=None, dbname=None):
    """Get MongoDB database connection. Returns None if not available."""
    uri = uri or config.MONGODB_URI
    dbname = dbname or config.MONGODB_DB
    if not uri:
        return None

    try:
        client = MongoClient(uri, serverSelectionTimeoutMS=3000)
        client.admin.command("ping")
        return client[dbname]
    except PyMongoError as e:
        logger.warning("[STORE] mongo not ready: %s", e)
        return None


def create_store():
    """Pick the session store: Mongo when reachable, memory otherwise."""
    db = connect_mongo()
    if db is not None:
        logger.info("[STORE] using MongoDB database %s", db.name)
        return MongoSessionStore(db)

    if config.MONGODB_URI:
        logger.warning("[STORE] falling back to in-memory session store")
    return MemorySessionStore()
