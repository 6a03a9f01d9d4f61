"""
Connection registry - which session each Socket.IO connection is recording.
"""
import logging
import time
from dataclasses import dataclass, field

from errors import InvalidSession

logger = logging.getLogger(__name__)


def now_ms():
    return int(time.time() * 1000)


@dataclass
class Connection:
    sid: str
    session_id: str
    started_at: int = field(default_factory=now_ms)
    chunks_received: int = 0

    @property
    def duration_ms(self):
        return now_ms() - self.started_at


class SessionRegistry:
    """connection sid -> Connection. One active session per connection."""

    def __init__(self):
        self._connections = {}

    def __len__(self):
        return len(self._connections)

    def get(self, sid):
        return self._connections.get(sid)

    def start(self, sid, session_id):
        """Bind (or re-bind) a connection to a session and reset its counters."""
        previous = self._connections.get(sid)
        if previous is not None and previous.session_id != session_id:
            logger.info(
                "[WS] sid=%s re-bound from session %s to %s", sid, previous.session_id, session_id
            )
        conn = self._connections[sid] = Connection(sid, session_id)
        return conn

    def require(self, sid, session_id):
        """Return the connection if it is recording ``session_id``."""
        conn = self._connections.get(sid)
        if conn is None or conn.session_id != session_id:
            raise InvalidSession("Invalid session")
        return conn

    def record_chunk(self, sid):
        conn = self._connections[sid]
        conn.chunks_received += 1
        return conn.chunks_received

    def stop(self, sid):
        return self._connections.pop(sid, None)

    def disconnect(self, sid):
        conn = self._connections.pop(sid, None)
        if conn is not None:
            logger.info("[WS] cleaning up session %s for sid=%s", conn.session_id, sid)
        return conn

    def active_sessions(self):
        return sorted({c.session_id for c in self._connections.values()})
