"""
Demo user directory, in-memory.
"""
import threading
from dataclasses import asdict, dataclass

SEED_USERS = (
    ("John Doe", "john@example.com"),
    ("Jane Smith", "jane@example.com"),
)


@dataclass
class User:
    id: int
    name: str
    email: str

    def to_dict(self):
        return asdict(self)


class UserStore:
    def __init__(self, seed=SEED_USERS):
        self._users = {}
        self._next_id = 1
        self._lock = threading.Lock()
        for name, email in seed:
            self.create(name, email)

    def list(self):
        with self._lock:
            return list(self._users.values())

    def get(self, user_id):
        return self._users.get(user_id)

    def create(self, name, email):
        with self._lock:
            user = User(self._next_id, name, email)
            self._users[user.id] = user
            self._next_id += 1
            return user

    def update(self, user_id, name=None, email=None):
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            if name:
                user.name = name
            if email:
                user.email = email
            return user

    def delete(self, user_id):
        with self._lock:
            return self._users.pop(user_id, None)
