"""
Backends for the email intent set.

Production uses a Redis set: SADD is atomic, so concurrent saves of the same
address can never duplicate it and exactly one of them reports a new member.
The in-memory backend exists for local runs and tests.

Usage:
    from app.intent.store import RedisEmailIntentStore
    store = RedisEmailIntentStore.from_url("redis://localhost:6379/0", "legacy:email_intents:set")
    added = store.add("user@example.com")   # True the first time only
"""

import logging
import threading
from typing import Protocol

import redis

logger = logging.getLogger(__name__)


class EmailIntentStore(Protocol):
    """A deduplicating set of normalized email addresses."""

    def add(self, email: str) -> bool:
        """Add `email`; True if it was not already a member."""
        ...

    def members(self) -> list[str]:
        ...

    def ping(self) -> bool:
        ...


class RedisEmailIntentStore:

    def __init__(self, client: redis.Redis, set_key: str):
        self._client = client
        self._key = set_key

    @classmethod
    def from_url(cls, url: str, set_key: str) -> "RedisEmailIntentStore":
        return cls(redis.Redis.from_url(url, decode_responses=True), set_key)

    def add(self, email: str) -> bool:
        return self._client.sadd(self._key, email) > 0

    def members(self) -> list[str]:
        return [m.decode() if isinstance(m, bytes) else m for m in self._client.smembers(self._key)]

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.warning("intent_store.ping_failed", extra={"action": "intent_store.ping_failed", "error": str(e)})
            return False

    def close(self) -> None:
        self._client.close()


class InMemoryEmailIntentStore:
    """Process-local set. Contents vanish on restart."""

    def __init__(self):
        self._members: set[str] = set()
        self._lock = threading.Lock()

    def add(self, email: str) -> bool:
        with self._lock:
            if email in self._members:
                return False
            self._members.add(email)
            return True

    def members(self) -> list[str]:
        with self._lock:
            return list(self._members)

    def ping(self) -> bool:
        return True
