"""Persisted session key-value store (token, username, balance).

Redis-backed with a TTL, falling back to process memory when Redis is not
configured or stops answering.
"""
from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod

import redis

from storefront.domain.models import Amount, Session, format_amount, parse_amount

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USERNAME_KEY = "username"
BALANCE_KEY = "balance"


class SessionStore(ABC):
    """String key-value store that survives restarts."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass


class MemorySessionStore(SessionStore):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def clear(self) -> None:
        self._data.clear()

    def as_dict(self) -> dict[str, str]:
        return dict(self._data)


class RedisSessionStore(SessionStore):
    """Session stored as one Redis hash per session id, refreshed on write."""

    DEFAULT_TTL_SECONDS = 7 * 24 * 60 * 60

    def __init__(
        self,
        redis_url: str | None = None,
        session_id: str = "default",
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ):
        self._redis_url = redis_url or os.getenv("REDIS_URL")
        self._session_id = session_id
        self._ttl = ttl_seconds
        self._memory = MemorySessionStore()
        self._client = self._init_client()
        self._seed_memory()

    @property
    def using_redis(self) -> bool:
        return self._client is not None

    @property
    def key(self) -> str:
        return f"storefront:session:{self._session_id}"

    def _switch_to_memory_fallback(self, reason: Exception | str) -> None:
        logger.warning("Redis session fallback to memory mode: %s", reason)
        self._client = None

    def _init_client(self):
        if not self._redis_url:
            logger.warning("REDIS_URL is not set; session uses in-memory fallback")
            return None

        try:
            client = redis.from_url(
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            client.ping()
            logger.info("Redis session storage enabled")
            return client
        except Exception as exc:
            logger.warning("Redis session init failed, fallback to in-memory: %s", exc)
            return None

    def _seed_memory(self) -> None:
        """Copy the stored session into memory so a later fallback keeps it."""
        if not self._client:
            return
        try:
            stored = self._client.hgetall(self.key) or {}
        except Exception as exc:
            self._switch_to_memory_fallback(exc)
            return
        for key, value in stored.items():
            self._memory.set(str(key), str(value))

    def get(self, key: str) -> str | None:
        if not self._client:
            return self._memory.get(key)
        try:
            value = self._client.hget(self.key, key)
        except Exception as exc:
            self._switch_to_memory_fallback(exc)
            return self._memory.get(key)
        return value if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        # Mirror into memory so a later fallback still sees the latest values
        self._memory.set(key, value)
        if not self._client:
            return
        try:
            self._client.hset(self.key, key, str(value))
            self._client.expire(self.key, self._ttl)
        except Exception as exc:
            self._switch_to_memory_fallback(exc)

    def clear(self) -> None:
        self._memory.clear()
        if not self._client:
            return
        try:
            self._client.delete(self.key)
        except Exception as exc:
            self._switch_to_memory_fallback(exc)


def persist_login(store: SessionStore, token: str, username: str, balance: Amount) -> None:
    """Store login information used to authenticate later API calls."""
    store.set(USERNAME_KEY, username)
    store.set(TOKEN_KEY, token)
    store.set(BALANCE_KEY, format_amount(balance))


def read_balance(store: SessionStore) -> Amount:
    balance = parse_amount(store.get(BALANCE_KEY))
    if balance is None or balance < 0:
        return 0
    return balance


def write_balance(store: SessionStore, balance: Amount) -> None:
    store.set(BALANCE_KEY, format_amount(balance))


def read_session(store: SessionStore) -> Session | None:
    """Return the logged-in session, or None when there is no token."""
    token = store.get(TOKEN_KEY)
    if not token:
        return None
    return Session(token=token, username=store.get(USERNAME_KEY), balance=read_balance(store))
