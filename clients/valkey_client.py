"""
Valkey (Redis-compatible) client backing the booking session store.

Thin wrapper around redis-py with JSON helpers and a key namespace. Fail-fast:
raises on connection or decoding problems. Callers that must never block the
screen (the session store) catch and log.
"""

import json
import logging

import redis

logger = logging.getLogger(__name__)


class ValkeyClient:
    """
    Redis-compatible client for Valkey.

    Usage:
        client = ValkeyClient("redis://localhost:6379/0", namespace="banquet")
        client.set_json("session:abc:draft", {...}, expire_seconds=43200)
        snapshot = client.get_json("session:abc:draft")  # None if missing
    """

    def __init__(self, url: str, namespace: str = "banquet"):
        """
        Initialize Valkey connection.

        Args:
            url: Redis-compatible connection URL (e.g., redis://localhost:6379/0)
            namespace: Prefix joined to every key with ':'

        Raises:
            redis.ConnectionError: If connection fails
        """
        self._client = redis.from_url(url, decode_responses=True)
        self.namespace = namespace
        self._client.ping()
        logger.info("ValkeyClient connected")

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}" if self.namespace else key

    def ping(self) -> bool:
        """
        Health check.

        Raises redis.ConnectionError if unreachable.
        """
        self._client.ping()
        return True

    def get(self, key: str) -> str | None:
        """Get value by key. None if the key doesn't exist."""
        return self._client.get(self._key(key))

    def set(self, key: str, value: str, expire_seconds: int | None = None) -> None:
        """
        Set key to value, optionally with expiration.

        Args:
            key: Key to set (namespace is added)
            value: Value to store
            expire_seconds: TTL in seconds (None for no expiration)
        """
        if expire_seconds is not None:
            self._client.setex(self._key(key), expire_seconds, value)
        else:
            self._client.set(self._key(key), value)

    def delete(self, key: str) -> bool:
        """Delete key. True if it existed."""
        return self._client.delete(self._key(key)) > 0

    def exists(self, key: str) -> bool:
        return self._client.exists(self._key(key)) > 0

    def set_json(self, key: str, value: dict | list, expire_seconds: int | None = None) -> None:
        """Set key to a JSON-serialized dict or list."""
        self.set(key, json.dumps(value), expire_seconds)

    def get_json(self, key: str) -> dict | list | None:
        """
        Get and deserialize a JSON value.

        Returns None if key doesn't exist.
        Raises ValueError if value is not valid JSON.
        """
        value = self.get(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in key '{key}': {e}")

    def close(self) -> None:
        """Close the connection."""
        self._client.close()
        logger.info("ValkeyClient closed")
