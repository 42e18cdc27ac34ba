from __future__ import annotations

import logging

from canteen.application.ports.cache import CacheStore
from canteen.infrastructure.cache.redis_client import get_redis_client

logger = logging.getLogger(__name__)

KEY_PREFIX = "canteen:"


class RedisCacheStore(CacheStore):
    """Short-lived response cache; every key is namespaced under ``canteen:``."""

    def __init__(self, timeout_seconds: float = 1.0, prefix: str = KEY_PREFIX) -> None:
        self._timeout_seconds = timeout_seconds
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> str | None:
        value = get_redis_client(timeout_seconds=self._timeout_seconds).get(self._key(key))
        if value is None:
            logger.debug("cache_miss", extra={"cache_key": key})
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        get_redis_client(timeout_seconds=self._timeout_seconds).set(
            name=self._key(key),
            value=value,
            ex=ttl_seconds,
        )
