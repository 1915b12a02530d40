from __future__ import annotations

import logging
from typing import Dict, Protocol

from redis import Redis

from .settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """Per-tab key-value surface, the in-process stand-in for a page's localStorage."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class RedisStore:
    def __init__(self, client: Redis, namespace: str = "streamguide"):
        self._r = client
        self._ns = namespace

    @classmethod
    def from_url(cls, url: str, namespace: str = "streamguide") -> "RedisStore":
        return cls(Redis.from_url(url), namespace)

    def _k(self, key: str) -> str:
        return f"{self._ns}:{key}"

    def get(self, key: str) -> str | None:
        raw = self._r.get(self._k(key))
        if raw is None:
            return None
        return raw.decode() if isinstance(raw, bytes) else str(raw)

    def set(self, key: str, value: str) -> None:
        self._r.set(self._k(key), value)

    def delete(self, key: str) -> None:
        self._r.delete(self._k(key))


def open_store(settings: Settings | None = None) -> KeyValueStore:
    s = settings or default_settings
    url = s.resolved_redis_url()
    if url:
        return RedisStore.from_url(url)
    return MemoryStore()


class DismissalStore:
    """Remembers which page paths the user closed the widget on.

    Keys use the path only, so `?ref=...` variants of one page share the flag.
    """

    def __init__(self, store: KeyValueStore, settings: Settings | None = None):
        self._store = store
        self._prefix = (settings or default_settings).dismissal_key_prefix

    def key(self, path: str) -> str:
        return self._prefix + path

    def is_dismissed(self, path: str) -> bool:
        return self._store.get(self.key(path)) == "true"

    def set_dismissed(self, path: str) -> None:
        self._store.set(self.key(path), "true")
        logger.info("widget dismissed", extra={"path": path})

    def clear_dismissed(self, path: str) -> None:
        self._store.delete(self.key(path))
        logger.info("widget dismissal cleared", extra={"path": path})
