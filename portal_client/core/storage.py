"""
Persistent preference storage.

Small user settings (chosen language, auth token, cached identity) live in a
namespaced key-value store. Redis provides durability across restarts; the
in-memory store backs local runs and tests. Both raise StoreUnavailableError
for backend failures so callers only have to contain one error type.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, runtime_checkable
from urllib.parse import urlsplit

from redis.asyncio import Redis, from_url
from redis.exceptions import RedisError

from portal_client.core.errors import StoreUnavailableError

logger = logging.getLogger("portal_client.core.storage")


@runtime_checkable
class PreferenceStore(Protocol):
    """Async key-value store for small user preferences."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...

    async def close(self) -> None: ...


class RedisConnection(Protocol):
    """Subset of redis.asyncio client operations used by the store."""

    async def ping(self) -> bool: ...

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> bool: ...

    async def delete(self, *keys: str) -> int: ...

    async def aclose(self) -> None: ...


class InMemoryPreferenceStore:
    """Process-local store; values vanish with the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value

    async def remove(self, key: str) -> None:
        self._values.pop(key, None)

    async def close(self) -> None:
        return None

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the stored values."""
        return dict(self._values)


class RedisPreferenceStore:
    """Durable store backed by a lazily created Redis connection."""

    def __init__(
        self,
        url: str,
        *,
        namespace: str = "portal",
        client: RedisConnection | None = None,
    ) -> None:
        self._url = url
        self._namespace = namespace
        self._client: RedisConnection | None = client
        self._lock = asyncio.Lock()

    async def connect(self) -> RedisConnection:
        """
        Return the active Redis client, connecting if necessary.

        Raises:
            StoreUnavailableError: if the connection cannot be established.
        """

        if self._client is not None:
            return self._client

        async with self._lock:
            if self._client is not None:
                return self._client

            logger.info("Connecting preference store", extra={"store_url": _redact(self._url)})
            client: Redis = from_url(
                self._url,
                encoding="utf-8",
                decode_responses=True,
                health_check_interval=30,
            )
            try:
                await client.ping()
            except (RedisError, OSError) as exc:
                logger.error("Failed to connect preference store: %s", exc)
                await client.aclose()
                raise StoreUnavailableError("Preference store is unreachable") from exc

            self._client = client
            logger.info("Preference store connection established")
            return client

    async def get(self, key: str) -> str | None:
        client = await self.connect()
        try:
            value = await client.get(self.make_key(key))
        except (RedisError, OSError) as exc:
            raise StoreUnavailableError("Failed to read preference", key=key) from exc
        if value is None:
            return None
        if isinstance(value, bytes):
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise StoreUnavailableError(
                    "Stored preference is not valid UTF-8", key=key
                ) from exc
        return str(value)

    async def set(self, key: str, value: str) -> None:
        client = await self.connect()
        try:
            await client.set(self.make_key(key), value)
        except (RedisError, OSError) as exc:
            raise StoreUnavailableError("Failed to write preference", key=key) from exc

    async def remove(self, key: str) -> None:
        client = await self.connect()
        try:
            await client.delete(self.make_key(key))
        except (RedisError, OSError) as exc:
            raise StoreUnavailableError("Failed to remove preference", key=key) from exc

    async def close(self) -> None:
        """Close Redis connection."""

        if self._client is None:
            return

        async with self._lock:
            if self._client is None:
                return

            logger.info("Closing preference store connection")
            await self._client.aclose()
            self._client = None

    def make_key(self, key: str) -> str:
        """Return a namespaced Redis key."""

        return f"{self._namespace}:{key}"


def create_preference_store(url: str, *, namespace: str = "portal") -> PreferenceStore:
    """Build the store implementation selected by the URL scheme."""

    scheme = urlsplit(url).scheme.lower()
    if scheme == "memory":
        return InMemoryPreferenceStore()
    if scheme in {"redis", "rediss"}:
        return RedisPreferenceStore(url, namespace=namespace)
    raise ValueError(f"Unsupported preference store URL scheme: {scheme or '<empty>'}")


def _redact(url: str) -> str:
    parts = urlsplit(url)
    if parts.password is None:
        return url
    netloc = parts.netloc.replace(f":{parts.password}@", ":***@")
    return parts._replace(netloc=netloc).geturl()


__all__ = [
    "InMemoryPreferenceStore",
    "PreferenceStore",
    "RedisPreferenceStore",
    "create_preference_store",
]
