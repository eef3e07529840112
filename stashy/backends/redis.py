"""Redis-compatible backend implementation."""

from __future__ import annotations

import logging
from contextlib import suppress
from dataclasses import dataclass
from inspect import isawaitable
from typing import Any

from typing_extensions import override
from urllib.parse import quote

import redis.asyncio as redis_async
from redis.exceptions import RedisError

from stashy.errors import BackendError

from .protocol import Stash, to_text


logger = logging.getLogger(__name__)

_BACKEND_NAME = "redis"


def _normalize_string(value: str | bytes | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode()
    return value


@dataclass(frozen=True)
class RedisCredentials:
    """Redis user credentials, used when building a connection string."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"RedisCredentials(username={self.username!r}, password='***')"


def build_connection_string(
    host: str,
    port: int,
    credentials: RedisCredentials | None = None,
    database_index: int | None = None,
    *,
    ssl: bool = False,
) -> str:
    """Build a ``redis://`` URL from discrete connection fields.

    The database index defaults to ``0`` only when neither credentials nor an
    explicit index are given; credentials without an index leave the index
    off so the server default applies.
    """
    scheme = "rediss" if ssl else "redis"
    auth = ""
    if credentials is not None:
        auth = f"{quote(credentials.username, safe='')}:{quote(credentials.password, safe='')}@"
    if database_index is None and credentials is None:
        database_index = 0
    suffix = "" if database_index is None else f"/{database_index}"
    return f"{scheme}://{auth}{host}:{port}{suffix}"


class RedisStash(Stash):
    """Stash backed by a Redis-compatible server via ``redis.asyncio``.

    ``stash`` and ``delete`` rely on ``SET ... GET`` and ``GETDEL`` to return
    the previous value atomically, which needs Redis 6.2 or newer.
    """

    def __init__(self, client: Any) -> None:
        """Wrap an already configured async client.

        Parameters
        ----------
        client
            Client with ``get/set/getdel/aclose`` coroutine API, normally a
            ``redis.asyncio.Redis``. It is shared by every caller of this stash.
        """
        super().__init__()
        self._client = client

    @classmethod
    async def connect(
        cls,
        host: str,
        port: int = 6379,
        credentials: RedisCredentials | None = None,
        database_index: int | None = None,
        *,
        ssl: bool = False,
    ) -> RedisStash:
        """Connect to a Redis server from discrete connection fields."""
        url = build_connection_string(host, port, credentials, database_index, ssl=ssl)
        logger.debug("connecting redis stash to %s:%s (database %s)", host, port, database_index)
        return await cls.connect_with_string(url)

    @classmethod
    async def connect_with_string(cls, url: str) -> RedisStash:
        """Connect to a Redis server using a prebuilt connection URL."""
        try:
            client = redis_async.from_url(to_text(url), decode_responses=True)
        except ValueError as error:
            raise BackendError(error, _BACKEND_NAME) from error

        stash = cls(client)
        try:
            _ = await client.ping()
        except RedisError as error:
            logger.debug("redis stash connection failed: %s", error)
            with suppress(BackendError):
                await stash.close()
            raise BackendError(error, _BACKEND_NAME) from error
        return stash

    @property
    def client(self) -> Any:
        """Underlying async client."""
        return self._client

    @override
    async def fetch(self, key: str) -> str | None:
        """Return the value stored for key, or None when key does not exist."""
        try:
            value = await self._client.get(to_text(key))
        except RedisError as error:
            raise BackendError(error, _BACKEND_NAME) from error
        return _normalize_string(value)

    @override
    async def stash(self, key: str, value: str) -> str | None:
        """Store value for key and return the previous value, if any."""
        key = to_text(key)
        self.validate_key(key)
        try:
            previous = await self._client.set(key, to_text(value), get=True)
        except RedisError as error:
            raise BackendError(error, _BACKEND_NAME) from error
        return _normalize_string(previous)

    @override
    async def delete(self, key: str) -> str | None:
        """Remove key and return the value it held, if any."""
        try:
            previous = await self._client.getdel(to_text(key))
        except RedisError as error:
            raise BackendError(error, _BACKEND_NAME) from error
        return _normalize_string(previous)

    @override
    async def close(self) -> None:
        """Release backend resources."""
        close_method = getattr(self._client, "aclose", None)
        if close_method is None:
            close_method = getattr(self._client, "close", None)
        if close_method is None:
            return

        try:
            maybe_awaitable = close_method()
            if isawaitable(maybe_awaitable):
                await maybe_awaitable
        except RedisError as error:
            raise BackendError(error, _BACKEND_NAME) from error
        logger.debug("redis stash closed")
