"""NATS JetStream KV backend implementation."""

from __future__ import annotations

import logging
from contextlib import suppress
from typing import Any

from typing_extensions import override


try:
    import nats as nats_module
except ImportError:  # pragma: no cover - exercised when dependency is absent
    nats_module = None

from stashy.errors import BackendError
from stashy.keys import KEY_SEPARATOR, is_valid_key

from .protocol import Stash, to_text


logger = logging.getLogger(__name__)

_BACKEND_NAME = "nats"

_NOT_FOUND_ERROR_NAMES = {"BucketNotFoundError", "KeyNotFoundError", "KeyDeletedError", "NoKeysError"}

# NATS KV keys use "." between tokens and reject ":".
_NATS_TOKEN_SEPARATOR = "."


def _is_not_found_error(error: Exception) -> bool:
    return error.__class__.__name__ in _NOT_FOUND_ERROR_NAMES


def _to_nats_key(key: str) -> str:
    return key.replace(KEY_SEPARATOR, _NATS_TOKEN_SEPARATOR)


class NatsStash(Stash):
    """Stash backed by a NATS JetStream KV bucket.

    JetStream KV has no atomic get-and-put, so the previous value returned by
    ``stash`` and ``delete`` is read just before the write and may be stale
    under concurrent writers to the same key.

    The backend uses an existing KV bucket by default.
    Set ``create_bucket=True`` to allow creating it when missing.
    """

    def __init__(
        self,
        url: str = "nats://localhost:4222",
        bucket: str = "stashy",
        *,
        client: Any | None = None,
        create_bucket: bool = False,
    ) -> None:
        """Create a backend using a NATS URL or injected client.

        Parameters
        ----------
        url
            NATS server URL used when ``client`` is not provided.
        bucket
            JetStream KV bucket name.
        client
            Optional injected connected NATS client with ``jetstream`` API.
        create_bucket
            When True, creates bucket if missing. Defaults to False.
        """
        super().__init__()
        self._url = url
        self._bucket_name = bucket
        self._client = client
        self._create_bucket = create_bucket
        self._kv: Any | None = None
        self._closed = False

    @classmethod
    async def connect(
        cls,
        url: str = "nats://localhost:4222",
        bucket: str = "stashy",
        *,
        create_bucket: bool = False,
    ) -> NatsStash:
        """Connect to a NATS server and resolve the KV bucket up front.

        The client is closed again when the bucket cannot be resolved.
        """
        stash = cls(url, bucket, create_bucket=create_bucket)
        try:
            _ = await stash._ensure_kv()
        except BaseException:
            with suppress(BackendError):
                await stash.close()
            raise
        return stash

    async def _ensure_kv(self) -> Any:
        if self._closed:
            msg = "nats stash is closed"
            raise BackendError(RuntimeError(msg), _BACKEND_NAME)
        if self._kv is not None:
            return self._kv

        if self._client is None:
            if nats_module is None:
                msg = "nats-py dependency is required for NatsStash; install with `pip install stashy[nats]`"
                raise RuntimeError(msg)
            try:
                self._client = await nats_module.connect(servers=[self._url])
            except Exception as error:
                logger.debug("nats stash connection failed: %s", error)
                raise BackendError(error, _BACKEND_NAME) from error
            logger.debug("nats stash connected to %s", self._url)

        jetstream = self._client.jetstream()

        try:
            self._kv = await jetstream.key_value(self._bucket_name)
        except Exception as error:
            if not _is_not_found_error(error):
                raise BackendError(error, _BACKEND_NAME) from error
            if not self._create_bucket:
                msg = (
                    f"jetstream KV bucket '{self._bucket_name}' is not available; "
                    "create it first or initialize with create_bucket=True"
                )
                raise BackendError(error, _BACKEND_NAME, detail=msg) from error
            logger.debug("creating jetstream KV bucket %s", self._bucket_name)
            try:
                self._kv = await jetstream.create_key_value(bucket=self._bucket_name)
            except Exception as create_error:
                raise BackendError(create_error, _BACKEND_NAME) from create_error

        return self._kv

    async def _read(self, kv: Any, nats_key: str) -> str | None:
        try:
            entry = await kv.get(nats_key)
        except Exception as error:
            if _is_not_found_error(error):
                return None
            raise BackendError(error, _BACKEND_NAME) from error

        value = entry.value
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode()
        return value

    @override
    async def fetch(self, key: str) -> str | None:
        """Return the value stored for key, or None when key does not exist."""
        key = to_text(key)
        if not is_valid_key(key):
            return None
        kv = await self._ensure_kv()
        return await self._read(kv, _to_nats_key(key))

    @override
    async def stash(self, key: str, value: str) -> str | None:
        """Store value for key and return the previous value, if any."""
        key = to_text(key)
        self.validate_key(key)
        kv = await self._ensure_kv()
        nats_key = _to_nats_key(key)
        previous = await self._read(kv, nats_key)
        try:
            _ = await kv.put(nats_key, to_text(value).encode())
        except Exception as error:
            raise BackendError(error, _BACKEND_NAME) from error
        return previous

    @override
    async def delete(self, key: str) -> str | None:
        """Remove key and return the value it held, if any."""
        key = to_text(key)
        if not is_valid_key(key):
            return None
        kv = await self._ensure_kv()
        nats_key = _to_nats_key(key)
        previous = await self._read(kv, nats_key)
        if previous is None:
            return None
        try:
            _ = await kv.delete(nats_key)
        except Exception as error:
            raise BackendError(error, _BACKEND_NAME) from error
        return previous

    @override
    async def close(self) -> None:
        """Close NATS client resources.

        Later operations fail with ``BackendError``; closing twice is a no-op.
        """
        self._closed = True
        client, self._client, self._kv = self._client, None, None
        if client is None:
            return
        try:
            await client.close()
        except Exception as error:
            raise BackendError(error, _BACKEND_NAME) from error
        logger.debug("nats stash closed")
