"""In-memory backend implementation."""

from __future__ import annotations

import asyncio
from typing_extensions import override

from .protocol import Stash, to_text


class InMemoryStash(Stash):
    """Process-local stash backed by a dict behind a single lock.

    Every call holds the lock for exactly one dict access, so concurrent calls
    are linearized per operation. Hand the same instance to every caller that
    should see the same entries.
    """

    def __init__(self) -> None:
        super().__init__()
        self._store: dict[str, str] = {}
        self._lock = asyncio.Lock()

    @override
    async def fetch(self, key: str) -> str | None:
        """Return the value stored for key, or None when key does not exist."""
        key = to_text(key)
        async with self._lock:
            return self._store.get(key)

    @override
    async def stash(self, key: str, value: str) -> str | None:
        """Store value for key and return the previous value, if any."""
        key = to_text(key)
        self.validate_key(key)
        value = to_text(value)
        async with self._lock:
            previous = self._store.get(key)
            self._store[key] = value
        return previous

    @override
    async def delete(self, key: str) -> str | None:
        """Remove key and return the value it held, if any."""
        key = to_text(key)
        async with self._lock:
            return self._store.pop(key, None)

    async def size(self) -> int:
        """Return the number of stashed keys."""
        async with self._lock:
            return len(self._store)

    async def is_empty(self) -> bool:
        """Return True when nothing is stashed."""
        async with self._lock:
            return not self._store

    @override
    async def close(self) -> None:
        """Release backend resources."""
        return
