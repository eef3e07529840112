"""Stash capability shared by every backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Self

from stashy.keys import validate_key


if TYPE_CHECKING:
    from types import TracebackType


def to_text(value: str | bytes | object) -> str:
    """Convert a key or value into its canonical ``str`` form."""
    if isinstance(value, str):
        return value
    if isinstance(value, bytes | bytearray):
        return bytes(value).decode()
    return str(value)


class Stash(ABC):
    """Async string key-value store.

    Implementations must call ``validate_key`` before any write so that an
    invalid key never reaches the underlying store.
    """

    validate_key = staticmethod(validate_key)

    @abstractmethod
    async def fetch(self, key: str) -> str | None:
        """Return the value stored for key, or None when key does not exist."""

    @abstractmethod
    async def stash(self, key: str, value: str) -> str | None:
        """Store value for key and return the previous value, if any.

        Keys may only use ASCII letters, digits and underscores, with ``:``
        as the segment delimiter, e.g. ``user:123:name`` or ``session:f05a29``.
        """

    @abstractmethod
    async def delete(self, key: str) -> str | None:
        """Remove key and return the value it held, if any."""

    @abstractmethod
    async def close(self) -> None:
        """Close any backend resources."""

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.close()
