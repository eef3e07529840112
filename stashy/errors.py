"""Error taxonomy shared by every stash backend."""

from __future__ import annotations


class StashError(Exception):
    """Base class for all failures raised by a stash."""


class InvalidKeyError(StashError, ValueError):
    """Raised when a key breaks the key naming rules.

    Always raised before the backend is touched.
    """

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"invalid key {key!r}: {reason}")
        self.key = key
        self.reason = reason


class BackendError(StashError):
    """Opaque failure surfaced by a backend's storage or transport.

    The original error is chained as ``__cause__`` and kept on ``cause``.
    """

    def __init__(self, cause: BaseException, backend: str | None = None, *, detail: str | None = None) -> None:
        prefix = f"{backend} backend error" if backend else "backend error"
        super().__init__(f"{prefix}: {detail or cause}")
        self.cause = cause
        self.backend = backend
