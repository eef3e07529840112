"""Synchronous facade over an async stash for thread-based callers."""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Callable, Coroutine
from typing import TYPE_CHECKING, Any, Self, TypeVar

from stashy.backends import Stash


if TYPE_CHECKING:
    from concurrent.futures import Future
    from types import TracebackType


logger = logging.getLogger(__name__)

_T = TypeVar("_T")

StashFactory = Callable[[], Coroutine[Any, Any, Stash]]


class _AsyncLoopBridge:
    """Runs coroutines on a dedicated event loop in a background thread."""

    def __init__(self) -> None:
        super().__init__()
        self._loop_ready = threading.Event()
        self._state_lock = threading.Lock()
        self._closed = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread = threading.Thread(target=self._run, name="stashy-blocking", daemon=True)
        self._thread.start()
        _ = self._loop_ready.wait()

    @property
    def closed(self) -> bool:
        return self._closed

    def _run(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        self._loop_ready.set()
        try:
            loop.run_forever()
        finally:
            # Cancelled tasks release any thread still waiting in run().
            pending = asyncio.all_tasks(loop)
            for task in pending:
                _ = task.cancel()
            if pending:
                _ = loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.close()

    def run(self, coroutine: Coroutine[Any, Any, _T]) -> _T:
        with self._state_lock:
            if self._closed or self._loop is None:
                coroutine.close()
                msg = "blocking stash event loop is not running"
                raise RuntimeError(msg)
            future: Future[_T] = asyncio.run_coroutine_threadsafe(coroutine, self._loop)
        return future.result()

    def close(self) -> None:
        with self._state_lock:
            if self._closed or self._loop is None:
                return
            self._closed = True
        _ = self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)


class BlockingStash:
    """Blocking ``fetch``/``stash``/``delete`` over any ``Stash``.

    All calls, from any thread, run on one private event loop, so an
    ``InMemoryStash`` keeps its single-lock ordering across threads. Pass a
    coroutine function instead of an instance for backends that must connect
    on the loop that will use them::

        store = BlockingStash(lambda: RedisStash.connect("localhost"))
    """

    def __init__(self, target: Stash | StashFactory) -> None:
        super().__init__()
        self._bridge = _AsyncLoopBridge()
        if isinstance(target, Stash):
            self._stash = target
            return
        try:
            created = target()
            if not inspect.iscoroutine(created):
                msg = "stash factory must be a coroutine function returning a Stash"
                raise TypeError(msg)
            self._stash = self._bridge.run(created)
        except BaseException:
            self._bridge.close()
            raise
        logger.debug("blocking stash opened %s", type(self._stash).__name__)

    @property
    def stash_backend(self) -> Stash:
        """The wrapped async stash."""
        return self._stash

    def fetch(self, key: str) -> str | None:
        """Return the value stored for key, or None when key does not exist."""
        return self._bridge.run(self._stash.fetch(key))

    def stash(self, key: str, value: str) -> str | None:
        """Store value for key and return the previous value, if any."""
        return self._bridge.run(self._stash.stash(key, value))

    def delete(self, key: str) -> str | None:
        """Remove key and return the value it held, if any."""
        return self._bridge.run(self._stash.delete(key))

    def close(self) -> None:
        """Close the wrapped stash and stop the background loop.

        Calls still waiting on the loop are cancelled; closing twice is a no-op.
        """
        if self._bridge.closed:
            return
        try:
            self._bridge.run(self._stash.close())
        finally:
            self._bridge.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()
