import asyncio
import threading
from concurrent.futures import CancelledError

import pytest

from stashy.backends.in_memory import InMemoryStash
from stashy.blocking import BlockingStash, _AsyncLoopBridge
from stashy.errors import InvalidKeyError


def test_blocking_roundtrip() -> None:
    with BlockingStash(InMemoryStash()) as store:
        assert store.stash("user:1:name", "Alice") is None
        assert store.fetch("user:1:name") == "Alice"
        assert store.delete("user:1:name") == "Alice"
        assert store.fetch("user:1:name") is None


def test_blocking_propagates_invalid_key() -> None:
    backend = InMemoryStash()
    with BlockingStash(backend) as store, pytest.raises(InvalidKeyError):
        _ = store.stash("invalid key", "value")


def test_blocking_accepts_async_factory() -> None:
    async def open_stash() -> InMemoryStash:
        await asyncio.sleep(0)
        return InMemoryStash()

    with BlockingStash(open_stash) as store:
        assert isinstance(store.stash_backend, InMemoryStash)
        assert store.stash("k", "v") is None
        assert store.fetch("k") == "v"


def test_blocking_rejects_plain_factory() -> None:
    with pytest.raises(TypeError, match="coroutine function"):
        _ = BlockingStash(InMemoryStash)  # type: ignore[arg-type]


def test_blocking_concurrent_threads_keep_every_key() -> None:
    backend = InMemoryStash()
    per_thread = 25
    with BlockingStash(backend) as store:

        def worker(index: int) -> None:
            for i in range(per_thread):
                _ = store.stash(f"thread_{index}:item_{i}", f"{index}-{i}")

        threads = [threading.Thread(target=worker, args=(index,)) for index in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for index in range(8):
            for i in range(per_thread):
                assert store.fetch(f"thread_{index}:item_{i}") == f"{index}-{i}"


def test_blocking_works_inside_running_event_loop() -> None:
    async def scenario() -> None:
        with BlockingStash(InMemoryStash()) as store:
            assert store.stash("inside:loop", "yes") is None
            assert store.fetch("inside:loop") == "yes"

    asyncio.run(scenario())


def test_blocking_close_cancels_waiting_calls() -> None:
    bridge = _AsyncLoopBridge()
    started = threading.Event()
    outcome: list[BaseException] = []

    async def wait_forever() -> None:
        started.set()
        await asyncio.Event().wait()

    def waiter() -> None:
        try:
            bridge.run(wait_forever())
        except BaseException as error:  # noqa: BLE001
            outcome.append(error)

    thread = threading.Thread(target=waiter)
    thread.start()
    assert started.wait(timeout=5)

    bridge.close()
    thread.join(timeout=5)

    assert not thread.is_alive()
    assert len(outcome) == 1
    assert isinstance(outcome[0], CancelledError)


def test_blocking_calls_after_close_fail_fast() -> None:
    store = BlockingStash(InMemoryStash())
    store.close()
    store.close()

    with pytest.raises(RuntimeError, match="event loop is not running"):
        _ = store.fetch("key")
