import asyncio

import pytest

from stashy.backends.in_memory import InMemoryStash
from stashy.errors import InvalidKeyError


@pytest.mark.asyncio
async def test_new_stash_is_empty() -> None:
    stash = InMemoryStash()
    assert await stash.is_empty() is True
    assert await stash.size() == 0


@pytest.mark.asyncio
async def test_stash_then_fetch() -> None:
    stash = InMemoryStash()
    assert await stash.stash("test", "value123") is None
    assert await stash.stash("user:1:name", "Alice") is None
    assert await stash.stash("user:2:name", "Bob") is None
    assert await stash.stash("user:3:name", "Charlie") is None

    assert await stash.size() == 4
    assert await stash.fetch("user:1:name") == "Alice"
    assert await stash.fetch("user:2:name") == "Bob"
    assert await stash.fetch("user:3:name") == "Charlie"


@pytest.mark.asyncio
async def test_overwrite_returns_previous_value() -> None:
    stash = InMemoryStash()
    assert await stash.stash("test", "value123") is None
    assert await stash.stash("test", "value1234") == "value123"
    assert await stash.fetch("test") == "value1234"
    assert await stash.size() == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("key", ["invalid key", ":bad", "bad:", "a::b", ""])
async def test_invalid_key_leaves_store_unchanged(key: str) -> None:
    stash = InMemoryStash()
    with pytest.raises(InvalidKeyError):
        _ = await stash.stash(key, "value")

    assert await stash.is_empty() is True
    assert await stash.fetch(key) is None


@pytest.mark.asyncio
async def test_delete_existing_and_missing() -> None:
    stash = InMemoryStash()
    assert await stash.stash("key1", "1") is None
    assert await stash.stash("key2", "2") is None
    assert await stash.stash("key3", "3") is None
    assert await stash.size() == 3

    assert await stash.delete("key3") == "3"
    assert await stash.delete("key1") == "1"
    assert await stash.delete("key2") == "2"
    assert await stash.is_empty() is True
    assert await stash.fetch("key1") is None
    assert await stash.delete("key1") is None


@pytest.mark.asyncio
async def test_delete_on_empty_store_misses() -> None:
    stash = InMemoryStash()
    assert await stash.delete("never:set") is None
    assert await stash.delete("not a key") is None


@pytest.mark.asyncio
async def test_bytes_keys_and_values_are_converted() -> None:
    stash = InMemoryStash()
    assert await stash.stash(b"user:1", b"Alice") is None
    assert await stash.fetch("user:1") == "Alice"
    assert await stash.delete(b"user:1") == "Alice"


@pytest.mark.asyncio
async def test_concurrent_distinct_keys_are_all_kept() -> None:
    stash = InMemoryStash()
    count = 200

    results = await asyncio.gather(*(stash.stash(f"item:{i}", str(i)) for i in range(count)))

    assert results == [None] * count
    assert await stash.size() == count
    for i in range(count):
        assert await stash.fetch(f"item:{i}") == str(i)


@pytest.mark.asyncio
async def test_shared_instance_sees_same_entries() -> None:
    stash = InMemoryStash()
    other_owner = stash
    _ = await stash.stash("shared", "yes")
    assert await other_owner.fetch("shared") == "yes"


@pytest.mark.asyncio
async def test_async_context_manager_keeps_entries() -> None:
    async with InMemoryStash() as stash:
        _ = await stash.stash("k", "v")
    assert await stash.fetch("k") == "v"
