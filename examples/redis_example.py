"""Minimal example for the Redis stash, sync and async."""

import asyncio

from stashy import BlockingStash, RedisStash


async def run_async() -> None:
    """Run a stash/fetch/delete flow against Redis/Dragonfly."""
    async with await RedisStash.connect("redis", 6379) as stash:
        print("stash:", await stash.stash("session:f05a29", "active"))
        print("fetch:", await stash.fetch("session:f05a29"))
        print("delete:", await stash.delete("session:f05a29"))


def run_blocking() -> None:
    """Same flow through the blocking facade."""
    with BlockingStash(lambda: RedisStash.connect_with_string("redis://redis:6379/0")) as store:
        print("stash:", store.stash("session:f05a29", "active"))
        print("fetch:", store.fetch("session:f05a29"))
        print("delete:", store.delete("session:f05a29"))


if __name__ == "__main__":
    asyncio.run(run_async())
    run_blocking()
