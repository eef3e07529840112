"""Minimal example for the NATS JetStream KV stash."""

import asyncio

from stashy import NatsStash


async def main() -> None:
    """Run a stash/fetch/delete flow against NATS JetStream KV."""
    async with await NatsStash.connect("nats://nats:4222", bucket="stashy", create_bucket=True) as stash:
        print("stash:", await stash.stash("user:1:name", "Alice"))
        print("fetch:", await stash.fetch("user:1:name"))
        print("delete:", await stash.delete("user:1:name"))


if __name__ == "__main__":
    asyncio.run(main())
