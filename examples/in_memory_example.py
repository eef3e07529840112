"""Minimal example for the in-memory stash."""

import asyncio

from stashy import InMemoryStash, InvalidKeyError


async def main() -> None:
    """Run a basic stash/fetch/delete flow in process."""
    async with InMemoryStash() as stash:
        print("first stash:", await stash.stash("user:1:name", "Alice"))
        print("overwrite:", await stash.stash("user:1:name", "Alicia"))
        print("fetch:", await stash.fetch("user:1:name"))
        try:
            _ = await stash.stash("invalid key", "value")
        except InvalidKeyError as error:
            print("rejected:", error)
        print("delete:", await stash.delete("user:1:name"))
        print("size:", await stash.size())


if __name__ == "__main__":
    asyncio.run(main())
