"""Stash contracts and backend implementations."""

from .in_memory import InMemoryStash
from .nats import NatsStash
from .protocol import Stash, to_text
from .redis import RedisCredentials, RedisStash, build_connection_string


__all__ = [
    "InMemoryStash",
    "NatsStash",
    "RedisCredentials",
    "RedisStash",
    "Stash",
    "build_connection_string",
    "to_text",
]
