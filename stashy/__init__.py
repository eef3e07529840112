"""stashy - one async key-value contract over interchangeable backends."""

import logging

from ._version import version as __version__
from .backends import InMemoryStash, NatsStash, RedisCredentials, RedisStash, Stash, build_connection_string
from .blocking import BlockingStash
from .errors import BackendError, InvalidKeyError, StashError
from .keys import is_valid_key, validate_key


logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = [
    "BackendError",
    "BlockingStash",
    "InMemoryStash",
    "InvalidKeyError",
    "NatsStash",
    "RedisCredentials",
    "RedisStash",
    "Stash",
    "StashError",
    "__version__",
    "build_connection_string",
    "is_valid_key",
    "validate_key",
]
