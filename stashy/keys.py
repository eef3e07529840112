"""Key naming rules for stashed entries.

Keys are one or more non-empty segments joined by ``:``, where a segment only
contains ASCII letters, digits and underscores, e.g. ``user:123:name``.
"""

from __future__ import annotations

import re

from .errors import InvalidKeyError


KEY_SEPARATOR = ":"

_ALLOWED_CHARACTERS = re.compile(r"[A-Za-z0-9_:]*")


def validate_key(key: str) -> None:
    """Raise ``InvalidKeyError`` when ``key`` is not a valid stash key."""
    if not key:
        raise InvalidKeyError(key, "key must not be empty")
    if key.startswith(KEY_SEPARATOR) or key.endswith(KEY_SEPARATOR):
        raise InvalidKeyError(key, f"key must not start or end with {KEY_SEPARATOR!r}")
    if any(not segment for segment in key.split(KEY_SEPARATOR)):
        raise InvalidKeyError(key, "key must not contain empty segments")
    if not _ALLOWED_CHARACTERS.fullmatch(key):
        raise InvalidKeyError(key, "key contains invalid characters")


def is_valid_key(key: str) -> bool:
    """Return True when ``key`` passes ``validate_key``."""
    try:
        validate_key(key)
    except InvalidKeyError:
        return False
    return True
