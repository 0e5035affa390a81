"""
Entry and the tagged result variants returned by the keyspace API.
"""

from dataclasses import dataclass
from typing import Any

from keyspace.models.key import Key


@dataclass(frozen=True)
class Entry:
    """
    A record read from the store.

    Attributes:
        key: The decoded key.
        value: The stored payload.
        version: Store-assigned version token, None for an absent record.
    """

    key: Key
    value: Any
    version: str | None


@dataclass(frozen=True)
class Miss:
    """Result of reading a key that holds no value."""

    key: Key


@dataclass(frozen=True)
class Conflict:
    """Result of a commit rejected because one of its checks failed."""

    def __repr__(self) -> str:
        return "CONFLICT"


CONFLICT = Conflict()
