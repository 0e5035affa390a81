"""
Store contract: the sorted key-value engine the keyspace layer runs on.

Everything here works on native keys (bytes). Implementations own
persistence, versioning and expiration; the keyspace layer only encodes keys,
normalizes values and interprets results.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class NativeEntry:
    """
    A record as reported by the store.

    Attributes:
        key: Native key bytes.
        value: Stored payload, None if the key holds no value.
        version: Version token, None if the key holds no value.
    """

    key: bytes
    value: Any
    version: str | None


class NativeListIterator(AsyncIterator[NativeEntry]):
    """
    Async iterator over a prefix scan.

    Implementations must expose the cursor of the last entry yielded so a
    scan can be resumed with a new list() call.
    """

    @property
    @abstractmethod
    def cursor(self) -> str | None:
        """
        Cursor positioned at the last entry yielded.

        Returns:
            The starting cursor if nothing was yielded yet, None if there is
            neither.
        """
        pass

    def __aiter__(self) -> "NativeListIterator":
        return self

    @abstractmethod
    async def __anext__(self) -> NativeEntry:
        """Return the next entry of the scan."""
        pass


class AtomicBatch(ABC):
    """
    A set of checks and mutations committed as one indivisible unit.

    Checks are evaluated against one consistent view at commit time and the
    mutations are applied together only if every check holds.
    """

    @abstractmethod
    def check(self, key: bytes, version: str | None) -> None:
        """
        Require the key's current version to equal version.

        Args:
            key: Native key.
            version: Expected version, or None to require that the key
                does not exist.
        """
        pass

    @abstractmethod
    def set(self, key: bytes, value: Any, expire_in: int | None = None) -> None:
        """
        Queue a write.

        Args:
            key: Native key.
            value: Payload to store.
            expire_in: Time to live in milliseconds, None for no expiration.
        """
        pass

    @abstractmethod
    def delete(self, key: bytes) -> None:
        """Queue a deletion."""
        pass

    @abstractmethod
    async def commit(self) -> str | None:
        """
        Commit the batch.

        Returns:
            The version assigned to the whole batch, or None if a check
            failed and nothing was applied.
        """
        pass


class Store(ABC):
    """
    Abstract sorted key-value store.

    Keys are compared byte-wise. A handle is opened and closed by the caller;
    the keyspace layer only uses an already-open one.
    """

    @abstractmethod
    async def get(self, key: bytes) -> NativeEntry:
        """
        Read a key.

        Returns:
            The entry; value and version are None if the key holds nothing.
        """
        pass

    @abstractmethod
    async def set(self, key: bytes, value: Any, expire_in: int | None = None) -> str:
        """
        Write a key.

        Args:
            key: Native key.
            value: Payload to store.
            expire_in: Time to live in milliseconds, None for no expiration.

        Returns:
            The newly assigned version.
        """
        pass

    @abstractmethod
    async def delete(self, key: bytes) -> None:
        """Delete a key. Deleting an absent key is not an error."""
        pass

    @abstractmethod
    def list(
        self,
        prefix: bytes,
        *,
        limit: int | None = None,
        reverse: bool = False,
        cursor: str | None = None,
    ) -> NativeListIterator:
        """
        Scan every key strictly extending prefix, in byte order.

        Args:
            prefix: Native key prefix (b"" scans everything).
            limit: Maximum number of entries to yield, None for no bound.
            reverse: Yield in descending order.
            cursor: Resume strictly after (or before, when reverse) the
                position encoded by a cursor from the same prefix/order.

        Returns:
            An async iterator over the matching entries.
        """
        pass

    @abstractmethod
    def atomic(self) -> AtomicBatch:
        """Start a new atomic batch."""
        pass
