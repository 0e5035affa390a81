"""
MemoryStore - In-memory sorted key-value store.
"""

import asyncio
import base64
import binascii
import bisect
import copy
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from keyspace.interfaces.store import AtomicBatch, NativeEntry, NativeListIterator, Store
from keyspace.models.exceptions import StoreClosedError

logger = logging.getLogger(__name__)


@dataclass
class Record:
    """
    A stored value with its metadata.

    Attributes:
        value: The payload (a private deep copy).
        version: Version assigned by the write that produced it.
        expires_at: Clock reading after which the record is gone, None if it
            never expires.
    """

    value: Any
    version: str
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class MemoryStore(Store):
    """
    Sorted in-memory implementation of the Store contract.

    Architecture:
    - Records live in a dict; their keys are also kept in a sorted list so
      scans can position themselves with binary search
    - One monotonic sequence produces the versions of every write and commit
    - Expired records behave as absent and are dropped on access
    - Atomic commits run check + apply under a lock with no await in
      between, so a cancelled commit has either fully applied or not at all
    """

    # Maximum size of a native key
    DEFAULT_MAX_KEY_BYTES = 2048

    # Width of a version token in hex digits
    VERSION_WIDTH = 20

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_key_bytes: int = DEFAULT_MAX_KEY_BYTES,
    ) -> None:
        """
        Initialize the store.

        Args:
            clock: Returns the current time in seconds; drives expiration.
            max_key_bytes: Largest native key accepted by writes and checks.
        """
        if not callable(clock):
            raise ValueError("clock must be callable")
        if max_key_bytes <= 0:
            raise ValueError(f"max_key_bytes must be positive, got {max_key_bytes}")

        self._clock = clock
        self._max_key_bytes = max_key_bytes

        self._records: dict[bytes, Record] = {}
        self._sorted_keys: list[bytes] = []

        self._version_seq: int = 0
        self._closed = False

        # Lazy initialized so the store can be built outside a running loop
        self._write_lock: asyncio.Lock | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Close the store. Any later operation raises StoreClosedError."""
        self._closed = True

    async def __aenter__(self) -> "MemoryStore":
        self._ensure_open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._records)

    async def get(self, key: bytes) -> NativeEntry:
        self._ensure_open()
        record = self._live_record(key)
        if record is None:
            return NativeEntry(key=key, value=None, version=None)
        return NativeEntry(key=key, value=copy.deepcopy(record.value), version=record.version)

    async def set(self, key: bytes, value: Any, expire_in: int | None = None) -> str:
        self._ensure_open()
        self._validate_key(key)
        self._validate_expire_in(expire_in)

        async with self._lock():
            version = self._next_version()
            self._put(key, value, version, expire_in)
            return version

    async def delete(self, key: bytes) -> None:
        self._ensure_open()
        async with self._lock():
            self._remove(key)

    def list(
        self,
        prefix: bytes,
        *,
        limit: int | None = None,
        reverse: bool = False,
        cursor: str | None = None,
    ) -> "MemoryListIterator":
        self._ensure_open()
        if limit is not None and limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")
        return MemoryListIterator(self, bytes(prefix), limit, reverse, cursor)

    def atomic(self) -> "MemoryAtomicBatch":
        self._ensure_open()
        return MemoryAtomicBatch(self)

    def purge_expired(self) -> int:
        """
        Drop every expired record.

        Returns:
            Number of records removed.
        """
        now = self._clock()
        expired = [key for key, record in self._records.items() if record.is_expired(now)]
        for key in expired:
            self._drop(key)
        if expired:
            logger.debug(f"Purged {len(expired)} expired records")
        return len(expired)

    def _lock(self) -> asyncio.Lock:
        if self._write_lock is None:
            self._write_lock = asyncio.Lock()
        return self._write_lock

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreClosedError("MemoryStore is closed")

    def _validate_key(self, key: bytes) -> None:
        if not key:
            raise ValueError("key cannot be empty")
        if len(key) > self._max_key_bytes:
            raise ValueError(
                f"key too large: {len(key)} bytes. Maximum {self._max_key_bytes} bytes."
            )

    @staticmethod
    def _validate_expire_in(expire_in: int | None) -> None:
        if expire_in is not None and expire_in < 0:
            raise ValueError(f"expire_in must be >= 0, got {expire_in}")

    def _next_version(self) -> str:
        self._version_seq += 1
        return f"{self._version_seq:0{self.VERSION_WIDTH}x}"

    def _live_record(self, key: bytes) -> Record | None:
        """Return the record for key, dropping it first if it has expired."""
        record = self._records.get(key)
        if record is not None and record.is_expired(self._clock()):
            self._drop(key)
            return None
        return record

    def _put(self, key: bytes, value: Any, version: str, expire_in: int | None) -> None:
        expires_at = None
        if expire_in is not None:
            expires_at = self._clock() + expire_in / 1000

        if key not in self._records:
            bisect.insort(self._sorted_keys, key)
        self._records[key] = Record(copy.deepcopy(value), version, expires_at)

    def _remove(self, key: bytes) -> None:
        if key in self._records:
            self._drop(key)

    def _drop(self, key: bytes) -> None:
        del self._records[key]
        index = bisect.bisect_left(self._sorted_keys, key)
        del self._sorted_keys[index]


def _prefix_end(prefix: bytes) -> bytes | None:
    """
    Exclusive upper bound of a prefix scan, None for the empty prefix.

    No part tag is 0xFF, so every key that extends prefix by whole parts
    sorts below prefix + 0xFF. Keys that only share bytes with prefix (such
    as an escaped NUL continuing its last string) sort above it.
    """
    if not prefix:
        return None
    return prefix + b"\xff"


def encode_cursor(prefix: bytes, key: bytes) -> str:
    """Encode the position of key within a prefix scan."""
    return base64.urlsafe_b64encode(key[len(prefix) :]).decode("ascii").rstrip("=")


def decode_cursor(prefix: bytes, cursor: str) -> bytes:
    """
    Decode a cursor back into the native key it points at.

    Raises:
        ValueError: If the cursor is malformed.
    """
    padded = cursor + "=" * (-len(cursor) % 4)
    try:
        suffix = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValueError(f"Invalid cursor: {cursor!r}") from e
    if not suffix:
        raise ValueError(f"Invalid cursor: {cursor!r}")
    return prefix + suffix


class MemoryListIterator(NativeListIterator):
    """
    Async iterator for prefix scans on a MemoryStore.

    Re-positions itself with binary search from the last key it yielded, so
    writes made while scanning never invalidate it.
    """

    def __init__(
        self,
        store: MemoryStore,
        prefix: bytes,
        limit: int | None,
        reverse: bool,
        cursor: str | None,
    ) -> None:
        self._store = store
        self._prefix = prefix
        self._end = _prefix_end(prefix)
        self._remaining = limit
        self._reverse = reverse
        self._cursor = cursor

        # Last position consumed; the scan continues strictly past it
        self._position: bytes | None = None
        if cursor is not None:
            position = decode_cursor(prefix, cursor)
            if self._end is not None and position >= self._end:
                raise ValueError(f"Cursor {cursor!r} is outside the scanned prefix")
            self._position = position

    @property
    def cursor(self) -> str | None:
        return self._cursor

    async def __anext__(self) -> NativeEntry:
        if self._remaining is not None and self._remaining <= 0:
            raise StopAsyncIteration
        self._store._ensure_open()

        while True:
            key = self._next_key()
            if key is None:
                raise StopAsyncIteration

            self._position = key
            record = self._store._live_record(key)
            if record is None:
                continue

            if self._remaining is not None:
                self._remaining -= 1
            self._cursor = encode_cursor(self._prefix, key)
            return NativeEntry(key=key, value=copy.deepcopy(record.value), version=record.version)

    def _next_key(self) -> bytes | None:
        keys = self._store._sorted_keys

        if self._reverse:
            if self._position is not None:
                index = bisect.bisect_left(keys, self._position) - 1
            elif self._end is not None:
                index = bisect.bisect_left(keys, self._end) - 1
            else:
                index = len(keys) - 1
            if index < 0:
                return None
            key = keys[index]
            # The prefix key itself is not part of its own scan
            if key <= self._prefix or not key.startswith(self._prefix):
                return None
            return key

        if self._position is not None:
            index = bisect.bisect_right(keys, self._position)
        else:
            index = bisect.bisect_right(keys, self._prefix)
        if index >= len(keys):
            return None
        key = keys[index]
        if self._end is not None and key >= self._end:
            return None
        return key


class MemoryAtomicBatch(AtomicBatch):
    """Atomic batch for a MemoryStore."""

    def __init__(self, store: MemoryStore) -> None:
        self._store = store
        self._checks: list[tuple[bytes, str | None]] = []
        # (key, is_delete, value, expire_in) in queue order
        self._mutations: list[tuple[bytes, bool, Any, int | None]] = []

    def check(self, key: bytes, version: str | None) -> None:
        self._store._validate_key(key)
        self._checks.append((key, version))

    def set(self, key: bytes, value: Any, expire_in: int | None = None) -> None:
        self._store._validate_key(key)
        self._store._validate_expire_in(expire_in)
        self._mutations.append((key, False, copy.deepcopy(value), expire_in))

    def delete(self, key: bytes) -> None:
        self._store._validate_key(key)
        self._mutations.append((key, True, None, None))

    async def commit(self) -> str | None:
        store = self._store
        store._ensure_open()

        async with store._lock():
            for key, expected in self._checks:
                record = store._live_record(key)
                current = record.version if record is not None else None
                if current != expected:
                    return None

            version = store._next_version()
            for key, is_delete, value, expire_in in self._mutations:
                if is_delete:
                    store._remove(key)
                else:
                    store._put(key, value, version, expire_in)
            return version
