"""
Keyspace - typed composite-key API over a sorted key-value store.
"""

from typing import Any

from keyspace.client.atomic import AtomicOperation
from keyspace.client.scanner import ListIterator
from keyspace.client.validation import encode_record_key, expiration_ms, limit_count
from keyspace.interfaces.store import Store
from keyspace.models.codec import KeyCodec
from keyspace.models.entry import Entry, Miss
from keyspace.models.key import Key
from keyspace.models.option import ABSENT, Option, Present, ensure_option, unwrap_or
from keyspace.models.value import normalize_value


class Keyspace:
    """
    Typed view of a sorted key-value store.

    Provides:
    - get(key): Read one entry, Miss if absent
    - set(key, value, expiration): Write one entry, returns its new version
    - delete(key): Remove one entry (idempotent)
    - list(prefix, ...): Ordered, paginated prefix scan
    - atomic(): Start an optimistic check-then-mutate transaction

    The store handle must already be open; the keyspace never opens or closes
    it. Store failures are propagated unchanged.
    """

    def __init__(self, store: Store, codec: KeyCodec | None = None) -> None:
        """
        Initialize the keyspace.

        Args:
            store: An open store handle.
            codec: Key codec, defaults to KeyCodec.
        """
        if store is None:
            raise ValueError("store cannot be None")

        self._store = store
        self._codec = codec or KeyCodec()

    @property
    def store(self) -> Store:
        return self._store

    async def get(self, key: Key) -> Entry | Miss:
        """
        Read the entry stored under key.

        Returns:
            The Entry, or Miss(key) if the store holds neither a value nor a
            version for it.
        """
        native = await self._store.get(encode_record_key(self._codec, key))
        decoded = self._codec.decode(native.key)
        if native.value is None and native.version is None:
            return Miss(decoded)
        return Entry(key=decoded, value=native.value, version=native.version)

    async def set(self, key: Key, value: Any, expiration: Option[int] = ABSENT) -> str:
        """
        Write value under key.

        Args:
            key: The key to write.
            value: Payload; ordered collections are stored as lists.
            expiration: Present(milliseconds) time to live, or ABSENT.

        Returns:
            The version assigned to this write.
        """
        native_key = encode_record_key(self._codec, key)
        return await self._store.set(
            native_key, normalize_value(value), expiration_ms(expiration)
        )

    async def delete(self, key: Key) -> None:
        """Delete key. Deleting an absent key succeeds silently."""
        await self._store.delete(encode_record_key(self._codec, key))

    def list(
        self,
        prefix: Key,
        reverse: bool = False,
        limit: Option[int] = ABSENT,
        cursor: Option[str] = ABSENT,
    ) -> ListIterator:
        """
        Scan every entry whose key strictly extends prefix.

        Args:
            prefix: Key prefix; Key() scans the whole store.
            reverse: Descending key order when True.
            limit: Present(n) to yield at most n entries.
            cursor: Present(cursor) from an earlier scan with the same
                prefix and order, to resume after its last entry.

        Returns:
            A lazy async iterator of entries.
        """
        if not isinstance(prefix, Key):
            raise TypeError(f"prefix must be a Key, got {type(prefix).__name__}")
        ensure_option(cursor, "cursor")
        if isinstance(cursor, Present) and not isinstance(cursor.value, str):
            raise TypeError(f"cursor must be a str, got {type(cursor.value).__name__}")

        native = self._store.list(
            self._codec.encode(prefix),
            limit=limit_count(limit),
            reverse=bool(reverse),
            cursor=unwrap_or(cursor),
        )
        return ListIterator(native, self._codec)

    def atomic(self) -> AtomicOperation:
        """Start a new atomic operation in the building state."""
        return AtomicOperation(self._store, self._codec)
