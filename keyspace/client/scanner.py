"""
ListIterator - lazy, resumable prefix scan over typed keys.
"""

from collections.abc import AsyncIterator

from keyspace.interfaces.store import NativeListIterator
from keyspace.models.codec import KeyCodec
from keyspace.models.entry import Entry
from keyspace.models.option import ABSENT, Option, Present


class ListIterator(AsyncIterator[Entry]):
    """
    Async iterator yielding decoded entries of a prefix scan.

    Nothing is read from the store until iteration starts. After each entry
    the cursor points at it, so a new list() call with the same prefix and
    order and Present(cursor) continues right after it.

    Example:
        page = keyspace.list(Key.of("users"), limit=Present(100))
        entries = await page.collect()
        next_page = keyspace.list(Key.of("users"), limit=Present(100), cursor=page.cursor)
    """

    def __init__(self, native: NativeListIterator, codec: KeyCodec) -> None:
        self._native = native
        self._codec = codec

    @property
    def cursor(self) -> Option[str]:
        """Cursor of the last entry consumed, or of the scan start."""
        cursor = self._native.cursor
        return ABSENT if cursor is None else Present(cursor)

    def __aiter__(self) -> "ListIterator":
        return self

    async def __anext__(self) -> Entry:
        native = await self._native.__anext__()
        return Entry(
            key=self._codec.decode(native.key),
            value=native.value,
            version=native.version,
        )

    async def collect(self) -> list[Entry]:
        """Drain the remaining entries into a list."""
        return [entry async for entry in self]
