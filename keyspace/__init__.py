"""
Typed, ordered composite keys over a sorted key-value store.

This package provides:
- Key(parts...) - Composite keys of bool/number/string parts, totally ordered
- KeyCodec - Order-preserving encoding of keys into native byte keys
- Keyspace.get/set/delete - Point reads and writes with version tokens
- Keyspace.list - Ordered, paginated prefix scans with resumable cursors
- Keyspace.atomic - Optimistic check-then-mutate transactions
- MemoryStore - In-memory reference store
"""

from keyspace.client import AtomicOperation, Keyspace, ListIterator, OperationState
from keyspace.interfaces import AtomicBatch, NativeEntry, NativeListIterator, Store
from keyspace.models import (
    ABSENT,
    CONFLICT,
    Absent,
    BoolPart,
    Conflict,
    DecodeError,
    Entry,
    InvalidKeyPart,
    Key,
    KeyCodec,
    KeyspaceError,
    Miss,
    NumberPart,
    OperationStateError,
    Option,
    Present,
    StoreClosedError,
    StringPart,
    new_ulid,
)
from keyspace.stores import MemoryStore

__all__ = [
    "ABSENT",
    "Absent",
    "AtomicBatch",
    "AtomicOperation",
    "BoolPart",
    "CONFLICT",
    "Conflict",
    "DecodeError",
    "Entry",
    "InvalidKeyPart",
    "Key",
    "KeyCodec",
    "Keyspace",
    "KeyspaceError",
    "ListIterator",
    "MemoryStore",
    "Miss",
    "NativeEntry",
    "NativeListIterator",
    "NumberPart",
    "OperationState",
    "OperationStateError",
    "Option",
    "Present",
    "Store",
    "StoreClosedError",
    "StringPart",
    "new_ulid",
]
