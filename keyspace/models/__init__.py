"""
Data models for the keyspace layer.
"""

from keyspace.models.codec import KeyCodec, NativeKey
from keyspace.models.entry import CONFLICT, Conflict, Entry, Miss
from keyspace.models.exceptions import (
    DecodeError,
    InvalidKeyPart,
    KeyspaceError,
    OperationStateError,
    StoreClosedError,
)
from keyspace.models.key import BoolPart, Key, KeyPart, NumberPart, StringPart
from keyspace.models.option import ABSENT, Absent, Option, Present
from keyspace.models.ulid import new_ulid
from keyspace.models.value import normalize_value

__all__ = [
    "ABSENT",
    "Absent",
    "BoolPart",
    "CONFLICT",
    "Conflict",
    "DecodeError",
    "Entry",
    "InvalidKeyPart",
    "Key",
    "KeyCodec",
    "KeyPart",
    "KeyspaceError",
    "Miss",
    "NativeKey",
    "NumberPart",
    "OperationStateError",
    "Option",
    "Present",
    "StoreClosedError",
    "StringPart",
    "new_ulid",
    "normalize_value",
]
