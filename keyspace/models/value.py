"""
Value normalization applied before payloads are handed to a store.
"""

from collections.abc import Sequence
from typing import Any

# Sequences that already have a native representation in the store
_NATIVE_SEQUENCES = (list, str, bytes, bytearray, memoryview)


def normalize_value(value: Any) -> Any:
    """
    Convert ordered collections to the store's flat list representation.

    Tuples, deques, ranges and any other Sequence become a list (top level
    only). Lists, strings, bytes and every non-sequence value pass through
    unchanged.
    """
    if isinstance(value, _NATIVE_SEQUENCES):
        return value
    if isinstance(value, Sequence):
        return list(value)
    return value
