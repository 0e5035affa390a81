"""
ULID generation for time-sortable identifiers.

A ULID is 26 Crockford base32 characters: a 48-bit millisecond timestamp
followed by 80 random bits. ULIDs created in later milliseconds sort after
earlier ones, which makes them convenient StringPart values.
"""

import os

from ulid import ULID

_MAX_TIMESTAMP = (1 << 48) - 1


def new_ulid(timestamp_ms: int | None = None) -> str:
    """
    Generate a new ULID.

    Args:
        timestamp_ms: Milliseconds since the epoch. Defaults to now.

    Returns:
        26-character ULID string.
    """
    if timestamp_ms is None:
        return str(ULID())
    if not 0 <= timestamp_ms <= _MAX_TIMESTAMP:
        raise ValueError(f"timestamp_ms out of range: {timestamp_ms}")
    return str(ULID.from_bytes(timestamp_ms.to_bytes(6, "big") + os.urandom(10)))


def ulid_timestamp(ulid: str) -> int:
    """Return the millisecond timestamp encoded in a ULID."""
    if len(ulid) != 26:
        raise ValueError(f"ULID must be 26 characters, got {len(ulid)}")
    # 26 base32 chars carry 130 bits; anything above "7" overflows 128
    if ulid[0] not in "01234567":
        raise ValueError(f"ULID out of range: {ulid!r}")
    return ULID.from_str(ulid.upper()).milliseconds
