"""
Argument checks shared by the keyspace client and atomic operations.
"""

from keyspace.models.codec import KeyCodec, NativeKey
from keyspace.models.key import Key
from keyspace.models.option import Option, Present, ensure_option


def encode_record_key(codec: KeyCodec, key: Key) -> NativeKey:
    """
    Encode a key that addresses a single record.

    Raises:
        TypeError: If key is not a Key.
        ValueError: If key is empty; the empty key is only a scan prefix.
    """
    if not isinstance(key, Key):
        raise TypeError(f"key must be a Key, got {type(key).__name__}")
    if key.is_empty():
        raise ValueError("key must have at least one part")
    return codec.encode(key)


def expiration_ms(expiration: Option[int]) -> int | None:
    """
    Translate an optional time to live into the store's representation.

    Returns:
        Milliseconds, or None for no expiration.
    """
    return _present_count(expiration, "expiration")


def limit_count(limit: Option[int]) -> int | None:
    return _present_count(limit, "limit")


def _present_count(option: Option[int], name: str) -> int | None:
    ensure_option(option, name)
    if not isinstance(option, Present):
        return None

    value = option.value
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value
