"""
Typed composite keys.

A Key is an ordered sequence of parts, each one of BoolPart, NumberPart or
StringPart. Keys are totally ordered: parts are compared by type first
(boolean < number < string) and then by value, and a key sorts before every
key it is a strict prefix of.

Each part variant owns its native byte encoding so that comparing encoded
keys byte-wise gives the same order as comparing the Key objects.
"""

import math
import struct
from dataclasses import dataclass
from functools import total_ordering
from typing import Any, Union

from keyspace.models.exceptions import DecodeError, InvalidKeyPart

FALSE_TAG = 0x20
TRUE_TAG = 0x21
NUMBER_TAG = 0x30
STRING_TAG = 0x40

_NUMBER_WIDTH = 8
_SIGN_BIT = 1 << 63
_ALL_BITS = (1 << 64) - 1


@dataclass(frozen=True)
class BoolPart:
    """A boolean key part. false sorts before true."""

    value: bool

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            raise InvalidKeyPart(self.value, "BoolPart expects a bool")

    def sort_key(self) -> tuple[int, Any]:
        return (0, int(self.value))

    def encode(self) -> bytes:
        return bytes([TRUE_TAG if self.value else FALSE_TAG])

    @classmethod
    def decode(cls, data: bytes, offset: int) -> tuple["BoolPart", int]:
        return cls(data[offset] == TRUE_TAG), offset + 1


@dataclass(frozen=True)
class NumberPart:
    """
    A numeric key part, ordered numerically.

    Numbers are stored as IEEE-754 doubles, so integers must be exactly
    representable as one. NaN is rejected and -0.0 is stored as 0.0.
    """

    value: int | float

    def __post_init__(self) -> None:
        value = self.value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidKeyPart(value, "NumberPart expects an int or float")

        if isinstance(value, float):
            if math.isnan(value):
                raise InvalidKeyPart(value, "NaN has no position in the key order")
            if value == 0.0:
                object.__setattr__(self, "value", 0.0)
            return

        try:
            exact = int(float(value)) == value
        except OverflowError:
            exact = False
        if not exact:
            raise InvalidKeyPart(value, "integer is not exactly representable as a double")

    def sort_key(self) -> tuple[int, Any]:
        return (1, float(self.value))

    def encode(self) -> bytes:
        (bits,) = struct.unpack(">Q", struct.pack(">d", float(self.value)))
        # Negative doubles sort in reverse when read as unsigned integers
        if bits & _SIGN_BIT:
            bits ^= _ALL_BITS
        else:
            bits ^= _SIGN_BIT
        return bytes([NUMBER_TAG]) + bits.to_bytes(_NUMBER_WIDTH, "big")

    @classmethod
    def decode(cls, data: bytes, offset: int) -> tuple["NumberPart", int]:
        start = offset + 1
        end = start + _NUMBER_WIDTH
        if end > len(data):
            raise DecodeError("truncated number", offset)

        bits = int.from_bytes(data[start:end], "big")
        if bits & _SIGN_BIT:
            bits ^= _SIGN_BIT
        else:
            bits ^= _ALL_BITS
        (number,) = struct.unpack(">d", bits.to_bytes(_NUMBER_WIDTH, "big"))

        if math.isnan(number):
            raise DecodeError("number is NaN", offset)
        if number.is_integer():
            return cls(int(number)), end
        return cls(number), end


@dataclass(frozen=True)
class StringPart:
    """A string key part, ordered by its UTF-8 bytes."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise InvalidKeyPart(self.value, "StringPart expects a str")
        try:
            self.value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InvalidKeyPart(self.value, "string is not valid UTF-8") from e

    def sort_key(self) -> tuple[int, Any]:
        return (2, self.value.encode("utf-8"))

    def encode(self) -> bytes:
        # Escape NUL so the terminator stays unambiguous and order is kept
        raw = self.value.encode("utf-8").replace(b"\x00", b"\x00\xff")
        return bytes([STRING_TAG]) + raw + b"\x00"

    @classmethod
    def decode(cls, data: bytes, offset: int) -> tuple["StringPart", int]:
        raw = bytearray()
        pos = offset + 1
        while pos < len(data):
            byte = data[pos]
            if byte != 0x00:
                raw.append(byte)
                pos += 1
                continue
            if pos + 1 < len(data) and data[pos + 1] == 0xFF:
                raw.append(0x00)
                pos += 2
                continue
            try:
                return cls(raw.decode("utf-8")), pos + 1
            except UnicodeDecodeError as e:
                raise DecodeError(f"string is not valid UTF-8 ({e.reason})", offset) from e
        raise DecodeError("unterminated string", offset)


KeyPart = Union[BoolPart, NumberPart, StringPart]

_PART_TYPES = (BoolPart, NumberPart, StringPart)


def part_of(value: Any) -> KeyPart:
    """
    Wrap a raw Python value in the matching key part.

    Args:
        value: A bool, int, float or str.

    Returns:
        The corresponding KeyPart.

    Raises:
        InvalidKeyPart: If value is of any other type.
    """
    # bool before int: bool is a subclass of int
    if isinstance(value, bool):
        return BoolPart(value)
    if isinstance(value, (int, float)):
        return NumberPart(value)
    if isinstance(value, str):
        return StringPart(value)
    raise InvalidKeyPart(value, "key parts must be bool, int, float or str")


@total_ordering
class Key:
    """
    Immutable, totally ordered sequence of key parts.

    Example:
        Key(StringPart("users"), NumberPart(42)) == Key.of("users", 42)
    """

    __slots__ = ("_parts",)

    def __init__(self, *parts: KeyPart) -> None:
        for part in parts:
            if not isinstance(part, _PART_TYPES):
                raise InvalidKeyPart(part, "expected BoolPart, NumberPart or StringPart")
        self._parts: tuple[KeyPart, ...] = parts

    @classmethod
    def of(cls, *values: Any) -> "Key":
        """Build a key from raw bool/int/float/str values."""
        return cls(*(part_of(value) for value in values))

    @property
    def parts(self) -> tuple[KeyPart, ...]:
        return self._parts

    def values(self) -> tuple[Any, ...]:
        """Return the raw values of the parts."""
        return tuple(part.value for part in self._parts)

    def is_empty(self) -> bool:
        return not self._parts

    def child(self, *values: Any) -> "Key":
        """Return a new key extending this one with raw values."""
        return Key(*self._parts, *(part_of(value) for value in values))

    def is_prefix_of(self, other: "Key") -> bool:
        """True if other starts with every part of this key."""
        return other._parts[: len(self._parts)] == self._parts

    def sort_key(self) -> tuple[tuple[int, Any], ...]:
        return tuple(part.sort_key() for part in self._parts)

    def __len__(self) -> int:
        return len(self._parts)

    def __iter__(self):
        return iter(self._parts)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Key(*self._parts[index])
        return self._parts[index]

    def __add__(self, other: "Key") -> "Key":
        if not isinstance(other, Key):
            return NotImplemented
        return Key(*self._parts, *other._parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Key):
            return NotImplemented
        return self._parts == other._parts

    def __lt__(self, other: "Key") -> bool:
        if not isinstance(other, Key):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __hash__(self) -> int:
        return hash(self._parts)

    def __repr__(self) -> str:
        return f"Key({', '.join(repr(value) for value in self.values())})"
