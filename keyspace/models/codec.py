"""
KeyCodec - order-preserving mapping between Key and native byte keys.
"""

from collections.abc import Callable

from keyspace.models.exceptions import DecodeError
from keyspace.models.key import (
    FALSE_TAG,
    NUMBER_TAG,
    STRING_TAG,
    TRUE_TAG,
    BoolPart,
    Key,
    KeyPart,
    NumberPart,
    StringPart,
)

NativeKey = bytes

# Tag byte -> decoder of the part starting at that byte
_DECODERS: dict[int, Callable[[bytes, int], tuple[KeyPart, int]]] = {
    FALSE_TAG: BoolPart.decode,
    TRUE_TAG: BoolPart.decode,
    NUMBER_TAG: NumberPart.decode,
    STRING_TAG: StringPart.decode,
}


class KeyCodec:
    """
    Bidirectional, order-preserving Key <-> bytes codec.

    Format (per part, concatenated):
    - false:  [0x20]
    - true:   [0x21]
    - number: [0x30][8 bytes, sign-adjusted big-endian double]
    - string: [0x40][utf-8 with 0x00 escaped as 0x00 0xFF][0x00]

    Guarantees:
    - decode(encode(k)) == k
    - encode(a) < encode(b) iff a < b
    - encode(prefix) is a byte prefix of encode(k) for every k extending prefix
    """

    @staticmethod
    def encode(key: Key) -> NativeKey:
        """
        Encode a key into its native byte representation.

        Args:
            key: The key to encode (may be empty when used as a scan prefix).

        Returns:
            The native key bytes.
        """
        return b"".join(part.encode() for part in key.parts)

    @staticmethod
    def decode(native_key: NativeKey) -> Key:
        """
        Decode native key bytes back into a Key.

        Args:
            native_key: Bytes produced by encode().

        Returns:
            The decoded Key.

        Raises:
            DecodeError: If the bytes do not form a valid key.
        """
        data = bytes(native_key)
        parts: list[KeyPart] = []
        offset = 0

        while offset < len(data):
            decoder = _DECODERS.get(data[offset])
            if decoder is None:
                raise DecodeError(f"unsupported key part tag 0x{data[offset]:02x}", offset)
            part, offset = decoder(data, offset)
            parts.append(part)

        return Key(*parts)
