"""
Custom exceptions for the keyspace layer.
"""


class KeyspaceError(Exception):
    """Base class for every error raised by the keyspace layer itself."""


class InvalidKeyPart(KeyspaceError, TypeError):
    """
    Raised when a key part is built from an unsupported value.

    Only booleans, numbers and strings can appear in a key.
    """

    def __init__(self, value: object, reason: str | None = None):
        """
        Initialize invalid key part error.

        Args:
            value: The offending value.
            reason: Optional detail appended to the message.
        """
        self.value = value
        message = f"Invalid key part {value!r} of type {type(value).__name__}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DecodeError(KeyspaceError, ValueError):
    """
    Raised when a native key cannot be decoded back into a Key.

    This is a fail-fast error: the bytes were not produced by the codec.
    """

    def __init__(self, reason: str, offset: int):
        """
        Initialize decode error.

        Args:
            reason: What was wrong with the native key.
            offset: Byte offset where decoding failed.
        """
        self.reason = reason
        self.offset = offset
        super().__init__(f"Cannot decode native key at offset {offset}: {reason}")


class OperationStateError(KeyspaceError, RuntimeError):
    """Raised when an atomic operation is used after it reached a terminal state."""

    def __init__(self, state: str):
        self.state = state
        super().__init__(f"Atomic operation is {state}; it can no longer be modified")


class StoreClosedError(KeyspaceError):
    """Raised by a store when it is used after being closed."""
