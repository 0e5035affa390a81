"""
AtomicOperation - optimistic check-then-mutate transactions over typed keys.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from keyspace.client.validation import encode_record_key, expiration_ms
from keyspace.interfaces.store import Store
from keyspace.models.codec import KeyCodec, NativeKey
from keyspace.models.entry import CONFLICT, Conflict, Entry, Miss
from keyspace.models.exceptions import OperationStateError
from keyspace.models.key import Key
from keyspace.models.option import ABSENT, Option, Present, ensure_option
from keyspace.models.value import normalize_value

logger = logging.getLogger(__name__)


class OperationState(Enum):
    """Lifecycle of an atomic operation."""

    BUILDING = "building"
    COMMITTED = "committed"  # All checks held, mutations applied
    ABORTED = "aborted"  # A check failed or the commit failed; nothing applied


@dataclass(frozen=True)
class SetMutation:
    key: NativeKey
    value: Any
    expire_in: int | None


@dataclass(frozen=True)
class DeleteMutation:
    key: NativeKey


class AtomicOperation:
    """
    Builder for a set of version checks and mutations committed as one unit.

    Protocol (optimistic concurrency):
    1. Read the entries involved
    2. check()/check_entry() each one against the version that was read
    3. Queue set()/delete() mutations
    4. commit(): if any check fails the result is CONFLICT and nothing is
       applied; the caller re-reads and builds a new operation

    When several mutations target the same key, the last one queued wins and
    the earlier ones are discarded.

    Operations are single use. Once committed or aborted, every further call
    raises OperationStateError.
    """

    def __init__(self, store: Store, codec: KeyCodec) -> None:
        self._store = store
        self._codec = codec
        self._state = OperationState.BUILDING
        self._checks: list[tuple[NativeKey, str | None]] = []
        # Insertion ordered; re-queuing a key moves it to the end
        self._mutations: dict[NativeKey, SetMutation | DeleteMutation] = {}

    @property
    def state(self) -> OperationState:
        return self._state

    def check(self, key: Key, expected: Option[str] = ABSENT) -> "AtomicOperation":
        """
        Require a key's version at commit time.

        Args:
            key: The key to check.
            expected: Present(version) to require that exact version, ABSENT
                to require that the key does not exist.

        Returns:
            This operation, for chaining.
        """
        self._ensure_building()
        ensure_option(expected, "expected")
        native_key = encode_record_key(self._codec, key)

        version = None
        if isinstance(expected, Present):
            if not isinstance(expected.value, str):
                raise TypeError(
                    f"expected version must be a str, got {type(expected.value).__name__}"
                )
            version = expected.value

        self._checks.append((native_key, version))
        return self

    def check_entry(self, entry: Entry | Miss) -> "AtomicOperation":
        """
        Require that a previously read entry is still current.

        A Miss, or an Entry without a version, requires the key to be absent.
        """
        version = entry.version if isinstance(entry, Entry) else None
        expected: Option[str] = ABSENT if version is None else Present(version)
        return self.check(entry.key, expected)

    def set(self, key: Key, value: Any, expiration: Option[int] = ABSENT) -> "AtomicOperation":
        """
        Queue a write.

        Args:
            key: The key to write.
            value: Payload; ordered collections are stored as lists.
            expiration: Present(milliseconds) time to live, or ABSENT.

        Returns:
            This operation, for chaining.
        """
        self._ensure_building()
        native_key = encode_record_key(self._codec, key)
        mutation = SetMutation(native_key, normalize_value(value), expiration_ms(expiration))
        self._queue(mutation)
        return self

    def delete(self, key: Key) -> "AtomicOperation":
        """Queue a deletion. Deleting an absent key is not a conflict."""
        self._ensure_building()
        self._queue(DeleteMutation(encode_record_key(self._codec, key)))
        return self

    async def commit(self) -> str | Conflict:
        """
        Submit the checks and mutations to the store as one unit.

        Returns:
            The version assigned to the transaction, or CONFLICT if a check
            failed (nothing was applied).

        Raises:
            OperationStateError: If the operation was already committed or
                aborted.
        """
        self._ensure_building()

        batch = self._store.atomic()
        for native_key, version in self._checks:
            batch.check(native_key, version)
        for mutation in self._mutations.values():
            if isinstance(mutation, SetMutation):
                batch.set(mutation.key, mutation.value, mutation.expire_in)
            else:
                batch.delete(mutation.key)

        try:
            version = await batch.commit()
        except (Exception, asyncio.CancelledError) as e:
            # The store guarantees an interrupted commit is all-or-nothing
            self._state = OperationState.ABORTED
            logger.warning(f"Atomic commit interrupted: {e!r}")
            raise

        if version is None:
            self._state = OperationState.ABORTED
            logger.debug(
                f"Atomic commit rejected: {len(self._checks)} checks, "
                f"{len(self._mutations)} mutations discarded"
            )
            return CONFLICT

        self._state = OperationState.COMMITTED
        logger.debug(
            f"Atomic commit {version}: {len(self._checks)} checks, "
            f"{len(self._mutations)} mutations applied"
        )
        return version

    def _queue(self, mutation: SetMutation | DeleteMutation) -> None:
        # Last queued wins: drop any earlier mutation of the same key
        self._mutations.pop(mutation.key, None)
        self._mutations[mutation.key] = mutation

    def _ensure_building(self) -> None:
        if self._state is not OperationState.BUILDING:
            raise OperationStateError(self._state.value)
