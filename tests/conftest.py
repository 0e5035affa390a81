"""
Shared pytest fixtures for keyspace tests.
"""

import pytest
import pytest_asyncio

from keyspace.client import Keyspace
from keyspace.models import Key
from keyspace.stores import MemoryStore


class FakeClock:
    """Manually advanced clock for expiration tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Provide a clock that only moves when told to."""
    return FakeClock()


@pytest_asyncio.fixture
async def store(clock):
    """Provide an open MemoryStore driven by the fake clock."""
    async with MemoryStore(clock=clock) as s:
        yield s


@pytest.fixture
def keyspace(store):
    """Provide a Keyspace over the store fixture."""
    return Keyspace(store)


@pytest.fixture
def mixed_keys():
    """Provide keys covering every part type, in ascending order."""
    return [
        Key.of(False),
        Key.of(False, "x"),
        Key.of(True),
        Key.of(float("-inf")),
        Key.of(-1e300),
        Key.of(-42),
        Key.of(-1.5),
        Key.of(-1e-300),
        Key.of(0),
        Key.of(0, False),
        Key.of(0, 1),
        Key.of(0, "a"),
        Key.of(1e-300),
        Key.of(1),
        Key.of(1.5),
        Key.of(42),
        Key.of(2**53),
        Key.of(float("inf")),
        Key.of(""),
        Key.of("", ""),
        Key.of("\x00"),
        Key.of("\x00", "a"),
        Key.of("\x00\x00"),
        Key.of("\x01"),
        Key.of("a"),
        Key.of("a", True),
        Key.of("a", 0),
        Key.of("a", "b"),
        Key.of("a\x00"),
        Key.of("ab"),
        Key.of("b"),
        Key.of("z"),
        Key.of("é"),
        Key.of("中文"),
        Key.of("\U0001f600"),
    ]


@pytest.fixture
def users():
    """Provide sample user records keyed by ("users", id)."""
    return [(Key.of("users", i), {"id": i, "name": f"user{i}"}) for i in range(1, 11)]
