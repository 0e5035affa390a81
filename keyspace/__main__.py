"""
Walk through the keyspace API against an in-memory store.

Usage:
    LOG_LEVEL=DEBUG python -m keyspace
"""

import asyncio
import logging
import os

from keyspace.client import Keyspace
from keyspace.models import CONFLICT, Entry, Key, Present
from keyspace.stores import MemoryStore

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


async def run_walkthrough(store: MemoryStore) -> list[str]:
    """
    Run the optimistic concurrency walkthrough on a user record.

    Returns:
        The versions observed, in order: first write, second write, commit.
    """
    keyspace = Keyspace(store)
    key = Key.of("users", 42)

    v1 = await keyspace.set(key, {"name": "a"})
    entry = await keyspace.get(key)
    logger.info(f"Read {entry.key!r} = {entry.value} at version {v1}")

    v2 = await keyspace.set(key, {"name": "b"})
    logger.info(f"Overwrote {key!r} at version {v2}")

    stale = Entry(key, None, v1)
    result = await keyspace.atomic().check_entry(stale).set(key, {"name": "c"}).commit()
    if result is not CONFLICT:
        raise RuntimeError(f"Stale check unexpectedly committed at {result}")
    logger.info(f"Commit checked against {v1} was rejected")

    v3 = await keyspace.atomic().check(key, Present(v2)).set(key, {"name": "c"}).commit()
    logger.info(f"Commit checked against {v2} applied at version {v3}")

    async for listed in keyspace.list(Key.of("users")):
        logger.info(f"{listed.key!r} = {listed.value} ({listed.version})")

    return [v1, v2, v3]


async def main() -> None:
    async with MemoryStore() as store:
        await run_walkthrough(store)


if __name__ == "__main__":
    configure_logging()
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
