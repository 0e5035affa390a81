"""
Store implementations.
"""

from keyspace.stores.memory import MemoryStore

__all__ = ["MemoryStore"]
