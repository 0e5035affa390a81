"""
Abstract base classes for the stores the keyspace layer runs on.
"""

from keyspace.interfaces.store import AtomicBatch, NativeEntry, NativeListIterator, Store

__all__ = ["AtomicBatch", "NativeEntry", "NativeListIterator", "Store"]
