"""
Typed client API over a store.
"""

from keyspace.client.atomic import AtomicOperation, OperationState
from keyspace.client.keyspace import Keyspace
from keyspace.client.scanner import ListIterator

__all__ = ["AtomicOperation", "Keyspace", "ListIterator", "OperationState"]
