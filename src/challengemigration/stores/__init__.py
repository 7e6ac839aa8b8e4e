"""
Canonical challenge stores.
"""

from challengemigration.interfaces import CanonicalStore
from challengemigration.stores.in_memory import InMemoryCanonicalStore

__all__ = [
    "CanonicalStore",
    "InMemoryCanonicalStore",
]
