"""imsaccess testing utilities.

In-memory fakes of the registry and key-value store, plus pytest fixtures.
"""

from imsaccess.testing.fakes import MemoryRegistry, MemoryStore, MockCall

__all__ = [
    "MemoryRegistry",
    "MemoryStore",
    "MockCall",
]
