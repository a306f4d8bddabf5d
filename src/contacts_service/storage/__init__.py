"""Contact storage backends."""

from .memory_store import InMemoryContactStore

__all__ = ["InMemoryContactStore"]
