"""
The store module resolves the asset graph for a single cluster-assets run.

- Uses the asset name as the key for all assets and their status.
- Walks declared dependencies up front so that unknown assets and cycles are
  rejected before any asset is loaded or generated.
- Memoizes resolution so shared dependencies are resolved once per store.

This abstract interface allows for various implementations.
"""

from .store import Store, StoreConfig, StoreEvent
from .in_memory import InMemoryStore
from .status import Status, StatusInfo

__all__ = [
    "Store",
    "StoreConfig",
    "StoreEvent",
    "InMemoryStore",
    "Status",
    "StatusInfo",
]
