from reportcards.store.persistence import DatabaseSnapshotStorage, MemorySnapshotStorage, SnapshotStorage
from reportcards.store.store import Store

__all__ = [
    "DatabaseSnapshotStorage",
    "MemorySnapshotStorage",
    "SnapshotStorage",
    "Store",
]
