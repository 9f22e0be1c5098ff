from reportcards.models.snapshot import Snapshot

__all__ = [
    "Snapshot",
]
