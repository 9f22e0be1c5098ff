import itertools
import threading

from reportcards.schemas.rewrite import RewriteTarget, StagedRewrite
from reportcards.store.store import Store


class RewriteStaging:
    """Rewrite suggestions waiting for a teacher to accept them.

    Nothing staged here is persisted. Each request takes a sequence number from
    :meth:`begin`; a response is kept only if no newer request for the same target started
    in the meantime, so the last request wins.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sequence = itertools.count(1)
        self._latest: dict[tuple[str, str], int] = {}
        self._staged: dict[tuple[str, str], StagedRewrite] = {}

    def begin(self, report_id: str, target: RewriteTarget) -> int:
        with self._lock:
            sequence = next(self._sequence)
            self._latest[(report_id, target.key)] = sequence
            return sequence

    def offer(self, report_id: str, target: RewriteTarget, sequence: int, text: str) -> bool:
        key = (report_id, target.key)
        with self._lock:
            if self._latest.get(key) != sequence:
                return False
            self._staged[key] = StagedRewrite(target=target, rewritten_text=text, sequence=sequence)
            return True

    def abandon(self, report_id: str, target: RewriteTarget, sequence: int) -> None:
        """Forget a request that produced no text."""
        key = (report_id, target.key)
        with self._lock:
            if self._latest.get(key) != sequence:
                return
            staged = self._staged.get(key)
            if staged is None:
                del self._latest[key]
            else:
                self._latest[key] = staged.sequence

    def get(self, report_id: str, target: RewriteTarget) -> StagedRewrite | None:
        with self._lock:
            return self._staged.get((report_id, target.key))

    def discard(self, report_id: str, target: RewriteTarget) -> None:
        key = (report_id, target.key)
        with self._lock:
            self._release(key, self._staged.pop(key, None))

    def accept(self, store: Store, report_id: str, target: RewriteTarget) -> StagedRewrite | None:
        key = (report_id, target.key)
        with self._lock:
            staged = self._staged.pop(key, None)
            self._release(key, staged)
        if staged is None:
            return None
        store.accept_rewrite(report_id, target, staged.rewritten_text)
        return staged

    def _release(self, key: tuple[str, str], staged: StagedRewrite | None) -> None:
        # keep the marker while a newer request for the same target is still in flight
        if staged is not None and self._latest.get(key) == staged.sequence:
            del self._latest[key]

    def pending_count(self) -> int:
        """Targets with a request in flight or a suggestion waiting."""
        with self._lock:
            return len(self._latest.keys() | self._staged.keys())
