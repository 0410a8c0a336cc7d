"""
In-process change notifications for received-batch sets.

The batch service publishes a BatchChange after every committed transition
that touches a pharmacist's batch. Subscribers (typically an inventory view
that re-runs the aggregator) register per pharmacist, or for everything
with pharmacist_id=None. Delivery is best effort: re-running the
aggregator is idempotent, so duplicates and ordering do not matter.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from pharmatrace.models.batch import BatchStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchChange:
    batch_id: int
    pharmacist_id: Optional[int]
    previous_status: BatchStatus
    status: BatchStatus

    @property
    def affects_received_set(self) -> bool:
        return BatchStatus.RECEIVED in (self.previous_status, self.status)


Handler = Callable[[BatchChange], None]


class ChangeNotifier:
    """Callback registry. Handlers run synchronously in the publisher's thread."""

    def __init__(self):
        self._lock = threading.Lock()
        self._handlers: List[Tuple[Optional[int], Handler]] = []

    def subscribe(self, handler: Handler, pharmacist_id: Optional[int] = None) -> Callable[[], None]:
        """Register handler. Returns a callable that removes it again."""
        entry = (pharmacist_id, handler)
        with self._lock:
            self._handlers.append(entry)

        def unsubscribe():
            with self._lock:
                if entry in self._handlers:
                    self._handlers.remove(entry)

        return unsubscribe

    def publish(self, change: BatchChange) -> int:
        """Deliver change to matching handlers. Returns how many were called."""
        with self._lock:
            targets = [
                h for pid, h in self._handlers
                if pid is None or (change.pharmacist_id is not None and pid == change.pharmacist_id)
            ]

        for handler in targets:
            try:
                handler(change)
            except Exception as e:
                # The transition is already committed; one bad subscriber must not hide it from the rest
                logger.error(f"Change handler failed for batch {change.batch_id}: {e}", exc_info=True)
        return len(targets)

    def clear(self):
        with self._lock:
            self._handlers.clear()


# Global notifier instance
inventory_notifier = ChangeNotifier()
