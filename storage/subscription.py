"""Cancellable subscription to store snapshots."""
import logging
from typing import Callable, Iterable, List, Optional

from board.errors import LoadError
from board.models import EventRecord

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[List[EventRecord]], None]
ErrorCallback = Callable[[LoadError], None]


class Subscription:
    """
    Delivers full-collection snapshots to one listener until closed.

    A subscription that reports an error is closed; the listener hears
    about a failure once and the store does not retry.
    """

    def __init__(
        self,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
        on_close: Optional[Callable[['Subscription'], None]] = None
    ):
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._on_close = on_close
        self.active = True

    def deliver(self, records: Iterable[EventRecord]) -> None:
        if self.active:
            self._on_snapshot(list(records))

    def fail(self, error: LoadError) -> None:
        if not self.active:
            return
        self.close()
        self._on_error(error)

    def close(self) -> None:
        """Stop receiving snapshots. Safe to call more than once."""
        if not self.active:
            return
        self.active = False
        if self._on_close:
            self._on_close(self)
        logger.debug("Subscription closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
