"""In-process event store with synchronous snapshot pushes."""
import logging
import time
from typing import Callable, Dict, List, Optional

from board.errors import PersistenceError
from board.models import EventRecord
from storage.items import item_to_record, record_to_item, writable_fields
from storage.subscription import ErrorCallback, SnapshotCallback, Subscription

logger = logging.getLogger(__name__)


class InMemoryEventStore:
    """Store that keeps items in a dict and pushes after every change."""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._items: Dict[str, dict] = {}
        self._subscriptions: List[Subscription] = []
        self._clock = clock or time.time

    def subscribe(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> Subscription:
        """Register a listener and immediately send it the full collection."""
        subscription = Subscription(on_snapshot, on_error, on_close=self._unsubscribe)
        self._subscriptions.append(subscription)
        subscription.deliver(self.get_all_events())
        return subscription

    def get_all_events(self) -> List[EventRecord]:
        """Return every stored event ordered by store key."""
        records = [item_to_record(self._items[key]) for key in sorted(self._items)]
        return [record for record in records if record]

    def create(self, record: EventRecord) -> None:
        if record.id in self._items:
            raise PersistenceError(f"Event {record.id} already exists")
        self._items[record.id] = record_to_item(record, record.id, self._now())
        logger.info(f"Created event {record.id}")
        self._publish()

    def update(self, store_key: str, fields: dict) -> None:
        item = self._items.get(store_key)
        if item is None:
            raise PersistenceError(f"No stored event with key {store_key}")
        item.update(writable_fields(fields))
        item['updated_at'] = self._now()
        logger.info(f"Updated event {store_key}")
        self._publish()

    def delete(self, store_key: str) -> None:
        self._items.pop(store_key, None)
        logger.info(f"Deleted event {store_key}")
        self._publish()

    def batch_create(self, records: List[EventRecord]) -> None:
        """Create all records or none of them."""
        clashes = [record.id for record in records if record.id in self._items]
        if clashes:
            raise PersistenceError(f"Events already exist: {', '.join(clashes)}")
        now = self._now()
        for record in records:
            self._items[record.id] = record_to_item(record, record.id, now)
        logger.info(f"Created {len(records)} events in one batch")
        self._publish()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _publish(self) -> None:
        snapshot = self.get_all_events()
        for subscription in list(self._subscriptions):
            subscription.deliver(snapshot)

    def _unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _now(self) -> int:
        return int(self._clock())
