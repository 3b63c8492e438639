"""Unit tests for the in-memory event store and subscriptions."""
from unittest.mock import Mock

import pytest

from board.errors import LoadError, PersistenceError
from board.models import EventRecord
from storage.memory_store import InMemoryEventStore
from storage.subscription import Subscription


def make_event(event_id, title='Event'):
    return EventRecord(
        id=event_id,
        title=title,
        date='2025-03-01',
        time='10:00',
        location='Hall',
        description='Desc',
        category='Community'
    )


@pytest.fixture
def store():
    return InMemoryEventStore(clock=lambda: 1700000000)


def test_subscribe_delivers_current_collection(store):
    """Test a new subscriber gets the full collection straight away."""
    store.create(make_event('1'))
    on_snapshot = Mock()

    store.subscribe(on_snapshot, Mock())

    records = on_snapshot.call_args[0][0]
    assert [r.id for r in records] == ['1']
    assert records[0].store_key == '1'
    assert records[0].created_at == 1700000000


def test_every_change_is_pushed(store):
    on_snapshot = Mock()
    store.subscribe(on_snapshot, Mock())

    store.create(make_event('1'))
    store.update('1', {'title': 'Renamed', 'store_key': 'ignored', 'created_at': 5})
    store.delete('1')

    snapshots = [call[0][0] for call in on_snapshot.call_args_list]
    assert len(snapshots) == 4
    assert snapshots[2][0].title == 'Renamed'
    assert snapshots[2][0].store_key == '1'
    assert snapshots[2][0].created_at == 1700000000
    assert snapshots[3] == []


def test_create_existing_id_rejected(store):
    store.create(make_event('1'))
    with pytest.raises(PersistenceError):
        store.create(make_event('1'))


def test_update_missing_key_rejected(store):
    with pytest.raises(PersistenceError):
        store.update('nope', {'title': 'x'})


def test_batch_create_is_all_or_nothing(store):
    store.create(make_event('2'))

    with pytest.raises(PersistenceError):
        store.batch_create([make_event('1'), make_event('2')])

    assert [r.id for r in store.get_all_events()] == ['2']


def test_closed_subscription_stops_receiving(store):
    on_snapshot = Mock()
    subscription = store.subscribe(on_snapshot, Mock())

    subscription.close()
    store.create(make_event('1'))

    assert on_snapshot.call_count == 1
    assert store.subscriber_count == 0
    assert not subscription.active


def test_subscription_fail_reports_once_and_closes():
    on_error = Mock()
    on_close = Mock()
    subscription = Subscription(Mock(), on_error, on_close=on_close)

    subscription.fail(LoadError('gone'))
    subscription.fail(LoadError('gone again'))

    on_error.assert_called_once()
    on_close.assert_called_once_with(subscription)
    assert not subscription.active


def test_subscription_as_context_manager():
    on_snapshot = Mock()
    with Subscription(on_snapshot, Mock()) as subscription:
        subscription.deliver([])
    subscription.deliver([])
    on_snapshot.assert_called_once_with([])
