"""Board controller: owns the record set and filters, talks to the store."""
import logging
import time
from datetime import date
from typing import Callable, List, Optional

from board import state as board_state
from board.errors import InvariantViolation, LoadError, PersistenceError, ValidationError
from board.formatting import join_time, split_time
from board.models import (
    FORM_CREATE,
    FORM_EDIT,
    EventRecord,
    FormState,
    FormValues,
)
from board.presenter import BoardPresenter
from board.state import BoardState
from board.view_model import BoardView, build_board_view

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = 'Failed to load events. Please check your store configuration.'
SAVE_ERROR_MESSAGE = 'Failed to save event. Please try again.'
DELETE_ERROR_MESSAGE = 'Failed to delete event. Please try again.'
MISSING_EVENT_MESSAGE = 'This event no longer exists.'
DELETE_CONFIRMATION = 'Are you sure you want to delete this event?'

REQUIRED_FIELDS = ('title', 'date', 'hour', 'minute', 'category')

ADD_HEADING = 'Add New Event'
EDIT_HEADING = 'Edit Event'

SAMPLE_EVENTS = (
    {
        'title': 'Youth Town Hall Meeting',
        'date': '2025-11-15',
        'time': '18:00',
        'location': 'City Hall Auditorium',
        'description': 'Join local government leaders to discuss issues affecting '
                       'young people in our community.',
        'category': 'Advocacy',
    },
    {
        'title': 'Environmental Action Day',
        'date': '2025-11-18',
        'time': '09:00',
        'location': 'Central Park',
        'description': "Join us for a day of environmental action! We'll be planting "
                       "trees and cleaning up litter.",
        'category': 'Volunteering',
    },
)


def generate_event_id() -> str:
    """Millisecond timestamp id, as assigned to new events."""
    return str(int(time.time() * 1000))


class BoardController:
    """
    Orchestrates the events board.

    Store pushes replace the record set wholesale, filter actions replace
    the filter specification, and either one recomputes the visible list
    and hands a fresh BoardView to the presenter. Create, update and
    delete are sent to the store; the next snapshot is the source of
    truth for what the board shows.
    """

    def __init__(
        self,
        store,
        presenter: Optional[BoardPresenter] = None,
        id_factory: Callable[[], str] = generate_event_id,
        today: Callable[[], date] = date.today,
        seed_sample_events: bool = True
    ):
        """
        Args:
            store: Store adapter (subscribe/create/update/delete/batch_create)
            presenter: Rendering layer; defaults to one that draws nothing
            id_factory: Source of new event ids
            today: Returns the reference date for upcoming/past
            seed_sample_events: Seed two sample events into an empty store
        """
        self.store = store
        self.presenter = presenter or BoardPresenter()
        self._id_factory = id_factory
        self._today = today
        self._seed_sample_events = seed_sample_events
        self._state = BoardState()
        self._subscription = None

    @property
    def state(self) -> BoardState:
        return self._state

    @property
    def visible(self) -> List[EventRecord]:
        return list(self._state.visible)

    @property
    def view(self) -> BoardView:
        return build_board_view(
            self._state.visible,
            self._state.filters,
            len(self._state.records),
            self._today()
        )

    # Lifecycle

    def start(self) -> None:
        """Subscribe to the store. Calling it again is a no-op."""
        if self._subscription is not None:
            return
        logger.info("Subscribing to event store")
        self._subscription = self.store.subscribe(self.on_store_snapshot, self.on_store_error)

    def close(self) -> None:
        """Release the store subscription."""
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
            logger.info("Store subscription released")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # Store callbacks

    def on_store_snapshot(self, records: List[EventRecord]) -> None:
        """Replace the record set with a snapshot pushed by the store."""
        self._state = board_state.with_snapshot(self._state, records, self._today())
        logger.info(
            f"Received snapshot with {len(self._state.records)} events",
            extra={'visible': len(self._state.visible)}
        )
        self._publish_view()

        if self._state.snapshots_seen == 1 and not self._state.records:
            self._seed()

    def on_store_error(self, error: LoadError) -> None:
        """Record a failed subscription; the last known records stay."""
        if self._state.load_error is not None:
            return
        logger.error(f"Error loading events: {error}")
        self._state = board_state.with_load_error(self._state, error)
        self.presenter.show_error(LOAD_ERROR_MESSAGE)

    # Filters

    def set_filter(self, **changes) -> None:
        """
        Merge filter changes and recompute the visible list.

        Accepts any of search, category, temporal and sort.
        """
        self._state = board_state.with_filters(self._state, self._today(), **changes)
        self._publish_view()

    def clear_filter(self) -> None:
        self._state = board_state.with_default_filters(self._state, self._today())
        self._publish_view()

    # Form

    def begin_create(self) -> None:
        self._state = board_state.with_form(self._state, None)
        self.presenter.show_form(FormState(mode=FORM_CREATE, heading=ADD_HEADING))

    def begin_edit(self, event_id: str) -> None:
        """Open the edit form for an event. Unknown ids are ignored."""
        record = self._state.find(event_id)
        if record is None:
            logger.debug(f"Ignoring edit request for unknown event {event_id}")
            return

        hour, minute = split_time(record.time)
        values = FormValues(
            title=record.title,
            date=record.date,
            hour=hour,
            minute=minute,
            location=record.location,
            description=record.description,
            category=record.category
        )
        self._state = board_state.with_form(self._state, record.id)
        self.presenter.show_form(
            FormState(mode=FORM_EDIT, heading=EDIT_HEADING, values=values, event_id=record.id)
        )

    def cancel(self) -> None:
        self._close_form()

    def submit(self, values: FormValues) -> bool:
        """
        Save the form as a new event or as changes to the edit target.

        Store rejections are reported to the presenter and leave the form
        open. Returns True once the store has accepted the change.

        Raises:
            InvariantViolation: If the edit target was never synced
        """
        invalid = validate_form(values)
        if invalid:
            error = ValidationError(invalid)
            logger.warning(f"Rejected event form: {error}")
            self.presenter.show_error(str(error))
            return False

        edit_target = self._state.edit_target
        try:
            if edit_target is None:
                self._create(values)
            else:
                self._update(edit_target, values)
        except InvariantViolation:
            raise
        except PersistenceError as e:
            logger.error(f"Error saving event: {e}")
            self.presenter.show_error(SAVE_ERROR_MESSAGE)
            return False

        self._close_form()
        return True

    def remove(self, event_id: str) -> bool:
        """
        Delete an event after the user confirms.

        Records that were never synced cannot be deleted and are skipped
        without contacting the store. Returns True if a delete was sent
        and accepted.
        """
        if not self.presenter.confirm(DELETE_CONFIRMATION):
            return False

        record = self._state.find(event_id)
        if record is None or not record.store_key:
            logger.debug(f"Nothing to delete for event {event_id}")
            return False

        try:
            self.store.delete(record.store_key)
        except PersistenceError as e:
            logger.error(f"Error deleting event {event_id}: {e}")
            self.presenter.show_error(DELETE_ERROR_MESSAGE)
            return False

        logger.info(f"Event {event_id} deleted")
        return True

    # Internals

    def _create(self, values: FormValues) -> None:
        record = EventRecord(id=self._next_id(), **_record_fields(values))
        self.store.create(record)
        logger.info(f"Event {record.id} added")

    def _update(self, event_id: str, values: FormValues) -> None:
        record = self._state.find(event_id)
        if record is None:
            raise PersistenceError(MISSING_EVENT_MESSAGE)
        if not record.store_key:
            logger.error(f"Event {event_id} has no store key; refusing to update")
            raise InvariantViolation(f"Event {event_id} was never synced")

        fields = dict(_record_fields(values), id=record.id)
        self.store.update(record.store_key, fields)
        logger.info(f"Event {event_id} updated")

    def _seed(self) -> None:
        if not self._seed_sample_events:
            return
        taken = set()
        records = []
        for sample in SAMPLE_EVENTS:
            event_id = self._next_id(taken)
            taken.add(event_id)
            records.append(EventRecord(id=event_id, **sample))

        logger.info(f"Seeding {len(records)} sample events")
        try:
            self.store.batch_create(records)
        except PersistenceError as e:
            logger.error(f"Error initializing sample events: {e}")
            self.presenter.show_error(SAVE_ERROR_MESSAGE)

    def _next_id(self, taken=()) -> str:
        used = {record.id for record in self._state.records} | set(taken)
        candidate = self._id_factory()
        suffix = 0
        while candidate in used:
            if candidate.isdigit():
                candidate = str(int(candidate) + 1)
            else:
                suffix += 1
                candidate = f"{self._id_factory()}-{suffix}"
        return candidate

    def _close_form(self) -> None:
        self._state = board_state.without_form(self._state)
        self.presenter.close_form()

    def _publish_view(self) -> None:
        self.presenter.show_board(self.view)


def validate_form(values: FormValues) -> List[str]:
    """Return the names of required fields left blank."""
    return [
        name for name in REQUIRED_FIELDS
        if not (getattr(values, name) or '').strip()
    ]


def _record_fields(values: FormValues) -> dict:
    return {
        'title': values.title,
        'date': values.date,
        'time': join_time(values.hour, values.minute),
        'location': values.location,
        'description': values.description,
        'category': values.category,
    }
