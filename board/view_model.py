"""Presentation records handed to whatever renders the board."""
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence, Tuple

from board.formatting import date_badge, format_date, format_time, parse_event_date
from board.models import EventRecord, FilterSpec

DEFAULT_CATEGORY_COLOR = '#667eea'

CATEGORY_COLORS = {
    'Community': '#667eea',
    'Education': '#f59e0b',
    'Advocacy': '#ef4444',
    'Volunteering': '#10b981',
    'Workshop': '#8b5cf6',
    'Social': '#ec4899',
}

EMPTY_BOARD_TITLE = 'No Events Yet'
EMPTY_BOARD_MESSAGE = 'Click "Add New Event" to create your first event!'
NO_MATCHES_TITLE = 'No Events Found'
NO_MATCHES_MESSAGE = 'Try adjusting your filters or search terms.'


@dataclass(frozen=True)
class EventCard:
    """One event, ready for display. Text fields are unescaped."""
    event_id: str
    title: str
    category: str
    color: str
    display_date: str
    badge_day: str
    badge_month: str
    display_time: str
    location: str
    description: str
    is_past: bool


@dataclass(frozen=True)
class BoardView:
    """Everything needed to paint the list area."""
    cards: Tuple[EventCard, ...]
    filters: FilterSpec
    total_records: int
    empty_title: Optional[str] = None
    empty_message: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.cards)

    @property
    def is_empty(self) -> bool:
        return not self.cards


def category_color(category: str) -> str:
    return CATEGORY_COLORS.get(category, DEFAULT_CATEGORY_COLOR)


def build_card(record: EventRecord, today: date) -> EventCard:
    """Map an EventRecord to its display card."""
    event_date = parse_event_date(record.date)
    day, month = date_badge(record.date)
    return EventCard(
        event_id=record.id,
        title=record.title,
        category=record.category,
        color=category_color(record.category),
        display_date=format_date(record.date),
        badge_day=day,
        badge_month=month,
        display_time=format_time(record.time),
        location=record.location,
        description=record.description,
        is_past=event_date is not None and event_date < today
    )


def build_board_view(
    visible: Sequence[EventRecord],
    filters: FilterSpec,
    total_records: int,
    today: Optional[date] = None
) -> BoardView:
    """
    Build the board view for the currently visible events.

    When nothing is visible the empty-state text depends on whether the
    board has no events at all or the filters hid them.

    Args:
        visible: Filtered and sorted events
        filters: Filter specification that produced them
        total_records: Size of the full record set
        today: Reference date for past-event marking

    Returns:
        BoardView with one card per visible event
    """
    if today is None:
        today = date.today()

    cards = tuple(build_card(record, today) for record in visible)
    if cards:
        return BoardView(cards=cards, filters=filters, total_records=total_records)

    if total_records == 0:
        title, message = EMPTY_BOARD_TITLE, EMPTY_BOARD_MESSAGE
    else:
        title, message = NO_MATCHES_TITLE, NO_MATCHES_MESSAGE
    return BoardView(
        cards=cards,
        filters=filters,
        total_records=total_records,
        empty_title=title,
        empty_message=message
    )
