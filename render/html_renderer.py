"""HTML rendering of the events board using BeautifulSoup."""
import logging
from typing import List, Optional
from urllib.parse import urlencode

from bs4 import BeautifulSoup
from bs4.formatter import HTMLFormatter

from board.formatting import escape_text
from board.models import (
    ANY,
    CATEGORIES,
    FORM_EDIT,
    SORT_DATE_ASC,
    SORT_DATE_DESC,
    SORT_TITLE_ASC,
    SORT_TITLE_DESC,
    TEMPORAL_ANY,
    TEMPORAL_PAST,
    TEMPORAL_UPCOMING,
    FilterSpec,
    FormState,
)
from board.presenter import BoardPresenter
from board.view_model import BoardView, EventCard

logger = logging.getLogger(__name__)

PAGE_TITLE = 'Events Board'

DATE_FILTER_OPTIONS = (
    (TEMPORAL_ANY, 'All Dates'),
    (TEMPORAL_UPCOMING, 'Upcoming'),
    (TEMPORAL_PAST, 'Past'),
)

SORT_OPTIONS = (
    (SORT_DATE_DESC, 'Date (Newest First)'),
    (SORT_DATE_ASC, 'Date (Oldest First)'),
    (SORT_TITLE_ASC, 'Title (A-Z)'),
    (SORT_TITLE_DESC, 'Title (Z-A)'),
)

HOURS = tuple(f'{h:02d}' for h in range(24))
MINUTES = tuple(f'{m:02d}' for m in range(60))

# Text nodes and attribute values are escaped on output
PAGE_FORMATTER = HTMLFormatter(entity_substitution=escape_text)


class HtmlPresenter(BoardPresenter):
    """
    Presenter that collects what the controller shows and renders it
    as a single HTML page.

    Args:
        confirmed: Answer given to delete confirmations (the request
            carried an explicit confirmation)
    """

    def __init__(self, confirmed: bool = False):
        self.confirmed = confirmed
        self.board: Optional[BoardView] = None
        self.form: Optional[FormState] = None
        self.errors: List[str] = []

    def show_board(self, view: BoardView) -> None:
        self.board = view

    def show_form(self, form: FormState) -> None:
        self.form = form

    def close_form(self) -> None:
        self.form = None

    def show_error(self, message: str) -> None:
        self.errors.append(message)

    def confirm(self, message: str) -> bool:
        logger.debug(f"Confirmation requested: {message} -> {self.confirmed}")
        return self.confirmed

    def render(self) -> str:
        return render_page(self.board, self.form, self.errors)


def render_page(
    board: Optional[BoardView],
    form: Optional[FormState] = None,
    errors: Optional[List[str]] = None
) -> str:
    """
    Render the full board page.

    Args:
        board: Current board view, or None if nothing has loaded
        form: Open add/edit form, if any
        errors: Messages for the error banner

    Returns:
        HTML document as a string
    """
    soup = BeautifulSoup(
        '<!DOCTYPE html><html><head></head><body></body></html>',
        'html.parser'
    )
    head = soup.head
    head.append(_tag(soup, 'meta', attrs={'charset': 'utf-8'}))
    head.append(_tag(soup, 'title', PAGE_TITLE))

    body = soup.body
    header = _tag(soup, 'header', attrs={'class': 'board-header'})
    header.append(_tag(soup, 'h1', PAGE_TITLE))
    header.append(_tag(soup, 'a', 'Add New Event', attrs={'id': 'addEventBtn', 'href': '?new=1'}))
    body.append(header)

    if errors:
        banner = _tag(soup, 'div', attrs={'class': 'error-banner', 'role': 'alert'})
        for message in errors:
            banner.append(_tag(soup, 'p', message))
        body.append(banner)

    filters = board.filters if board else FilterSpec()
    body.append(_filter_form(soup, filters))

    if board is not None:
        count = _tag(soup, 'p', attrs={'class': 'event-count'})
        count.append(_tag(soup, 'span', str(board.count), attrs={'id': 'eventCount'}))
        count.append(' events')
        body.append(count)
        body.append(_board_section(soup, board))

    if form is not None:
        body.append(_event_form(soup, form))

    return soup.decode(formatter=PAGE_FORMATTER)


def _tag(soup: BeautifulSoup, name: str, text: Optional[str] = None, attrs: Optional[dict] = None):
    tag = soup.new_tag(name, attrs=attrs or {})
    if text is not None:
        tag.string = text
    return tag


def _select(soup: BeautifulSoup, name: str, options, selected: str, attrs: Optional[dict] = None):
    select = _tag(soup, 'select', attrs=dict(attrs or {}, name=name))
    for value, label in options:
        option_attrs = {'value': value}
        if value == selected:
            option_attrs['selected'] = 'selected'
        select.append(_tag(soup, 'option', label, attrs=option_attrs))
    return select


def _filter_form(soup: BeautifulSoup, filters: FilterSpec):
    form = _tag(soup, 'form', attrs={'class': 'filters', 'method': 'get', 'action': '/'})
    form.append(_tag(soup, 'input', attrs={
        'id': 'searchInput',
        'type': 'search',
        'name': 'search',
        'placeholder': 'Search events...',
        'value': filters.search,
    }))
    category_options = [(ANY, 'All Categories')] + [(c, c) for c in CATEGORIES]
    form.append(_select(soup, 'category', category_options, filters.category,
                        attrs={'id': 'categoryFilter'}))
    form.append(_select(soup, 'date', DATE_FILTER_OPTIONS, filters.temporal,
                        attrs={'id': 'dateFilter'}))
    form.append(_select(soup, 'sort', SORT_OPTIONS, filters.sort, attrs={'id': 'sortBy'}))
    form.append(_tag(soup, 'button', 'Apply', attrs={'type': 'submit'}))
    form.append(_tag(soup, 'a', 'Clear Filters', attrs={'id': 'clearFilters', 'href': '/'}))
    return form


def _board_section(soup: BeautifulSoup, board: BoardView):
    if board.is_empty:
        empty = _tag(soup, 'div', attrs={'id': 'emptyState', 'class': 'empty-state'})
        empty.append(_tag(soup, 'h3', board.empty_title, attrs={'id': 'emptyStateTitle'}))
        empty.append(_tag(soup, 'p', board.empty_message, attrs={'id': 'emptyStateMessage'}))
        return empty

    section = _tag(soup, 'div', attrs={'id': 'eventsBoard', 'class': 'events-board'})
    for card in board.cards:
        section.append(_event_card(soup, card))
    return section


def _event_card(soup: BeautifulSoup, card: EventCard):
    classes = 'event-item event-past' if card.is_past else 'event-item'
    item = _tag(soup, 'div', attrs={'class': classes, 'data-id': card.event_id})

    badge = _tag(soup, 'div', attrs={
        'class': 'event-date-badge',
        'style': f'background: {card.color}',
        'title': card.display_date,
    })
    badge.append(_tag(soup, 'div', card.badge_day, attrs={'class': 'date-day'}))
    badge.append(_tag(soup, 'div', card.badge_month, attrs={'class': 'date-month'}))
    item.append(badge)

    content = _tag(soup, 'div', attrs={'class': 'event-content'})
    header = _tag(soup, 'div', attrs={'class': 'event-header-row'})
    header.append(_tag(soup, 'h3', card.title))
    header.append(_tag(soup, 'span', card.category, attrs={
        'class': 'event-category',
        'style': f'background: {card.color}20; color: {card.color}; border-color: {card.color}',
    }))
    content.append(header)

    info = _tag(soup, 'div', attrs={'class': 'event-info'})
    info.append(_tag(soup, 'span', card.display_time, attrs={'class': 'event-info-item event-time'}))
    info.append(_tag(soup, 'span', card.location, attrs={'class': 'event-info-item event-location'}))
    content.append(info)
    content.append(_tag(soup, 'p', card.description, attrs={'class': 'event-description'}))
    if card.is_past:
        content.append(_tag(soup, 'div', 'Past Event', attrs={'class': 'event-past-label'}))
    item.append(content)

    actions = _tag(soup, 'div', attrs={'class': 'event-actions'})
    actions.append(_tag(soup, 'a', 'Edit', attrs={
        'class': 'btn-edit',
        'href': '?' + urlencode({'edit': card.event_id}),
        'title': 'Edit Event',
    }))
    delete = _tag(soup, 'form', attrs={'class': 'delete-form', 'method': 'post', 'action': '/'})
    delete.append(_hidden(soup, 'action', 'delete'))
    delete.append(_hidden(soup, 'event_id', card.event_id))
    confirm = _tag(soup, 'label')
    confirm.append(_tag(soup, 'input', attrs={'type': 'checkbox', 'name': 'confirm', 'value': 'yes'}))
    confirm.append(' Confirm')
    delete.append(confirm)
    delete.append(_tag(soup, 'button', 'Delete', attrs={
        'class': 'btn-delete',
        'type': 'submit',
        'title': 'Delete Event',
    }))
    actions.append(delete)
    item.append(actions)
    return item


def _hidden(soup: BeautifulSoup, name: str, value: str):
    return _tag(soup, 'input', attrs={'type': 'hidden', 'name': name, 'value': value})


def _event_form(soup: BeautifulSoup, form: FormState):
    values = form.values
    modal = _tag(soup, 'div', attrs={'id': 'eventModal', 'class': 'modal active'})
    modal.append(_tag(soup, 'h2', form.heading, attrs={'id': 'modalTitle'}))

    event_form = _tag(soup, 'form', attrs={'id': 'eventForm', 'method': 'post', 'action': '/'})
    event_form.append(_hidden(soup, 'action', 'save'))
    if form.mode == FORM_EDIT and form.event_id:
        event_form.append(_hidden(soup, 'event_id', form.event_id))

    event_form.append(_labelled(soup, 'Title', _tag(soup, 'input', attrs={
        'id': 'eventTitle', 'type': 'text', 'name': 'title',
        'value': values.title, 'required': 'required',
    })))
    event_form.append(_labelled(soup, 'Date', _tag(soup, 'input', attrs={
        'id': 'eventDate', 'type': 'date', 'name': 'date',
        'value': values.date, 'required': 'required',
    })))

    time_row = _tag(soup, 'div', attrs={'class': 'time-row'})
    time_row.append(_labelled(soup, 'Hour', _select(
        soup, 'hour', _choices(HOURS, values.hour), values.hour,
        attrs={'id': 'eventHour', 'required': 'required'})))
    time_row.append(_labelled(soup, 'Minute', _select(
        soup, 'minute', _choices(MINUTES, values.minute), values.minute,
        attrs={'id': 'eventMinute', 'required': 'required'})))
    event_form.append(time_row)

    event_form.append(_labelled(soup, 'Location', _tag(soup, 'input', attrs={
        'id': 'eventLocation', 'type': 'text', 'name': 'location', 'value': values.location,
    })))
    event_form.append(_labelled(soup, 'Description', _tag(
        soup, 'textarea', values.description,
        attrs={'id': 'eventDescription', 'name': 'description'})))
    event_form.append(_labelled(soup, 'Category', _select(
        soup, 'category', _choices(CATEGORIES, values.category), values.category,
        attrs={'id': 'eventCategory', 'required': 'required'})))

    event_form.append(_tag(soup, 'button', 'Save Event', attrs={'type': 'submit'}))
    event_form.append(_tag(soup, 'a', 'Cancel', attrs={'id': 'cancelBtn', 'href': '/'}))
    modal.append(event_form)
    return modal


def _labelled(soup: BeautifulSoup, text: str, control):
    label = _tag(soup, 'label', attrs={'class': 'form-field'})
    label.append(_tag(soup, 'span', text))
    label.append(control)
    return label


def _choices(values, current: str):
    """Blank placeholder, the fixed values, and the current value if it is not among them."""
    choices = [('', '--')] + [(value, value) for value in values]
    if current and current not in values:
        choices.append((current, current))
    return choices
