"""Data models for the events board."""
from dataclasses import dataclass, field, replace
from typing import Optional

CATEGORIES = (
    'Community',
    'Education',
    'Advocacy',
    'Volunteering',
    'Workshop',
    'Social',
)

ANY = 'any'

TEMPORAL_ANY = 'any'
TEMPORAL_UPCOMING = 'upcoming'
TEMPORAL_PAST = 'past'
TEMPORAL_BUCKETS = (TEMPORAL_ANY, TEMPORAL_UPCOMING, TEMPORAL_PAST)

SORT_DATE_DESC = 'date-desc'
SORT_DATE_ASC = 'date-asc'
SORT_TITLE_ASC = 'title-asc'
SORT_TITLE_DESC = 'title-desc'
SORT_ORDERS = (SORT_DATE_DESC, SORT_DATE_ASC, SORT_TITLE_ASC, SORT_TITLE_DESC)


@dataclass(frozen=True)
class EventRecord:
    """Event as held in the record set."""
    id: str
    title: str
    date: str
    time: str
    location: str
    description: str
    category: str
    store_key: Optional[str] = None
    created_at: Optional[int] = None
    updated_at: Optional[int] = None

    def editable_fields(self) -> dict:
        """Fields the board writes; server timestamps and store key excluded."""
        return {
            'id': self.id,
            'title': self.title,
            'date': self.date,
            'time': self.time,
            'location': self.location,
            'description': self.description,
            'category': self.category,
        }


@dataclass(frozen=True)
class FilterSpec:
    """User-selected search, category, date bucket and sort order."""
    search: str = ''
    category: str = ANY
    temporal: str = TEMPORAL_ANY
    sort: str = SORT_DATE_DESC

    def __post_init__(self):
        if self.category != ANY and self.category not in CATEGORIES:
            raise ValueError(f"Unknown category: {self.category}")
        if self.temporal not in TEMPORAL_BUCKETS:
            raise ValueError(f"Unknown date filter: {self.temporal}")
        if self.sort not in SORT_ORDERS:
            raise ValueError(f"Unknown sort order: {self.sort}")

    def merged(self, **changes) -> 'FilterSpec':
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


DEFAULT_FILTERS = FilterSpec()


@dataclass(frozen=True)
class FormValues:
    """Raw values of the add/edit form."""
    title: str = ''
    date: str = ''
    hour: str = ''
    minute: str = ''
    location: str = ''
    description: str = ''
    category: str = ''


@dataclass(frozen=True)
class FormState:
    """What the presenter needs to show the add/edit form."""
    mode: str
    heading: str
    values: FormValues = field(default_factory=FormValues)
    event_id: Optional[str] = None


FORM_CREATE = 'create'
FORM_EDIT = 'edit'
