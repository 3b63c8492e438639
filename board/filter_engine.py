"""Filter and sort engine for the visible event list."""
import locale
import logging
import unicodedata
from datetime import date
from typing import Iterable, List, Optional

from board.formatting import parse_event_date
from board.models import (
    ANY,
    SORT_DATE_ASC,
    SORT_DATE_DESC,
    SORT_TITLE_ASC,
    SORT_TITLE_DESC,
    TEMPORAL_PAST,
    TEMPORAL_UPCOMING,
    EventRecord,
    FilterSpec,
)

logger = logging.getLogger(__name__)


def apply_filters(
    records: Iterable[EventRecord],
    spec: FilterSpec,
    today: Optional[date] = None
) -> List[EventRecord]:
    """
    Compute the visible subset of events in display order.

    Search, category and date bucket filters are combined with AND, then
    the result is sorted. The input is never modified.

    Args:
        records: Full record set
        spec: Filter specification to apply
        today: Reference date for upcoming/past (defaults to local today)

    Returns:
        New list of matching EventRecord objects
    """
    if today is None:
        today = date.today()

    filtered = [
        record for record in records
        if matches_search(record, spec.search)
        and matches_category(record, spec.category)
        and matches_temporal(record, spec.temporal, today)
    ]

    result = sort_events(filtered, spec.sort)
    logger.debug(f"Filters matched {len(result)} events", extra={'sort': spec.sort})
    return result


def matches_search(record: EventRecord, search: str) -> bool:
    """Case-insensitive substring match over title, description and location."""
    if not search:
        return True
    needle = search.lower()
    return (
        needle in (record.title or '').lower() or
        needle in (record.description or '').lower() or
        needle in (record.location or '').lower()
    )


def matches_category(record: EventRecord, category: str) -> bool:
    return category == ANY or record.category == category


def matches_temporal(record: EventRecord, temporal: str, today: date) -> bool:
    """
    Check the record against the upcoming/past bucket.

    An event dated today counts as upcoming. Events with an unparseable
    date belong to neither bucket.
    """
    if temporal == TEMPORAL_UPCOMING:
        event_date = parse_event_date(record.date)
        return event_date is not None and event_date >= today
    if temporal == TEMPORAL_PAST:
        event_date = parse_event_date(record.date)
        return event_date is not None and event_date < today
    return True


def sort_events(records: List[EventRecord], sort: str) -> List[EventRecord]:
    """
    Stable sort by date or title.

    Python's sort keeps equal elements in input order even with
    reverse=True, so ties are never reordered.
    """
    if sort == SORT_DATE_DESC:
        return sorted(records, key=_date_key, reverse=True)
    if sort == SORT_DATE_ASC:
        return sorted(records, key=_date_key)
    if sort == SORT_TITLE_ASC:
        return sorted(records, key=_title_key)
    if sort == SORT_TITLE_DESC:
        return sorted(records, key=_title_key, reverse=True)
    return list(records)


def _date_key(record: EventRecord) -> date:
    return parse_event_date(record.date) or date.min


def _title_key(record: EventRecord) -> tuple:
    # Base letters, then accents, then case: "apple" < "Banana", "Éclair" < "Zumba"
    title = record.title or ''
    folded = title.casefold()
    return (
        locale.strxfrm(strip_accents(folded)),
        locale.strxfrm(folded),
        locale.strxfrm(title),
    )


def strip_accents(text: str) -> str:
    """Drop combining marks after compatibility decomposition."""
    decomposed = unicodedata.normalize('NFKD', text)
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
