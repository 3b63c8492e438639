"""Conversion between EventRecord objects and stored items."""
import logging
from typing import Optional

from board.models import EventRecord

logger = logging.getLogger(__name__)

KEY_ATTRIBUTE = 'doc_id'

WRITABLE_FIELDS = (
    'id',
    'title',
    'date',
    'time',
    'location',
    'description',
    'category',
)


def record_to_item(record: EventRecord, doc_id: str, now: int) -> dict:
    """
    Convert an EventRecord to a stored item.

    Args:
        record: Event to store
        doc_id: Key the item is stored under
        now: Server timestamp for created_at/updated_at

    Returns:
        Item dictionary
    """
    item = record.editable_fields()
    item[KEY_ATTRIBUTE] = doc_id
    item['created_at'] = now
    item['updated_at'] = now
    return item


def item_to_record(item: dict) -> Optional[EventRecord]:
    """
    Convert a stored item to an EventRecord.

    Args:
        item: Item dictionary (numbers may arrive as Decimal)

    Returns:
        EventRecord or None if the item is malformed
    """
    try:
        return EventRecord(
            id=item['id'],
            title=item['title'],
            date=item['date'],
            time=item['time'],
            location=item.get('location', ''),
            description=item.get('description', ''),
            category=item['category'],
            store_key=item[KEY_ATTRIBUTE],
            created_at=_optional_int(item.get('created_at')),
            updated_at=_optional_int(item.get('updated_at'))
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Failed to convert item to EventRecord: {e}")
        return None


def writable_fields(fields: dict) -> dict:
    """Drop anything the board may not write (keys, server timestamps)."""
    return {name: value for name, value in fields.items() if name in WRITABLE_FIELDS}


def _optional_int(value) -> Optional[int]:
    return int(value) if value is not None else None
