"""Board state and the pure functions that update it."""
from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, Optional, Tuple

from board.errors import LoadError
from board.filter_engine import apply_filters
from board.models import DEFAULT_FILTERS, EventRecord, FilterSpec


@dataclass(frozen=True)
class BoardState:
    """Snapshot of everything the controller owns."""
    records: Tuple[EventRecord, ...] = ()
    filters: FilterSpec = DEFAULT_FILTERS
    visible: Tuple[EventRecord, ...] = ()
    edit_target: Optional[str] = None
    form_open: bool = False
    snapshots_seen: int = 0
    load_error: Optional[LoadError] = None

    def find(self, event_id: str) -> Optional[EventRecord]:
        """Look up a record by its application id."""
        for record in self.records:
            if record.id == event_id:
                return record
        return None


def recompute(state: BoardState, today: Optional[date] = None) -> BoardState:
    return replace(state, visible=tuple(apply_filters(state.records, state.filters, today)))


def with_snapshot(
    state: BoardState,
    records: Iterable[EventRecord],
    today: Optional[date] = None
) -> BoardState:
    """Replace the record set wholesale and count the snapshot."""
    updated = replace(
        state,
        records=tuple(records),
        snapshots_seen=state.snapshots_seen + 1,
        load_error=None
    )
    return recompute(updated, today)


def with_filters(state: BoardState, today: Optional[date] = None, **changes) -> BoardState:
    """Merge filter changes into the current specification."""
    return recompute(replace(state, filters=state.filters.merged(**changes)), today)


def with_default_filters(state: BoardState, today: Optional[date] = None) -> BoardState:
    return recompute(replace(state, filters=DEFAULT_FILTERS), today)


def with_form(state: BoardState, edit_target: Optional[str]) -> BoardState:
    return replace(state, form_open=True, edit_target=edit_target)


def without_form(state: BoardState) -> BoardState:
    return replace(state, form_open=False, edit_target=None)


def with_load_error(state: BoardState, error: LoadError) -> BoardState:
    return replace(state, load_error=error)
