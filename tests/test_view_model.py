"""Unit tests for board view construction."""
from datetime import date

from board.models import EventRecord, FilterSpec
from board.state import BoardState, with_default_filters, with_filters, with_snapshot
from board.view_model import (
    DEFAULT_CATEGORY_COLOR,
    EMPTY_BOARD_MESSAGE,
    EMPTY_BOARD_TITLE,
    NO_MATCHES_TITLE,
    build_board_view,
    build_card,
)

TODAY = date(2025, 11, 16)


def make_event(event_id, event_date='2025-11-18', category='Volunteering'):
    return EventRecord(
        id=event_id,
        title='Environmental Action Day',
        date=event_date,
        time='09:00',
        location='Central Park',
        description='Planting trees',
        category=category
    )


def test_build_card_formats_fields():
    card = build_card(make_event('1'), TODAY)

    assert card.event_id == '1'
    assert card.display_date == 'Nov 18, 2025'
    assert card.badge_day == '18'
    assert card.badge_month == 'Nov'
    assert card.display_time == '9:00 AM'
    assert card.color == '#10b981'
    assert card.is_past is False


def test_build_card_past_and_unknown_category():
    card = build_card(make_event('1', event_date='2025-11-15', category='Gardening'), TODAY)
    assert card.is_past is True
    assert card.color == DEFAULT_CATEGORY_COLOR


def test_empty_board_message():
    view = build_board_view([], FilterSpec(), total_records=0, today=TODAY)
    assert view.is_empty
    assert view.count == 0
    assert view.empty_title == EMPTY_BOARD_TITLE
    assert view.empty_message == EMPTY_BOARD_MESSAGE


def test_filtered_out_message():
    view = build_board_view([], FilterSpec(search='x'), total_records=3, today=TODAY)
    assert view.empty_title == NO_MATCHES_TITLE


def test_view_keeps_order():
    records = [make_event('b'), make_event('a')]
    view = build_board_view(records, FilterSpec(), total_records=2, today=TODAY)
    assert [card.event_id for card in view.cards] == ['b', 'a']
    assert view.empty_title is None


class TestBoardState:
    """Test cases for the pure state update functions."""

    def test_snapshot_counts_and_recomputes(self):
        state = with_snapshot(BoardState(), [make_event('1')], TODAY)
        state = with_snapshot(state, [make_event('1'), make_event('2')], TODAY)

        assert state.snapshots_seen == 2
        assert [r.id for r in state.visible] == ['1', '2']

    def test_filter_updates_do_not_touch_records(self):
        state = with_snapshot(BoardState(), [make_event('1', category='Social')], TODAY)
        filtered = with_filters(state, TODAY, category='Workshop')

        assert filtered.visible == ()
        assert filtered.records == state.records
        assert state.filters == FilterSpec()
        assert with_default_filters(filtered, TODAY).visible == state.visible

    def test_find(self):
        state = with_snapshot(BoardState(), [make_event('1')], TODAY)
        assert state.find('1').id == '1'
        assert state.find('2') is None
