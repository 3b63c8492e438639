"""Unit tests for the HTML presenter."""
from datetime import date

from bs4 import BeautifulSoup

from board.models import FORM_CREATE, FORM_EDIT, EventRecord, FilterSpec, FormState, FormValues
from board.view_model import build_board_view
from render.html_renderer import HtmlPresenter, render_page

TODAY = date(2025, 11, 16)


def make_event(event_id, title='Youth Town Hall Meeting', event_date='2025-11-18'):
    return EventRecord(
        id=event_id,
        title=title,
        date=event_date,
        time='18:00',
        location='City Hall Auditorium',
        description='Join local leaders.',
        category='Advocacy'
    )


def parse(page):
    return BeautifulSoup(page, 'html.parser')


def test_render_cards():
    """Test each visible event becomes a card with formatted details."""
    view = build_board_view(
        [make_event('1'), make_event('2', title='Old Event', event_date='2025-11-01')],
        FilterSpec(),
        total_records=2,
        today=TODAY
    )

    soup = parse(render_page(view))

    items = soup.select('#eventsBoard .event-item')
    assert [item['data-id'] for item in items] == ['1', '2']
    assert items[0].h3.get_text() == 'Youth Town Hall Meeting'
    assert items[0].select_one('.event-time').get_text() == '6:00 PM'
    assert items[0].select_one('.date-month').get_text() == 'Nov'
    assert 'event-past' not in items[0]['class']
    assert 'event-past' in items[1]['class']
    assert items[1].select_one('.event-past-label') is not None
    assert soup.select_one('#eventCount').get_text() == '2'
    assert soup.select_one('#emptyState') is None


def test_text_is_escaped():
    view = build_board_view(
        [make_event('1', title='<script>alert("x")</script>')],
        FilterSpec(),
        total_records=1,
        today=TODAY
    )

    page = render_page(view)

    assert '<script>' not in page
    assert '&lt;script&gt;' in page
    assert parse(page).select_one('.event-item h3').get_text() == '<script>alert("x")</script>'


def test_attribute_values_are_escaped():
    view = build_board_view([make_event('a<b>')], FilterSpec(search='Tom & Jerry'),
                            total_records=1, today=TODAY)

    page = render_page(view)

    assert 'value="Tom &amp; Jerry"' in page
    assert 'data-id="a&lt;b&gt;"' in page
    assert parse(page).select_one('.event-item')['data-id'] == 'a<b>'


def test_edit_link_encodes_event_id():
    view = build_board_view([make_event('a&b c')], FilterSpec(), total_records=1, today=TODAY)

    soup = parse(render_page(view))

    assert soup.select_one('.btn-edit')['href'] == '?edit=a%26b+c'


def test_empty_state():
    view = build_board_view([], FilterSpec(category='Social'), total_records=4, today=TODAY)

    soup = parse(render_page(view))

    assert soup.select_one('#emptyStateTitle').get_text() == 'No Events Found'
    assert soup.select_one('#eventsBoard') is None
    assert soup.select_one('#categoryFilter option[selected]')['value'] == 'Social'


def test_filter_form_reflects_spec():
    spec = FilterSpec(search='park', temporal='upcoming', sort='title-desc')
    view = build_board_view([], spec, total_records=0, today=TODAY)

    soup = parse(render_page(view))

    assert soup.select_one('#searchInput')['value'] == 'park'
    assert soup.select_one('#dateFilter option[selected]')['value'] == 'upcoming'
    assert soup.select_one('#sortBy option[selected]')['value'] == 'title-desc'


def test_edit_form_prefilled():
    form = FormState(
        mode=FORM_EDIT,
        heading='Edit Event',
        values=FormValues(title='Yoga', date='2025-12-01', hour='07', minute='45',
                          location='Gym', description='Stretch', category='Social'),
        event_id='42'
    )

    soup = parse(render_page(None, form))

    assert soup.select_one('#modalTitle').get_text() == 'Edit Event'
    assert soup.select_one('#eventForm input[name=event_id]')['value'] == '42'
    assert soup.select_one('#eventTitle')['value'] == 'Yoga'
    assert soup.select_one('#eventHour option[selected]')['value'] == '07'
    assert soup.select_one('#eventMinute option[selected]')['value'] == '45'
    assert soup.select_one('#eventCategory option[selected]')['value'] == 'Social'
    assert soup.select_one('#eventDescription').get_text() == 'Stretch'


def test_create_form_has_no_event_id():
    soup = parse(render_page(None, FormState(mode=FORM_CREATE, heading='Add New Event')))
    assert soup.select_one('#eventForm input[name=event_id]') is None
    assert soup.select_one('#eventHour option[selected]')['value'] == ''


def test_presenter_collects_state():
    presenter = HtmlPresenter(confirmed=True)
    presenter.show_form(FormState(mode=FORM_CREATE, heading='Add New Event'))
    presenter.close_form()
    presenter.show_error('Failed to save event. Please try again.')

    assert presenter.confirm('Are you sure?') is True
    assert presenter.form is None
    soup = parse(presenter.render())
    assert soup.select_one('.error-banner').get_text() == 'Failed to save event. Please try again.'
    assert soup.select_one('#eventModal') is None
