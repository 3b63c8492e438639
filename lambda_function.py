"""AWS Lambda handler serving the events board over HTTP."""
import base64
import json
import locale
import logging
import os
import time
from typing import Dict, Any
from urllib.parse import parse_qs

from board.controller import BoardController
from board.errors import InvariantViolation
from board.models import ANY, CATEGORIES, SORT_ORDERS, TEMPORAL_BUCKETS, FormValues
from render.html_renderer import HtmlPresenter
from storage.dynamodb_store import DynamoDBEventStore

FORM_FIELDS = ('title', 'date', 'hour', 'minute', 'location', 'description', 'category')

# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_LOG_ATTRS = set(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {
    'message',
    'asctime',
}


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON, including fields passed via `extra`."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_LOG_ATTRS and key not in log_data:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def setup_collation(locale_name: str = '') -> None:
    """
    Select the locale used to order event titles.

    An empty name takes the locale from the environment. A locale that is
    not installed leaves the current collation in place.

    Args:
        locale_name: Locale such as en_US.UTF-8
    """
    try:
        locale.setlocale(locale.LC_COLLATE, locale_name)
    except locale.Error as e:
        logging.getLogger(__name__).warning(
            f"Collation locale unavailable, keeping current one: {e}",
            extra={'collate_locale': locale_name}
        )


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Serve the events board for an API Gateway proxy request.

    GET renders the board with the filters from the query string.
    POST saves or deletes an event and redirects back to the board.

    Args:
        event: API Gateway proxy event
        context: Lambda context object

    Returns:
        API Gateway proxy response
    """
    table_name = os.environ.get('TABLE_NAME', 'events-board')
    log_level = os.environ.get('LOG_LEVEL', 'INFO')
    collate_locale = os.environ.get('COLLATE_LOCALE', '')
    region_name = os.environ.get('AWS_REGION') or None
    seed_sample_events = os.environ.get('SEED_SAMPLE_EVENTS', 'true').lower() not in (
        'false', '0', 'no'
    )

    setup_logging(log_level)
    setup_collation(collate_locale)
    logger = logging.getLogger(__name__)

    start_time = time.time()
    method = _request_method(event)
    logger.info(
        "Lambda execution started",
        extra={'table_name': table_name, 'method': method}
    )

    try:
        store = DynamoDBEventStore(table_name=table_name, region_name=region_name)

        if method == 'GET':
            response = handle_get(store, event.get('queryStringParameters') or {},
                                  seed_sample_events)
        elif method == 'POST':
            response = handle_post(store, parse_form_body(event))
        else:
            response = _html_response(405, f'<p>Method {method} not allowed</p>')

    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )
        return {
            'statusCode': 500,
            'headers': {'Content-Type': 'application/json'},
            'body': json.dumps({
                'message': 'Request failed',
                'error': str(e),
                'error_type': type(e).__name__,
                'duration_seconds': round(duration, 2)
            })
        }

    duration = time.time() - start_time
    logger.info(
        "Lambda execution completed",
        extra={
            'status_code': response['statusCode'],
            'duration_seconds': round(duration, 2)
        }
    )
    return response


def handle_get(store, params: Dict[str, str], seed_sample_events: bool = True) -> Dict[str, Any]:
    """
    Render the board, optionally with the add or edit form open.

    Args:
        store: Event store adapter
        params: Query string parameters
        seed_sample_events: Seed sample events if the store is empty

    Returns:
        HTML response (503 if the events could not be loaded)
    """
    presenter = HtmlPresenter()
    with BoardController(store, presenter, seed_sample_events=seed_sample_events) as controller:
        if controller.state.load_error is not None:
            return _html_response(503, presenter.render())

        changes = filters_from_params(params)
        if changes:
            controller.set_filter(**changes)

        if params.get('new'):
            controller.begin_create()
        elif params.get('edit'):
            controller.begin_edit(params['edit'])

        return _html_response(200, presenter.render())


def handle_post(store, form: Dict[str, str]) -> Dict[str, Any]:
    """
    Apply a save or delete action posted from the board page.

    Args:
        store: Event store adapter
        form: Decoded form fields

    Returns:
        303 redirect on success, otherwise the page with an error banner
    """
    logger = logging.getLogger(__name__)
    action = form.get('action', '')
    presenter = HtmlPresenter(confirmed=form.get('confirm') == 'yes')

    with BoardController(store, presenter, seed_sample_events=False) as controller:
        if controller.state.load_error is not None:
            return _html_response(503, presenter.render())

        if action == 'save':
            event_id = form.get('event_id', '')
            if event_id:
                controller.begin_edit(event_id)
                if controller.state.edit_target != event_id:
                    presenter.show_error('This event no longer exists.')
                    return _html_response(404, presenter.render())
            else:
                controller.begin_create()

            values = FormValues(**{name: form.get(name, '') for name in FORM_FIELDS})
            try:
                saved = controller.submit(values)
            except InvariantViolation as e:
                logger.error(f"Refused to save event {event_id}: {e}")
                presenter.show_error('This event cannot be edited before it has been saved.')
                return _html_response(409, presenter.render())

            if saved:
                return _redirect_response()
            return _html_response(400, presenter.render())

        if action == 'delete':
            if not presenter.confirmed:
                presenter.show_error('Please confirm that you want to delete this event.')
                return _html_response(400, presenter.render())

            controller.remove(form.get('event_id', ''))
            if presenter.errors:
                return _html_response(502, presenter.render())
            return _redirect_response()

        presenter.show_error(f'Unknown action: {action or "(none)"}')
        return _html_response(400, presenter.render())


def filters_from_params(params: Dict[str, str]) -> Dict[str, str]:
    """
    Translate query parameters into filter changes.

    Unknown values are ignored so a bad link still shows the board.
    "all" is accepted as a spelling of "any".

    Args:
        params: Query string parameters (search, category, date, sort)

    Returns:
        Keyword arguments for BoardController.set_filter
    """
    changes = {}

    search = params.get('search')
    if search:
        changes['search'] = search

    category = _any_alias(params.get('category'))
    if category == ANY or category in CATEGORIES:
        changes['category'] = category

    temporal = _any_alias(params.get('date'))
    if temporal in TEMPORAL_BUCKETS:
        changes['temporal'] = temporal

    sort = params.get('sort')
    if sort in SORT_ORDERS:
        changes['sort'] = sort

    return changes


def parse_form_body(event: Dict[str, Any]) -> Dict[str, str]:
    """Decode an urlencoded (optionally base64) request body into single values."""
    body = event.get('body') or ''
    if event.get('isBase64Encoded'):
        body = base64.b64decode(body).decode('utf-8')
    parsed = parse_qs(body, keep_blank_values=True)
    return {name: values[0] for name, values in parsed.items()}


def _request_method(event: Dict[str, Any]) -> str:
    method = event.get('httpMethod')
    if not method:
        method = event.get('requestContext', {}).get('http', {}).get('method', 'GET')
    return method.upper()


def _any_alias(value):
    return ANY if value == 'all' else value


def _html_response(status_code: int, body: str) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'text/html; charset=utf-8'},
        'body': body
    }


def _redirect_response(location: str = '/') -> Dict[str, Any]:
    return {
        'statusCode': 303,
        'headers': {'Location': location},
        'body': ''
    }
