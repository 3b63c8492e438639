"""DynamoDB-backed event store with snapshot subscriptions."""
import logging
import time
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from board.errors import LoadError, PersistenceError
from board.models import EventRecord
from storage.items import KEY_ATTRIBUTE, item_to_record, record_to_item, writable_fields
from storage.subscription import ErrorCallback, SnapshotCallback, Subscription

logger = logging.getLogger(__name__)


class DynamoDBEventStore:
    """
    Event collection kept in a DynamoDB table keyed by ``doc_id``.

    Every successful mutation rescans the table and pushes the full
    collection to all open subscriptions. Changes made by other writers
    reach subscribers on the next mutation or an explicit refresh().
    """

    TRANSACTION_LIMIT = 100  # DynamoDB TransactWriteItems item limit

    def __init__(self, table_name: str, region_name: Optional[str] = None):
        """
        Initialize DynamoDB resource and table reference.

        Args:
            table_name: Name of the DynamoDB table
            region_name: AWS region (falls back to the boto3 default chain)
        """
        self.table_name = table_name
        self.dynamodb = boto3.resource('dynamodb', region_name=region_name)
        self.table = self.dynamodb.Table(table_name)
        self._subscriptions: List[Subscription] = []
        logger.info(f"Initialized DynamoDBEventStore for table: {table_name}")

    def subscribe(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> Subscription:
        """
        Open a subscription and deliver the current collection to it.

        If the initial scan fails the listener receives a LoadError and
        the returned subscription is already closed.
        """
        subscription = Subscription(on_snapshot, on_error, on_close=self._unsubscribe)
        self._subscriptions.append(subscription)

        try:
            records = self.get_all_events()
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error loading events from {self.table_name}: {e}")
            subscription.fail(LoadError(f"Failed to load events: {e}"))
            return subscription

        subscription.deliver(records)
        return subscription

    def get_all_events(self) -> List[EventRecord]:
        """
        Retrieve all events using a paginated Scan.

        Returns:
            EventRecord objects ordered by store key
        """
        logger.info("Scanning DynamoDB table for all events")
        response = self.table.scan()
        items = response.get('Items', [])

        while 'LastEvaluatedKey' in response:
            response = self.table.scan(
                ExclusiveStartKey=response['LastEvaluatedKey']
            )
            items.extend(response.get('Items', []))

        records = [item_to_record(item) for item in items]
        records = sorted((r for r in records if r), key=lambda r: r.store_key)
        logger.info(f"Retrieved {len(records)} events from DynamoDB")
        return records

    def refresh(self) -> None:
        """Rescan the table and push the result to every subscriber."""
        self._publish()

    def create(self, record: EventRecord) -> None:
        """
        Store a new event under its application id.

        Raises:
            PersistenceError: If an item with that key exists or the write fails
        """
        item = record_to_item(record, record.id, self._now())
        try:
            self.table.put_item(
                Item=item,
                ConditionExpression='attribute_not_exists(#key)',
                ExpressionAttributeNames={'#key': KEY_ATTRIBUTE}
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error creating event {record.id}: {e}")
            raise PersistenceError(f"Failed to save event: {e}") from e

        logger.info(f"Created event {record.id}")
        self._publish()

    def update(self, store_key: str, fields: dict) -> None:
        """
        Overwrite the given fields of an existing event.

        Raises:
            PersistenceError: If the item does not exist or the write fails
        """
        values = writable_fields(fields)
        values['updated_at'] = self._now()

        names = {'#key': KEY_ATTRIBUTE}
        attribute_values = {}
        assignments = []
        for index, (name, value) in enumerate(sorted(values.items())):
            names[f'#f{index}'] = name
            attribute_values[f':v{index}'] = value
            assignments.append(f'#f{index} = :v{index}')

        try:
            self.table.update_item(
                Key={KEY_ATTRIBUTE: store_key},
                UpdateExpression='SET ' + ', '.join(assignments),
                ConditionExpression='attribute_exists(#key)',
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=attribute_values
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error updating event {store_key}: {e}")
            raise PersistenceError(f"Failed to save event: {e}") from e

        logger.info(f"Updated event {store_key}")
        self._publish()

    def delete(self, store_key: str) -> None:
        """
        Delete an event. Deleting a missing key is not an error.

        Raises:
            PersistenceError: If the delete request fails
        """
        try:
            self.table.delete_item(Key={KEY_ATTRIBUTE: store_key})
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting event {store_key}: {e}")
            raise PersistenceError(f"Failed to delete event: {e}") from e

        logger.info(f"Deleted event {store_key}")
        self._publish()

    def batch_create(self, records: List[EventRecord]) -> None:
        """
        Create several events in a single transaction.

        Either every record is written or none is.

        Raises:
            PersistenceError: If the transaction is cancelled or too large
        """
        if not records:
            return
        if len(records) > self.TRANSACTION_LIMIT:
            raise PersistenceError(
                f"Cannot create {len(records)} events atomically "
                f"(limit {self.TRANSACTION_LIMIT})"
            )

        # The resource's client serializes plain Python values itself
        now = self._now()
        transact_items = []
        for record in records:
            transact_items.append({
                'Put': {
                    'TableName': self.table_name,
                    'Item': record_to_item(record, record.id, now),
                    'ConditionExpression': 'attribute_not_exists(#key)',
                    'ExpressionAttributeNames': {'#key': KEY_ATTRIBUTE}
                }
            })

        try:
            self.dynamodb.meta.client.transact_write_items(TransactItems=transact_items)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error writing batch of {len(records)} events: {e}")
            raise PersistenceError(f"Failed to create events: {e}") from e

        logger.info(f"Created {len(records)} events in one transaction")
        self._publish()

    def _publish(self) -> None:
        if not self._subscriptions:
            return
        try:
            records = self.get_all_events()
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error refreshing events from {self.table_name}: {e}")
            for subscription in list(self._subscriptions):
                subscription.fail(LoadError(f"Failed to load events: {e}"))
            return

        for subscription in list(self._subscriptions):
            subscription.deliver(records)

    def _unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _now(self) -> int:
        return int(time.time())
