"""DynamoDB-backed remote record store for contacts."""

import asyncio
import base64
import binascii
import json
import logging
import uuid
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from .record_store import RecordStore
from ..config.config_manager import StoreConfig
from ..error_handling.error_classifier import ErrorCategory, ErrorClassifier
from ..error_handling.exceptions import BatchError, QueryError, StoreError, ZoneError
from ..models.contact_models import RemoteRecord
from ..models.sync_models import BatchSaveResult, ChangePage, ChangeToken, RecordFailure, StartsWith

logger = logging.getLogger(__name__)

ZONE_MARKER_ID = "__zone__"
RESERVED_ATTRIBUTES = frozenset(["zone_id", "record_id", "record_type", "modified_at"])

# batch_write_item accepts at most 25 requests per call
BATCH_WRITE_LIMIT = 25


class DynamoDBRecordStore(RecordStore):
    """Record store over a single DynamoDB table.

    Items are keyed by ``zone_id`` (partition) and ``record_id`` (sort). A
    zone exists when its marker item is present. The change feed is a plain
    paginated query over the zone's partition, resumed from the token's
    ``LastEvaluatedKey``.
    """

    def __init__(self, config: Optional[StoreConfig] = None, session: Optional[boto3.Session] = None):
        """Initialize the DynamoDB record store.

        Args:
            config: Table, region, page size and transport settings
            session: Optional boto3 session for testing
        """
        self.config = config or StoreConfig()
        self.session = session or boto3.Session()
        self.classifier = ErrorClassifier()
        self._dynamodb = None
        self._table = None

    def _get_dynamodb(self):
        """Get DynamoDB service resource with lazy initialization."""
        if self._dynamodb is None:
            boto_config = BotoConfig(
                connect_timeout=self.config.connect_timeout,
                read_timeout=self.config.read_timeout,
                retries={'max_attempts': self.config.max_transport_attempts, 'mode': 'standard'}
            )
            self._dynamodb = self.session.resource(
                'dynamodb', region_name=self.config.region, config=boto_config
            )
        return self._dynamodb

    def _get_table(self):
        """Get DynamoDB table resource with lazy initialization."""
        if self._table is None:
            self._table = self._get_dynamodb().Table(self.config.table_name)
        return self._table

    # -- item mapping -----------------------------------------------------

    def _record_to_item(self, record: RemoteRecord, zone_id: str) -> Dict[str, Any]:
        reserved = RESERVED_ATTRIBUTES.intersection(record.fields)
        if reserved:
            raise ValueError(f"Record fields use reserved attribute names: {sorted(reserved)}")

        item = dict(record.fields)
        item.update({
            'zone_id': zone_id,
            'record_id': record.record_id,
            'record_type': record.record_type,
            'modified_at': datetime.now(UTC).isoformat()
        })
        return item

    def _item_to_record(self, item: Dict[str, Any]) -> RemoteRecord:
        fields = {key: value for key, value in item.items() if key not in RESERVED_ATTRIBUTES}
        record_type = item.get('record_type')
        if not isinstance(record_type, str) or not record_type.strip():
            logger.warning(f"Item {item.get('record_id')} has no usable record_type: {record_type!r}")
            record_type = 'Unknown'
        return RemoteRecord(
            record_type=record_type,
            fields=fields,
            record_id=item.get('record_id'),
            zone_id=item.get('zone_id')
        )

    # -- change tokens ----------------------------------------------------

    def _encode_token(self, zone_id: str, cursor: Optional[Dict[str, Any]]) -> ChangeToken:
        payload = {'zone': zone_id, 'cursor': cursor, 'end': cursor is None}
        raw = json.dumps(payload, sort_keys=True, default=str).encode('utf-8')
        return ChangeToken(zone_id=zone_id, value=base64.urlsafe_b64encode(raw).decode('ascii'))

    def _decode_token(self, token: ChangeToken, zone_id: str) -> Dict[str, Any]:
        if token.zone_id != zone_id:
            raise QueryError(
                f"Change token was issued for zone {token.zone_id}, not {zone_id}",
                category=ErrorCategory.UNCLASSIFIED
            )
        try:
            payload = json.loads(base64.urlsafe_b64decode(token.value.encode('ascii')))
        except (binascii.Error, UnicodeError, ValueError) as e:
            raise QueryError(f"Malformed change token: {e}", category=ErrorCategory.UNCLASSIFIED, cause=e)

        if not isinstance(payload, dict) or payload.get('zone') != zone_id:
            raise QueryError(f"Malformed change token for zone {zone_id}", category=ErrorCategory.UNCLASSIFIED)
        return payload

    # -- zones ------------------------------------------------------------

    def _zone_exists(self, zone_id: str) -> bool:
        response = self._get_table().get_item(
            Key={'zone_id': zone_id, 'record_id': ZONE_MARKER_ID},
            ConsistentRead=True
        )
        return 'Item' in response

    async def _require_zone(self, zone_id: str, error_type: type, operation: str) -> None:
        """Raise ``error_type`` (UNKNOWN_ITEM) when the zone has not been created."""
        try:
            exists = await asyncio.to_thread(self._zone_exists, zone_id)
        except (ClientError, BotoCoreError) as e:
            raise self.classifier.wrap_error(e, error_type, operation)

        if not exists:
            raise error_type(
                f"{operation} failed: zone {zone_id} does not exist",
                category=ErrorCategory.UNKNOWN_ITEM
            )

    def _put_zone_marker(self, zone_id: str) -> bool:
        """Write the zone marker. Returns False when it was already there."""
        try:
            self._get_table().put_item(
                Item={
                    'zone_id': zone_id,
                    'record_id': ZONE_MARKER_ID,
                    'record_type': ZONE_MARKER_ID,
                    'modified_at': datetime.now(UTC).isoformat()
                },
                ConditionExpression='attribute_not_exists(record_id)'
            )
            return True
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') == 'ConditionalCheckFailedException':
                return False
            raise

    async def ensure_zone(self, zone_id: str) -> None:
        """Create the zone marker unless it is already present."""
        try:
            created = await asyncio.to_thread(self._put_zone_marker, zone_id)
        except (ClientError, BotoCoreError) as e:
            raise self.classifier.wrap_error(e, ZoneError, f"Creating zone {zone_id}")

        if created:
            logger.info(f"Created zone {zone_id} in table {self.config.table_name}")
        else:
            logger.debug(f"Zone {zone_id} already exists")

    # -- writes -----------------------------------------------------------

    def _write_chunk(self, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Submit one batch_write_item call and return the unprocessed items."""
        table_name = self.config.table_name
        response = self._get_dynamodb().batch_write_item(
            RequestItems={table_name: [{'PutRequest': {'Item': item}} for item in items]}
        )
        unprocessed = response.get('UnprocessedItems', {}).get(table_name, [])
        return [request['PutRequest']['Item'] for request in unprocessed if 'PutRequest' in request]

    async def save_records(self, records: List[RemoteRecord]) -> BatchSaveResult:
        """Save records in chunks of 25, reporting unprocessed ones as failures."""
        result = BatchSaveResult()
        if not records:
            return result

        pending = []
        for record in records:
            zone_id = record.zone_id or self.config.zone_name
            stored = RemoteRecord(
                record_type=record.record_type,
                fields=dict(record.fields),
                record_id=record.record_id or uuid.uuid4().hex,
                zone_id=zone_id
            )
            try:
                pending.append((stored, self._record_to_item(stored, zone_id)))
            except ValueError as e:
                result.failures.append(RecordFailure(stored, 'ValidationException', str(e)))

        for zone_id in sorted({stored.zone_id for stored, _ in pending}):
            await self._require_zone(zone_id, BatchError, "Saving records")

        chunk_error: Optional[BaseException] = None
        for start in range(0, len(pending), BATCH_WRITE_LIMIT):
            chunk = pending[start:start + BATCH_WRITE_LIMIT]
            try:
                unprocessed = await asyncio.to_thread(self._write_chunk, [item for _, item in chunk])
            except (ClientError, BotoCoreError) as e:
                chunk_error = e
                classification = self.classifier.classify_error(e)
                error_code = (
                    e.response.get('Error', {}).get('Code', 'Unknown')
                    if isinstance(e, ClientError) else type(e).__name__
                )
                logger.error(f"Batch write of {len(chunk)} records failed: {e}")
                for stored, _ in chunk:
                    result.failures.append(RecordFailure(
                        stored,
                        error_code,
                        classification.user_message or str(e),
                        classification.is_retryable
                    ))
                continue

            unprocessed_keys = {(item['zone_id'], item['record_id']) for item in unprocessed}
            for stored, _ in chunk:
                if (stored.zone_id, stored.record_id) in unprocessed_keys:
                    result.failures.append(RecordFailure(
                        stored, 'UnprocessedItem', 'Store did not process the record', True
                    ))
                else:
                    result.saved.append(stored)

        if result.failures and not result.saved:
            if chunk_error is not None:
                error = self.classifier.wrap_error(chunk_error, BatchError, "Saving records")
                raise BatchError(
                    error.message,
                    failures=result.failures,
                    category=error.category,
                    is_retryable=error.is_retryable,
                    cause=chunk_error
                )
            raise BatchError(
                f"Saving records failed: none of {len(records)} records were saved",
                failures=result.failures,
                category=ErrorCategory.PARTIAL_FAILURE,
                is_retryable=all(failure.is_retryable for failure in result.failures)
            )

        logger.info(f"Saved {len(result.saved)} of {len(records)} records")
        if result.failures:
            logger.warning(f"{len(result.failures)} records were not saved")
        return result

    def _delete_chunk(self, zone_id: str, record_ids: List[str]) -> List[str]:
        table_name = self.config.table_name
        response = self._get_dynamodb().batch_write_item(
            RequestItems={table_name: [
                {'DeleteRequest': {'Key': {'zone_id': zone_id, 'record_id': record_id}}}
                for record_id in record_ids
            ]}
        )
        unprocessed = response.get('UnprocessedItems', {}).get(table_name, [])
        return [request['DeleteRequest']['Key']['record_id'] for request in unprocessed if 'DeleteRequest' in request]

    async def delete_records(self, record_ids: List[str], zone_id: Optional[str] = None) -> List[str]:
        """Delete records by id.

        Returns:
            List[str]: Ids the store did not process
        """
        zone_id = zone_id or self.config.zone_name
        not_deleted: List[str] = []
        for start in range(0, len(record_ids), BATCH_WRITE_LIMIT):
            chunk = record_ids[start:start + BATCH_WRITE_LIMIT]
            try:
                not_deleted.extend(await asyncio.to_thread(self._delete_chunk, zone_id, chunk))
            except (ClientError, BotoCoreError) as e:
                raise self.classifier.wrap_error(e, BatchError, "Deleting records")

        logger.info(f"Deleted {len(record_ids) - len(not_deleted)} of {len(record_ids)} records from zone {zone_id}")
        return not_deleted

    # -- reads ------------------------------------------------------------

    def _query_all(self, zone_id: str, filter_expression) -> List[Dict[str, Any]]:
        table = self._get_table()
        kwargs = {
            'KeyConditionExpression': Key('zone_id').eq(zone_id),
            'FilterExpression': filter_expression
        }
        items: List[Dict[str, Any]] = []
        while True:
            response = table.query(**kwargs)
            items.extend(response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                return items
            kwargs['ExclusiveStartKey'] = last_key

    async def query_records(self, record_type: str, predicate: StartsWith, zone_id: str) -> List[RemoteRecord]:
        """Query a zone for records whose field starts with the predicate's prefix."""
        if not isinstance(predicate, StartsWith):
            raise QueryError(f"Unsupported predicate: {predicate!r}")

        await self._require_zone(zone_id, QueryError, "Querying records")

        filter_expression = Attr('record_type').eq(record_type)
        # begins_with on an empty prefix matches everything
        if predicate.prefix:
            filter_expression = filter_expression & Attr(predicate.field_name).begins_with(predicate.prefix)

        try:
            items = await asyncio.to_thread(self._query_all, zone_id, filter_expression)
        except (ClientError, BotoCoreError) as e:
            raise self.classifier.wrap_error(e, QueryError, "Querying records")

        logger.debug(f"Query for {record_type} in {zone_id} returned {len(items)} items")
        return [self._item_to_record(item) for item in items]

    def _query_page(self, zone_id: str, cursor: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        kwargs = {
            'KeyConditionExpression': Key('zone_id').eq(zone_id),
            'Limit': self.config.page_size,
            'ConsistentRead': True
        }
        if cursor:
            kwargs['ExclusiveStartKey'] = cursor
        return self._get_table().query(**kwargs)

    async def fetch_zone_changes(self, zone_id: str, since_token: Optional[ChangeToken] = None) -> ChangePage:
        """Fetch one page of the zone's records following ``since_token``."""
        cursor = None
        if since_token is None:
            await self._require_zone(zone_id, QueryError, "Fetching zone changes")
        else:
            payload = self._decode_token(since_token, zone_id)
            if payload.get('end'):
                return ChangePage(records=[], next_token=since_token, has_more=False)
            cursor = payload.get('cursor')

        try:
            response = await asyncio.to_thread(self._query_page, zone_id, cursor)
        except (ClientError, BotoCoreError) as e:
            raise self.classifier.wrap_error(e, QueryError, "Fetching zone changes")

        records = [
            self._item_to_record(item)
            for item in response.get('Items', [])
            if item.get('record_id') != ZONE_MARKER_ID
        ]
        last_key = response.get('LastEvaluatedKey')

        logger.debug(f"Fetched change page for {zone_id}: {len(records)} records, more={bool(last_key)}")
        return ChangePage(
            records=records,
            next_token=self._encode_token(zone_id, last_key),
            has_more=bool(last_key)
        )

    # -- readiness --------------------------------------------------------

    def verify_access(self) -> bool:
        """Check the table is reachable and active with the current credentials.

        Returns:
            bool: True if the table status is ACTIVE

        Raises:
            StoreError: If the table cannot be described
        """
        try:
            response = self._get_table().meta.client.describe_table(TableName=self.config.table_name)
        except (ClientError, BotoCoreError) as e:
            error = self.classifier.wrap_error(e, StoreError, f"Describing table {self.config.table_name}")
            self.classifier.report_error(error)
            raise error

        status = response.get('Table', {}).get('TableStatus')
        logger.info(f"Table {self.config.table_name} status: {status}")
        return status == 'ACTIVE'
