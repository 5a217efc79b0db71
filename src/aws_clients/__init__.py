"""Remote record store clients."""

from .record_store import RecordStore
from .dynamodb_store import DynamoDBRecordStore

__all__ = ["RecordStore", "DynamoDBRecordStore"]
