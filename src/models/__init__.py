"""Data models for contact queries."""

from .contact_models import Contact, RemoteRecord, to_record, from_record, CONTACT_RECORD_TYPE, NAME_FIELD
from .sync_models import (
    ChangeToken,
    ChangePage,
    StartsWith,
    RecordFailure,
    BatchSaveResult,
    SyncState,
)

__all__ = [
    "Contact",
    "RemoteRecord",
    "to_record",
    "from_record",
    "CONTACT_RECORD_TYPE",
    "NAME_FIELD",
    "ChangeToken",
    "ChangePage",
    "StartsWith",
    "RecordFailure",
    "BatchSaveResult",
    "SyncState",
]
