"""Contact record model and its encoding to the remote store's record shape."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONTACT_RECORD_TYPE = "Contact"
NAME_FIELD = "name"


@dataclass
class RemoteRecord:
    """Generic record as held by the remote store.

    ``record_id`` is assigned by the store on save and is ``None`` for
    records that have not been persisted yet.
    """
    record_type: str
    fields: Dict[str, Any] = field(default_factory=dict)
    record_id: Optional[str] = None
    zone_id: Optional[str] = None

    def __post_init__(self):
        """Validate record type."""
        if not self.record_type or not self.record_type.strip():
            raise ValueError("record_type cannot be empty")

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)


@dataclass
class Contact:
    """A contact, identified by the store once saved."""
    name: str
    record_id: Optional[str] = None


def to_record(contact: Contact, zone_id: Optional[str] = None) -> RemoteRecord:
    """Encode a contact as a ``Contact`` record with a single ``name`` field."""
    return RemoteRecord(
        record_type=CONTACT_RECORD_TYPE,
        fields={NAME_FIELD: contact.name},
        record_id=contact.record_id,
        zone_id=zone_id,
    )


def from_record(record: RemoteRecord) -> Optional[Contact]:
    """Decode a record into a contact.

    Returns None for records of another type or whose ``name`` is missing or
    not a string, so one malformed record never fails a whole batch.
    """
    if record.record_type != CONTACT_RECORD_TYPE:
        logger.warning(f"Skipping record {record.record_id}: unexpected type {record.record_type}")
        return None

    name = record.get(NAME_FIELD)
    if not isinstance(name, str):
        logger.warning(f"Skipping record {record.record_id}: missing or non-string name")
        return None

    return Contact(name=name, record_id=record.record_id)
