"""Batch save of contact names as records."""

import logging
from typing import List, Optional

from ..aws_clients.record_store import RecordStore
from ..config.config_manager import DEFAULT_ZONE_NAME
from ..error_handling.error_classifier import ErrorCategory, ErrorClassifier
from ..error_handling.exceptions import BatchError
from ..models.contact_models import Contact, to_record
from ..models.sync_models import BatchSaveResult

logger = logging.getLogger(__name__)


class ContactWriter:
    """Saves contact names to the contacts zone as one batch."""

    def __init__(self, store: RecordStore, zone_id: str = DEFAULT_ZONE_NAME,
                 classifier: Optional[ErrorClassifier] = None):
        self.store = store
        self.zone_id = zone_id
        self.classifier = classifier or ErrorClassifier()

    async def save(self, names: List[str]) -> BatchSaveResult:
        """Save one record per name; duplicate names become duplicate records.

        Partial failures are logged and returned, not raised.

        Raises:
            BatchError: If the batch failed as a whole
        """
        records = [to_record(Contact(name=name), zone_id=self.zone_id) for name in names]

        try:
            result = await self.store.save_records(records)
        except BatchError as e:
            self.classifier.report_error(e)
            raise

        if result.failures:
            self.classifier.report_error(BatchError(
                f"{len(result.failures)} of {len(records)} contacts were not saved",
                failures=result.failures,
                saved=result.saved,
                category=ErrorCategory.PARTIAL_FAILURE
            ))
        logger.info(f"Saved {len(result.saved)} of {len(records)} contacts to zone {self.zone_id}")
        return result

    async def save_contacts(self, names: List[str]) -> List[str]:
        """Save contacts and return the ids of the records actually persisted."""
        result = await self.save(names)
        return result.saved_ids
