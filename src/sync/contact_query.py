"""Reads of contact names: prefix queries and full-zone enumeration."""

import logging
from typing import List, Optional

from ..aws_clients.record_store import RecordStore
from ..config.config_manager import DEFAULT_ZONE_NAME
from ..error_handling.error_classifier import ErrorClassifier
from ..error_handling.exceptions import StoreError
from ..models.contact_models import CONTACT_RECORD_TYPE, NAME_FIELD, RemoteRecord, from_record
from ..models.sync_models import StartsWith

logger = logging.getLogger(__name__)


def _decode_names(records: List[RemoteRecord]) -> List[str]:
    names = []
    for record in records:
        contact = from_record(record)
        if contact is not None:
            names.append(contact.name)
    return names


class ContactQuery:
    """Fetches contact names from the contacts zone.

    Newly saved records may take a moment to become visible; this class makes
    no visibility guarantee beyond what the store offers.
    """

    def __init__(self, store: RecordStore, zone_id: str = DEFAULT_ZONE_NAME,
                 classifier: Optional[ErrorClassifier] = None):
        self.store = store
        self.zone_id = zone_id
        self.classifier = classifier or ErrorClassifier()

    async def get_contact_names(self, prefix: Optional[str] = None) -> List[str]:
        """Return names starting with ``prefix`` (case-sensitive), or all names.

        An empty prefix reads the whole zone, as no prefix does.

        Raises:
            QueryError: If the query or a page fetch failed
        """
        if not prefix:
            return await self.get_all_contact_names()

        predicate = StartsWith(field_name=NAME_FIELD, prefix=prefix)
        try:
            records = await self.store.query_records(CONTACT_RECORD_TYPE, predicate, self.zone_id)
        except StoreError as e:
            self.classifier.report_error(e)
            raise

        names = _decode_names(records)
        logger.debug(f"Found {len(names)} contacts starting with {prefix!r}")
        return names

    async def get_all_contact_names(self) -> List[str]:
        """Return every contact name in the zone, following the change feed to its end.

        Pages are requested strictly one after another: each token is only
        valid as the continuation of the page it came with.

        Raises:
            QueryError: If any page fetch failed
        """
        names: List[str] = []
        token = None
        pages = 0

        while True:
            try:
                page = await self.store.fetch_zone_changes(self.zone_id, token)
            except StoreError as e:
                self.classifier.report_error(e)
                raise

            pages += 1
            names.extend(_decode_names(page.records))
            if not page.has_more:
                break
            token = page.next_token

        logger.debug(f"Read {len(names)} contacts from zone {self.zone_id} in {pages} pages")
        return names
