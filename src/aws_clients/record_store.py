"""Capabilities the sync core needs from a remote record store."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.contact_models import RemoteRecord
from ..models.sync_models import BatchSaveResult, ChangePage, ChangeToken, StartsWith


class RecordStore(ABC):
    """Remote store of zoned records with queries and a paginated change feed.

    Every method may raise a ``StoreError`` subclass classified by cause.
    Implementations own timeouts and transport retries; callers never retry.
    """

    @abstractmethod
    async def ensure_zone(self, zone_id: str) -> None:
        """Create the zone if absent. Succeeds without change when it exists.

        Raises:
            ZoneError: If the zone could not be created or looked up
        """

    @abstractmethod
    async def save_records(self, records: List[RemoteRecord]) -> BatchSaveResult:
        """Save records, each independently of the others.

        Returns the persisted subset (with store-assigned ids) and a failure
        entry for every record that was not saved.

        Raises:
            BatchError: If the batch failed as a whole
        """

    @abstractmethod
    async def query_records(self, record_type: str, predicate: StartsWith, zone_id: str) -> List[RemoteRecord]:
        """Return every record of ``record_type`` in the zone matching ``predicate``.

        Raises:
            QueryError: If the query failed
        """

    @abstractmethod
    async def fetch_zone_changes(self, zone_id: str, since_token: Optional[ChangeToken] = None) -> ChangePage:
        """Return the page of the zone's change log following ``since_token``.

        No token means "from the beginning".

        Raises:
            QueryError: If the page could not be fetched or the token is invalid
        """
