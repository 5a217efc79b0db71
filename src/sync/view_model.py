"""
Contacts view model.

Orchestrates zone setup, saves and reads for a presentation layer, and
publishes every state change to subscribed listeners. The presentation layer
may only read ``state``, set ``active_filter_prefix`` and call
``initialize``/``refresh``/``save_contacts``.
"""

import logging
from typing import Callable, List, Optional

from ..aws_clients.record_store import RecordStore
from ..config.config_manager import DEFAULT_ZONE_NAME
from ..config.flag_store import FlagStore
from ..error_handling.error_classifier import ErrorClassifier
from ..error_handling.exceptions import StoreError
from ..models.sync_models import SyncState
from .contact_query import ContactQuery
from .contact_writer import ContactWriter
from .zone_provisioner import ZoneProvisioner

logger = logging.getLogger(__name__)

StateListener = Callable[[SyncState], None]


class ContactsViewModel:
    """State machine: idle -> loading -> loaded | errored.

    ``initialize`` provisions the zone but loads nothing. ``refresh`` reads
    names using the active filter prefix at the time it starts. Overlapping
    refreshes are allowed; a refresh that finishes after a newer one started
    is discarded so stale names never overwrite fresh ones.
    """

    def __init__(self, store: RecordStore, flags: FlagStore, zone_id: str = DEFAULT_ZONE_NAME,
                 classifier: Optional[ErrorClassifier] = None):
        self.classifier = classifier or ErrorClassifier()
        self.provisioner = ZoneProvisioner(store, flags, zone_id)
        self.writer = ContactWriter(store, zone_id, self.classifier)
        self.query = ContactQuery(store, zone_id, self.classifier)

        self._state = SyncState.idle()
        self._listeners: List[StateListener] = []
        self._active_filter_prefix: Optional[str] = None
        self._generation = 0

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def active_filter_prefix(self) -> Optional[str]:
        return self._active_filter_prefix

    @active_filter_prefix.setter
    def active_filter_prefix(self, prefix: Optional[str]) -> None:
        # Takes effect on the next refresh
        self._active_filter_prefix = prefix

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for state changes.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: SyncState) -> None:
        self._state = state
        logger.debug(f"State changed to {state.kind}")
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception(f"State listener {listener!r} failed")

    async def initialize(self) -> None:
        """Provision the contacts zone. Must succeed before the first refresh.

        Raises:
            ZoneError: If the zone could not be created; the state becomes errored
        """
        try:
            await self.provisioner.ensure_contacts_zone_once()
        except StoreError as e:
            self.classifier.report_error(e)
            self._set_state(SyncState.errored(e))
            raise

        if self._state.is_error:
            self._set_state(SyncState.idle())

    async def refresh(self) -> None:
        """Reload names for the active filter prefix and publish the result."""
        self._generation += 1
        generation = self._generation
        prefix = self._active_filter_prefix

        self._set_state(SyncState.loading())
        try:
            names = await self.query.get_contact_names(prefix)
        except Exception as e:
            if generation != self._generation:
                logger.debug(f"Discarding failure of superseded refresh {generation}: {e}")
                return
            if not isinstance(e, StoreError):
                logger.exception(f"Unexpected failure while loading contact names: {e}")
            self._set_state(SyncState.errored(e))
            return

        if generation != self._generation:
            logger.debug(f"Discarding result of superseded refresh {generation}")
            return
        self._set_state(SyncState.loaded(names, prefix))

    async def initialize_and_refresh(self) -> None:
        """Initialize, then refresh; an initialization failure leaves the state errored."""
        try:
            await self.initialize()
        except StoreError:
            return
        await self.refresh()

    async def save_contacts(self, names: List[str]) -> List[str]:
        """Save names as new contacts. Call ``refresh`` afterwards to see them.

        Returns:
            List[str]: Record ids the store persisted, possibly fewer than names

        Raises:
            BatchError: If the batch failed as a whole; the state becomes errored
        """
        try:
            return await self.writer.save_contacts(names)
        except StoreError as e:
            self._set_state(SyncState.errored(e))
            raise
