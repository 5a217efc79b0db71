"""Once-per-device creation of the contacts zone."""

import logging

from ..aws_clients.record_store import RecordStore
from ..config.flag_store import FlagStore, ZONE_CREATED_FLAG
from ..config.config_manager import DEFAULT_ZONE_NAME

logger = logging.getLogger(__name__)


class ZoneProvisioner:
    """Ensures the contacts zone exists, remembering success in a local flag.

    Concurrent first calls may both reach the store; zone creation there is
    idempotent, so no lock is taken here.
    """

    def __init__(self, store: RecordStore, flags: FlagStore, zone_id: str = DEFAULT_ZONE_NAME):
        self.store = store
        self.flags = flags
        self.zone_id = zone_id

    async def ensure_contacts_zone_once(self) -> None:
        """Create the zone unless this device already did.

        Raises:
            ZoneError: If the store could not create the zone; the flag stays unset
        """
        if self.flags.get_flag(ZONE_CREATED_FLAG):
            logger.debug(f"Zone {self.zone_id} already created on this device")
            return

        await self.store.ensure_zone(self.zone_id)
        self.flags.set_flag(ZONE_CREATED_FLAG, True)
        logger.info(f"Zone {self.zone_id} is ready")
