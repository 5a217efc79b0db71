"""Local boolean flag storage, durable across process restarts."""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from typing import Dict, Optional

logger = logging.getLogger(__name__)

ZONE_CREATED_FLAG = "contactZoneCreated"


class FlagStore(ABC):
    """Small key-value store of booleans local to this device."""

    @abstractmethod
    def get_flag(self, key: str) -> bool:
        """Return the flag value, False when it was never set."""

    @abstractmethod
    def set_flag(self, key: str, value: bool) -> None:
        """Persist the flag value."""


class InMemoryFlagStore(FlagStore):
    """Flag store that lives only as long as the process."""

    def __init__(self, initial: Optional[Dict[str, bool]] = None):
        self._flags: Dict[str, bool] = dict(initial or {})

    def get_flag(self, key: str) -> bool:
        return self._flags.get(key, False)

    def set_flag(self, key: str, value: bool) -> None:
        self._flags[key] = bool(value)


class JsonFileFlagStore(FlagStore):
    """Flag store persisted as a JSON object in a local file.

    The file and its parent directory are created on first write. Writes go
    through a temporary file and ``os.replace`` so a crash never leaves a
    truncated file behind.
    """

    def __init__(self, path: str):
        """Initialize the flag store.

        Args:
            path: Location of the JSON file; ``~`` is expanded
        """
        self.path = os.path.expanduser(path)

    def _read_all(self) -> Dict[str, bool]:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable flag file {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring flag file {self.path}: expected a JSON object")
            return {}
        return {key: value is True for key, value in data.items()}

    def get_flag(self, key: str) -> bool:
        return self._read_all().get(key, False)

    def set_flag(self, key: str, value: bool) -> None:
        flags = self._read_all()
        flags[key] = bool(value)

        directory = os.path.dirname(self.path) or "."
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".flags-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(flags, fh, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        logger.debug(f"Set flag {key}={value} in {self.path}")
