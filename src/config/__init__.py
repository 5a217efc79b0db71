"""Configuration management for contact queries."""

from .config_manager import ConfigManager, StoreConfig
from .flag_store import FlagStore, InMemoryFlagStore, JsonFileFlagStore, ZONE_CREATED_FLAG

__all__ = [
    "ConfigManager",
    "StoreConfig",
    "FlagStore",
    "InMemoryFlagStore",
    "JsonFileFlagStore",
    "ZONE_CREATED_FLAG",
]
