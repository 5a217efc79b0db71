"""Configuration management utilities."""

import os
from dataclasses import dataclass
from typing import Dict, Any, Mapping, Optional

DEFAULT_TABLE_NAME = "aws-contact-queries-records"
DEFAULT_REGION = "us-east-1"
DEFAULT_ZONE_NAME = "Contacts"
DEFAULT_PAGE_SIZE = 100
DEFAULT_FLAG_FILE = os.path.join("~", ".aws-contact-queries", "flags.json")


@dataclass
class StoreConfig:
    """Settings for the contacts record store and its local flag file."""
    table_name: str = DEFAULT_TABLE_NAME
    region: str = DEFAULT_REGION
    zone_name: str = DEFAULT_ZONE_NAME
    page_size: int = DEFAULT_PAGE_SIZE
    flag_file: str = DEFAULT_FLAG_FILE
    connect_timeout: float = 5
    read_timeout: float = 10
    max_transport_attempts: int = 3

    def __post_init__(self):
        """Validate configuration."""
        # DynamoDB table names: 3-255 chars of [a-zA-Z0-9_.-]
        if not 3 <= len(self.table_name) <= 255:
            raise ValueError(f"Invalid table_name length: {self.table_name}")
        if not all(c.isalnum() or c in "_.-" for c in self.table_name):
            raise ValueError(f"Invalid table_name: {self.table_name}")
        if not self.region.strip():
            raise ValueError("region cannot be empty")
        if not self.zone_name.strip():
            raise ValueError("zone_name cannot be empty")
        if not 1 <= self.page_size <= 1000:
            raise ValueError("page_size must be between 1 and 1000")
        if not self.flag_file.strip():
            raise ValueError("flag_file cannot be empty")
        if self.connect_timeout <= 0 or self.read_timeout <= 0:
            raise ValueError("timeouts must be positive")
        if self.max_transport_attempts < 1:
            raise ValueError("max_transport_attempts must be at least 1")

    @property
    def flag_path(self) -> str:
        return os.path.expanduser(self.flag_file)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "table_name": self.table_name,
            "region": self.region,
            "zone_name": self.zone_name,
            "page_size": self.page_size,
            "flag_file": self.flag_file,
            "connect_timeout": self.connect_timeout,
            "read_timeout": self.read_timeout,
            "max_transport_attempts": self.max_transport_attempts
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoreConfig":
        """Create configuration from dictionary."""
        return cls(
            table_name=data.get("table_name", DEFAULT_TABLE_NAME),
            region=data.get("region", DEFAULT_REGION),
            zone_name=data.get("zone_name", DEFAULT_ZONE_NAME),
            page_size=int(data.get("page_size", DEFAULT_PAGE_SIZE)),
            flag_file=data.get("flag_file", DEFAULT_FLAG_FILE),
            connect_timeout=float(data.get("connect_timeout", 5)),
            read_timeout=float(data.get("read_timeout", 10)),
            max_transport_attempts=int(data.get("max_transport_attempts", 3))
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StoreConfig":
        """Create configuration from environment variables, falling back to defaults."""
        environ = os.environ if environ is None else environ
        return cls(
            table_name=environ.get("CONTACTS_TABLE_NAME", DEFAULT_TABLE_NAME),
            region=environ.get("AWS_REGION", DEFAULT_REGION),
            zone_name=environ.get("CONTACTS_ZONE_NAME", DEFAULT_ZONE_NAME),
            page_size=int(environ.get("CHANGE_FEED_PAGE_SIZE", DEFAULT_PAGE_SIZE)),
            flag_file=environ.get("CONTACTS_FLAG_FILE", DEFAULT_FLAG_FILE)
        )


class ConfigManager:
    """Builds the store configuration from the environment and command-line overrides."""

    def __init__(self):
        self._config: Optional[StoreConfig] = None

    def load_config(self, config_data: Dict[str, Any]) -> StoreConfig:
        """Load and validate configuration from dictionary."""
        try:
            self._config = StoreConfig.from_dict(config_data)
            return self._config
        except (ValueError, TypeError) as e:
            raise ValueError(f"Invalid configuration: {e}")

    def load_from_env(self, environ: Optional[Mapping[str, str]] = None) -> StoreConfig:
        """Load configuration from environment variables."""
        try:
            self._config = StoreConfig.from_env(environ)
            return self._config
        except (ValueError, TypeError) as e:
            raise ValueError(f"Invalid configuration in environment: {e}")

    def get_config(self) -> Optional[StoreConfig]:
        """Get current configuration."""
        return self._config

    def validate_config(self, config_data: Dict[str, Any]) -> bool:
        """Validate configuration without loading it."""
        try:
            StoreConfig.from_dict(config_data)
            return True
        except (ValueError, TypeError):
            return False

    def update_config(self, updates: Dict[str, Any]) -> StoreConfig:
        """Override loaded settings. Keys whose value is None are left unchanged."""
        if self._config is None:
            raise ValueError("No configuration loaded")

        overrides = {key: value for key, value in updates.items() if value is not None}
        if not overrides:
            return self._config

        current_dict = self._config.to_dict()
        current_dict.update(overrides)
        return self.load_config(current_dict)
