"""Configuration management for the disk maker"""

import os
import logging
from typing import Dict, List, Optional
import yaml

from .errors import ConfigError
from .models import DiskConfig, DiskSelector, DEFAULT_CONFIG_FILE, is_valid_path_component


class ConfigManager:
    """Loads the storage class to disk mapping from a YAML file"""

    def __init__(self, config_file: str = DEFAULT_CONFIG_FILE, logger: Optional[logging.Logger] = None):
        """Initialize configuration manager

        Args:
            config_file: Path to configuration file
            logger: Logger instance
        """
        self.config_file = os.path.expanduser(config_file)
        self.logger = logger or logging.getLogger(__name__)

        self.disk_config: DiskConfig = {}

    def load(self) -> DiskConfig:
        """Load configuration from YAML file

        The file is read again on every call so that edits are picked up by
        the next reconciliation cycle.

        Configuration file structure:
        ```yaml
        fast:                              # Storage class name
          deviceNames: ["sdb", "sdc"]      # Kernel device names
          deviceIDs: ["wwn-0x5000c500a0b1c2d3"]   # Entries in /dev/disk/by-id
        slow:
          deviceNames: ["sdd"]
        ```

        Returns:
            Mapping of storage class name to DiskSelector

        Raises:
            ConfigError: If the file cannot be read or is not valid
        """
        self.logger.debug(f"Loading disk configuration from {self.config_file}")

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"error unmarshalling {self.config_file}: {e}") from e
        except UnicodeDecodeError as e:
            raise ConfigError(f"{self.config_file} is not valid UTF-8: {e}") from e
        except IOError as e:
            raise ConfigError(f"failed to read file {self.config_file}: {e}") from e

        if not config:
            self.logger.warning(f"Configuration file {self.config_file} is empty")
            self.disk_config = {}
            return self.disk_config

        if not isinstance(config, dict):
            raise ConfigError(
                f"Configuration file {self.config_file} must map storage class names to disk selectors"
            )

        self.disk_config = self._load_storage_classes(config)
        return self.disk_config

    def _load_storage_classes(self, config: Dict) -> DiskConfig:
        """Build selectors for every storage class entry

        Args:
            config: Parsed YAML document

        Returns:
            Mapping of storage class name to DiskSelector
        """
        disk_config: DiskConfig = {}

        for storage_class, selector_data in config.items():
            if not is_valid_path_component(str(storage_class)):
                raise ConfigError(f"Invalid storage class name {storage_class!r}, it is used as a directory name")

            if selector_data is not None and not isinstance(selector_data, dict):
                raise ConfigError(f"Storage class {storage_class} must be a mapping, got {type(selector_data).__name__}")

            for key in ("deviceNames", "deviceIDs"):
                value = (selector_data or {}).get(key)
                if value is not None and not isinstance(value, list):
                    raise ConfigError(f"{key} of storage class {storage_class} must be a list")

            selector = DiskSelector.from_dict(selector_data)
            disk_config[str(storage_class)] = selector
            self.logger.debug(f"Loaded storage class {storage_class}: {selector}")

        self.logger.debug(f"Found {len(disk_config)} storage classes")
        return disk_config

    def storage_classes(self) -> List[str]:
        """Names of the storage classes from the last load"""
        return list(self.disk_config.keys())
