"""Data models for the disk maker"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import ConfigError


DEFAULT_CONFIG_FILE = "/etc/local-storage/diskMakerConfig"
DEFAULT_SYMLINK_DIR = "/mnt/local-storage"
DEFAULT_BY_ID_DIR = "/dev/disk/by-id"
DEFAULT_DEV_DIR = "/dev"
DEFAULT_INTERVAL = 5.0
DEFAULT_LSBLK_TIMEOUT = 60.0


def is_valid_path_component(name: str) -> bool:
    """True when name can be used as a single file name inside a directory"""
    return bool(name) and name not in (".", "..") and "/" not in name and "\0" not in name


@dataclass
class DiskSelector:
    """Disks selected for one storage class"""

    device_names: List[str] = field(default_factory=list)   # Raw names (e.g., sdb)
    device_ids: List[str] = field(default_factory=list)     # Entries under the by-id directory

    def to_dict(self) -> dict:
        """Convert selector to dictionary representation"""
        return {
            "deviceNames": list(self.device_names),
            "deviceIDs": list(self.device_ids)
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "DiskSelector":
        """Create DiskSelector from dictionary"""
        data = data or {}
        return cls(
            device_names=_string_list(data, "deviceNames"),
            device_ids=_string_list(data, "deviceIDs")
        )


def _string_list(data: dict, key: str) -> List[str]:
    """Entries of a selector list, which must all be strings"""
    values = data.get(key) or []
    for value in values:
        if not isinstance(value, str):
            raise ConfigError(f"{key} entry {value!r} must be a string, quote it in the configuration")
    return list(values)


# Storage class name -> selector
DiskConfig = Dict[str, DiskSelector]


@dataclass
class DiskLocation:
    """A matched device and, when resolvable, its stable identifier path"""

    disk_name: str                   # Kernel device name (e.g., sdb)
    disk_id: str = ""                # Full by-id path, empty when unresolved

    @property
    def has_stable_id(self) -> bool:
        return bool(self.disk_id)

    def target_path(self, dev_dir: str = DEFAULT_DEV_DIR) -> str:
        """Path the symlink for this device should point at"""
        if self.has_stable_id:
            return self.disk_id
        return os.path.join(dev_dir, self.disk_name)


# Storage class name -> matched devices in configuration order
MatchResult = Dict[str, List[DiskLocation]]


@dataclass
class ReconcileSummary:
    """Outcome of converging the symlink tree for one cycle"""

    created: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    replaced: List[str] = field(default_factory=list)
    stale: List[str] = field(default_factory=list)      # Wrong target, left in place
    failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict:
        """Convert summary to dictionary representation"""
        return {
            "created": list(self.created),
            "unchanged": list(self.unchanged),
            "replaced": list(self.replaced),
            "stale": list(self.stale),
            "failed": list(self.failed)
        }


@dataclass
class CycleResult:
    """Result of one reconciliation cycle, returned to the caller"""

    OK = "ok"
    NO_DEVICES = "no-devices"
    NO_MATCHES = "no-matches"
    CONFIG_ERROR = "config-error"
    ENUMERATION_ERROR = "enumeration-error"

    status: str
    matches: MatchResult = field(default_factory=dict)
    summary: ReconcileSummary = field(default_factory=ReconcileSummary)
    error: str = ""

    @property
    def aborted(self) -> bool:
        """True when the cycle stopped before matching"""
        return self.status in (self.CONFIG_ERROR, self.ENUMERATION_ERROR)


@dataclass
class DaemonSettings:
    """Tunables for a disk maker instance"""

    config_file: str = DEFAULT_CONFIG_FILE
    symlink_dir: str = DEFAULT_SYMLINK_DIR
    by_id_dir: str = DEFAULT_BY_ID_DIR
    dev_dir: str = DEFAULT_DEV_DIR
    interval: float = DEFAULT_INTERVAL             # Seconds between cycles
    lsblk_timeout: Optional[float] = DEFAULT_LSBLK_TIMEOUT
    replace_stale_links: bool = False
