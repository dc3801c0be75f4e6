"""Stable device identifier lookups in /dev/disk/by-id"""

import logging
import os
from typing import List, Optional, Sequence, Tuple

from .errors import StableIdNotFoundError
from .models import DEFAULT_BY_ID_DIR, is_valid_path_component


class StableIdResolver:
    """Maps kernel device names to by-id paths and back

    The by-id directory usually holds several aliases per device (wwn-*,
    scsi-*, ata-*, ...). Listings are sorted so that the lexicographically
    smallest alias wins when more than one points at the same device.
    """

    def __init__(self, by_id_dir: str = DEFAULT_BY_ID_DIR, logger: Optional[logging.Logger] = None):
        self.by_id_dir = by_id_dir
        self.logger = logger or logging.getLogger(__name__)

    def list_ids(self) -> List[str]:
        """Full paths of all entries in the by-id directory, sorted"""
        try:
            entries = os.listdir(self.by_id_dir)
        except FileNotFoundError:
            self.logger.debug(f"{self.by_id_dir} does not exist, no stable identifiers available")
            return []
        except OSError as e:
            self.logger.error(f"Error listing disks in {self.by_id_dir}: {e}")
            return []

        return [os.path.join(self.by_id_dir, entry) for entry in sorted(entries)]

    def resolve_by_name(self, disk_name: str, all_disk_ids: Sequence[str]) -> str:
        """Find the by-id path that points at a device

        Args:
            disk_name: Kernel device name (e.g., sdb)
            all_disk_ids: by-id paths to search, first match wins

        Returns:
            The matching by-id path

        Raises:
            StableIdNotFoundError: If no entry resolves to the device
        """
        for disk_id_path in all_disk_ids:
            try:
                disk_dev_path = os.path.realpath(disk_id_path, strict=True)
            except OSError:
                continue
            if os.path.basename(disk_dev_path) == disk_name:
                return disk_id_path

        raise StableIdNotFoundError(f"unable to find ID of disk {disk_name}")

    def resolve_by_id(self, device_id: str) -> Tuple[str, str]:
        """Find the device behind a by-id entry

        Args:
            device_id: Entry name in the by-id directory (e.g., wwn-0x5000c500a0b1c2d3)

        Returns:
            Tuple of (by-id path, kernel device name)

        Raises:
            StableIdNotFoundError: If the entry does not exist or cannot be resolved
        """
        if not is_valid_path_component(device_id):
            raise StableIdNotFoundError(f"invalid device id {device_id!r}")

        disk_id_path = os.path.join(self.by_id_dir, device_id)
        try:
            disk_dev_path = os.path.realpath(disk_id_path, strict=True)
        except OSError as e:
            raise StableIdNotFoundError(f"unable to find device with id {device_id}: {e}") from e

        return disk_id_path, os.path.basename(disk_dev_path)
