"""Matching of configured disks against discovered devices"""

import logging
from typing import Optional, Sequence, Set

from .errors import StableIdNotFoundError
from .models import DiskConfig, DiskLocation, MatchResult
from .resolver import StableIdResolver


class DiskMatcher:
    """Groups unmounted devices by the storage class that claims them"""

    def __init__(self, resolver: StableIdResolver, logger: Optional[logging.Logger] = None):
        """Initialize disk matcher

        Args:
            resolver: Stable identifier resolver
            logger: Logger instance
        """
        self.resolver = resolver
        self.logger = logger or logging.getLogger(__name__)

    def find_matching_disks(self, disk_config: DiskConfig, device_set: Set[str],
                            all_disk_ids: Optional[Sequence[str]] = None) -> MatchResult:
        """Match configured device names and IDs

        Device names are handled before device IDs within each storage class,
        both in configuration order. A device claimed by more than one rule
        gets one entry per rule.

        Args:
            disk_config: Storage class to selector mapping
            device_set: Names of unmounted devices
            all_disk_ids: by-id paths used for name lookups, listed from the
                resolver when not given

        Returns:
            Mapping of storage class to matched device locations
        """
        block_device_map: MatchResult = {}

        if not device_set:
            return block_device_map

        if all_disk_ids is None:
            all_disk_ids = self.resolver.list_ids()

        for storage_class, selector in disk_config.items():
            locations = []

            for disk_name in selector.device_names:
                if disk_name not in device_set:
                    self.logger.debug(f"Disk {disk_name} for {storage_class} is mounted or not present")
                    continue
                try:
                    matched_device_id = self.resolver.resolve_by_name(disk_name, all_disk_ids)
                except StableIdNotFoundError as e:
                    self.logger.error(f"Unable to find disk ID {disk_name} for local pool {storage_class}: {e}")
                    locations.append(DiskLocation(disk_name))
                    continue
                locations.append(DiskLocation(disk_name, matched_device_id))

            for device_id in selector.device_ids:
                try:
                    matched_device_id, matched_disk_name = self.resolver.resolve_by_id(device_id)
                except StableIdNotFoundError as e:
                    self.logger.error(f"Unable to add disk-id {device_id} to local disk pool {storage_class}: {e}")
                    continue
                locations.append(DiskLocation(matched_disk_name, matched_device_id))

            if locations:
                block_device_map[storage_class] = locations

        return block_device_map
