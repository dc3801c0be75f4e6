"""Symlink tree reconciliation"""

import logging
import os
from typing import Optional

from .models import DEFAULT_DEV_DIR, DiskLocation, MatchResult, ReconcileSummary, is_valid_path_component


class SymlinkReconciler:
    """Creates one symlink per matched device under its storage class directory

    Links are only ever added. An existing link that points somewhere else is
    left alone unless replace_stale is set, in which case it is swapped for
    the new target. Regular files and directories in the way are never touched.
    """

    def __init__(self, symlink_dir: str, dev_dir: str = DEFAULT_DEV_DIR, replace_stale: bool = False,
                 logger: Optional[logging.Logger] = None):
        """Initialize the reconciler

        Args:
            symlink_dir: Root of the symlink tree
            dev_dir: Directory of device nodes used when no stable ID is known
            replace_stale: Whether to repoint links whose target changed
            logger: Logger instance
        """
        self.symlink_dir = symlink_dir
        self.dev_dir = dev_dir
        self.replace_stale = replace_stale
        self.logger = logger or logging.getLogger(__name__)

    def reconcile(self, device_map: MatchResult) -> ReconcileSummary:
        """Converge the symlink tree to the matched devices

        Args:
            device_map: Storage class to matched device locations

        Returns:
            ReconcileSummary listing the link paths by outcome
        """
        summary = ReconcileSummary()

        for storage_class, locations in device_map.items():
            if not is_valid_path_component(storage_class):
                self.logger.error(f"Skipping invalid storage class name {storage_class!r}")
                summary.failed.extend(loc.disk_name for loc in locations)
                continue

            sym_link_dir_path = os.path.join(self.symlink_dir, storage_class)
            try:
                os.makedirs(sym_link_dir_path, mode=0o755, exist_ok=True)
            except OSError as e:
                self.logger.error(f"Error creating symlink directory {sym_link_dir_path}: {e}")
                summary.failed.extend(os.path.join(sym_link_dir_path, loc.disk_name) for loc in locations)
                continue

            for location in locations:
                self._link_device(sym_link_dir_path, location, summary)

        return summary

    def _link_device(self, sym_link_dir_path: str, location: DiskLocation, summary: ReconcileSummary) -> None:
        """Create or check the link for one device"""
        if not is_valid_path_component(location.disk_name):
            self.logger.error(f"Skipping invalid device name {location.disk_name!r} in {sym_link_dir_path}")
            summary.failed.append(location.disk_name)
            return

        sym_link_path = os.path.join(sym_link_dir_path, location.disk_name)
        target = location.target_path(self.dev_dir)

        try:
            if not os.path.lexists(sym_link_path):
                self.logger.info(f"Symlinking {target} to {sym_link_path}")
                os.symlink(target, sym_link_path)
                summary.created.append(sym_link_path)
                return

            if not os.path.islink(sym_link_path):
                self.logger.error(f"Error creating symlink {sym_link_path}: path exists and is not a symlink")
                summary.failed.append(sym_link_path)
                return

            current_target = os.readlink(sym_link_path)
            if current_target == target:
                self.logger.debug(f"Symlink {sym_link_path} already points to {target}")
                summary.unchanged.append(sym_link_path)
                return

            if not self.replace_stale:
                self.logger.warning(
                    f"Symlink {sym_link_path} points to {current_target} instead of {target}, leaving it in place"
                )
                summary.stale.append(sym_link_path)
                return

            self.logger.info(f"Replacing symlink {sym_link_path}: {current_target} -> {target}")
            self._replace_link(target, sym_link_path)
            summary.replaced.append(sym_link_path)

        except OSError as e:
            self.logger.error(f"Error creating symlink {sym_link_path}: {e}")
            summary.failed.append(sym_link_path)

    def _replace_link(self, target: str, sym_link_path: str) -> None:
        """Atomically point an existing link at a new target"""
        tmp_path = os.path.join(os.path.dirname(sym_link_path), f".{os.path.basename(sym_link_path)}.tmp")
        if os.path.lexists(tmp_path):
            os.unlink(tmp_path)
        os.symlink(target, tmp_path)
        try:
            os.replace(tmp_path, sym_link_path)
        except OSError:
            os.unlink(tmp_path)
            raise
