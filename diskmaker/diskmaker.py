"""Main DiskMaker class and command line entry point"""

import argparse
import logging
import os
import signal
import sys
import threading
from typing import List, Optional

from .config import ConfigManager
from .enumerator import BlockDeviceEnumerator
from .errors import ConfigError, EnumerationError, SymlinkDirError
from .matcher import DiskMatcher
from .models import CycleResult, DaemonSettings
from .reconciler import SymlinkReconciler
from .resolver import StableIdResolver


class DiskMaker:
    """Keeps a symlink tree of unmounted local disks for the local volume provisioner

    Each cycle reads the configuration, lists unmounted block devices, matches
    them to storage classes and links them under symlink_dir/<storage class>.
    Components:
    - Configuration loading (YAML)
    - Block device enumeration (lsblk)
    - Stable identifier resolution (/dev/disk/by-id)
    - Symlink reconciliation
    """

    def __init__(self, settings: Optional[DaemonSettings] = None, logger: Optional[logging.Logger] = None):
        """Initialize the DiskMaker instance

        Args:
            settings: Daemon settings, defaults when not given
            logger: Logger instance
        """
        self.settings = settings or DaemonSettings()
        self.logger = logger or logging.getLogger(__name__)

        timeout = self.settings.lsblk_timeout or None
        self.config_manager = ConfigManager(self.settings.config_file, logger=self.logger)
        self.enumerator = BlockDeviceEnumerator(timeout=timeout, logger=self.logger)
        self.resolver = StableIdResolver(self.settings.by_id_dir, logger=self.logger)
        self.matcher = DiskMatcher(self.resolver, logger=self.logger)
        self.reconciler = SymlinkReconciler(
            self.settings.symlink_dir,
            dev_dir=self.settings.dev_dir,
            replace_stale=self.settings.replace_stale_links,
            logger=self.logger
        )

    def ensure_symlink_dir(self) -> None:
        """Create the root of the symlink tree

        Raises:
            SymlinkDirError: If the directory cannot be created
        """
        try:
            os.makedirs(self.settings.symlink_dir, mode=0o755, exist_ok=True)
        except OSError as e:
            raise SymlinkDirError(
                f"error creating local-storage directory {self.settings.symlink_dir}: {e}"
            ) from e

    def run_cycle(self) -> CycleResult:
        """Run one enumerate, match and link pass

        Returns:
            CycleResult describing what happened
        """
        try:
            disk_config = self.config_manager.load()
        except ConfigError as e:
            self.logger.error(f"Error loading configuration: {e}")
            return CycleResult(CycleResult.CONFIG_ERROR, error=str(e))

        try:
            device_set = self.enumerator.find_unmounted_devices()
        except EnumerationError as e:
            self.logger.error(f"Error listing block devices: {e}")
            return CycleResult(CycleResult.ENUMERATION_ERROR, error=str(e))

        if not device_set:
            self.logger.info("Unable to find any new disks")
            return CycleResult(CycleResult.NO_DEVICES)

        device_map = self.matcher.find_matching_disks(disk_config, device_set)
        if not device_map:
            self.logger.info(
                f"Unable to find any matching disks for storage classes {self.config_manager.storage_classes()}"
            )
            return CycleResult(CycleResult.NO_MATCHES)

        summary = self.reconciler.reconcile(device_map)
        self.logger.debug(
            f"Cycle finished: {len(summary.created)} created, {len(summary.unchanged)} unchanged, "
            f"{len(summary.replaced)} replaced, {len(summary.stale)} stale, {len(summary.failed)} failed"
        )
        return CycleResult(CycleResult.OK, matches=device_map, summary=summary)

    def run(self, stop: threading.Event) -> None:
        """Run cycles every settings.interval seconds until stop is set

        A cycle in progress always completes; stop is only checked between
        cycles.

        Raises:
            SymlinkDirError: If the root symlink directory cannot be created
        """
        self.ensure_symlink_dir()

        while not stop.is_set():
            self.run_cycle()
            if stop.wait(self.settings.interval):
                break

        self.logger.info("Exiting, received stop signal")


def setup_logger(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Set up the logger for the application"""
    logger = logging.getLogger("diskmaker")
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logger.setLevel(level)

    if not logger.handlers:
        ch = logging.StreamHandler()
        formatter = logging.Formatter('[%(levelname)s] %(message)s')
        ch.setFormatter(formatter)
        logger.addHandler(ch)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    defaults = DaemonSettings()
    parser = argparse.ArgumentParser(
        description="Symlinks unmounted local disks into per storage class directories for the local volume provisioner."
    )

    parser.add_argument("-c", "--config", default=defaults.config_file, metavar="PATH",
                        help="Disk configuration file (YAML)")
    parser.add_argument("-s", "--symlink-dir", default=defaults.symlink_dir, metavar="DIR",
                        help="Root directory of the symlink tree")
    parser.add_argument("--by-id-dir", default=defaults.by_id_dir, metavar="DIR",
                        help="Directory of stable device identifiers")
    parser.add_argument("-i", "--interval", type=float, default=defaults.interval, metavar="SECONDS",
                        help="Seconds between reconciliation cycles")
    parser.add_argument("--lsblk-timeout", type=float, default=defaults.lsblk_timeout, metavar="SECONDS",
                        help="Seconds to wait for lsblk, 0 to wait forever")
    parser.add_argument("--replace-stale-links", action="store_true",
                        help="Repoint existing links whose target no longer matches")
    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress INFO messages")

    args = parser.parse_args(argv)

    if args.interval <= 0:
        parser.error("--interval must be greater than 0")
    if args.lsblk_timeout is not None and args.lsblk_timeout < 0:
        parser.error("--lsblk-timeout must not be negative")

    return args


def settings_from_args(args: argparse.Namespace) -> DaemonSettings:
    """Build DaemonSettings from parsed arguments"""
    return DaemonSettings(
        config_file=args.config,
        symlink_dir=args.symlink_dir,
        by_id_dir=args.by_id_dir,
        interval=args.interval,
        lsblk_timeout=args.lsblk_timeout,
        replace_stale_links=args.replace_stale_links
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application"""
    args = parse_arguments(argv)
    logger = setup_logger(args.verbose, args.quiet)
    disk_maker = DiskMaker(settings_from_args(args), logger=logger)

    if args.once:
        try:
            disk_maker.ensure_symlink_dir()
        except SymlinkDirError as e:
            logger.error(str(e))
            return 1
        result = disk_maker.run_cycle()
        return 1 if result.aborted or not result.summary.ok else 0

    stop = threading.Event()

    def _handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, stopping after the current cycle")
        stop.set()

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)

    try:
        disk_maker.run(stop)
    except SymlinkDirError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
