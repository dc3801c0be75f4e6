"""
Local Disk Maker

This module symlinks unmounted local block devices into per storage class
directories, preferring stable /dev/disk/by-id paths, for consumption by the
local volume provisioner.
"""

from .models import DiskSelector, DiskLocation, ReconcileSummary, CycleResult, DaemonSettings
from .diskmaker import DiskMaker

__version__ = "0.1.0"
__all__ = ["DiskSelector", "DiskLocation", "ReconcileSummary", "CycleResult", "DaemonSettings", "DiskMaker"]
