#!/usr/bin/env python3
"""
Disk Maker - symlinks unmounted local disks for the local volume provisioner

Reads a YAML mapping of storage classes to device names and /dev/disk/by-id
entries, and keeps <symlink-dir>/<storage class>/<device> links up to date.
"""

import sys

from diskmaker.diskmaker import main


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        sys.exit(1)
