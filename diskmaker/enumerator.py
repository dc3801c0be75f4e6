"""Block device discovery"""

import logging
import subprocess
from typing import List, Optional, Set

from .errors import EnumerationError


LSBLK_COMMAND = ["lsblk", "--list", "-o", "NAME,MOUNTPOINT", "--noheadings"]


def parse_lsblk_output(content: str) -> Set[str]:
    """Collect names of devices without a mountpoint

    Args:
        content: Output of lsblk with NAME and MOUNTPOINT columns

    Returns:
        Set of unmounted device names
    """
    device_set: Set[str] = set()
    for device_line in content.splitlines():
        device_details = device_line.split()
        # A second column means the device is mounted
        if len(device_details) == 1 and device_details[0]:
            device_set.add(device_details[0])
    return device_set


class BlockDeviceEnumerator:
    """Lists block devices that are not mounted"""

    def __init__(self, timeout: Optional[float] = None, logger: Optional[logging.Logger] = None,
                 command: Optional[List[str]] = None):
        """Initialize the enumerator

        Args:
            timeout: Seconds to wait for lsblk, None to wait forever
            logger: Logger instance
            command: Listing command, defaults to lsblk
        """
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.command = command or list(LSBLK_COMMAND)

    def find_unmounted_devices(self) -> Set[str]:
        """Run the listing command and return unmounted device names

        Raises:
            EnumerationError: If the command is missing, fails or times out
        """
        output = self._execute_command(self.command)
        device_set = parse_lsblk_output(output)
        self.logger.debug(f"Found {len(device_set)} unmounted block devices: {sorted(device_set)}")
        return device_set

    def _execute_command(self, cmd: List[str]) -> str:
        """Execute a command and return its output

        Args:
            cmd: Command to execute as list of strings

        Returns:
            str: Command output as string
        """
        self.logger.debug(f"Executing command: {' '.join(cmd)}")

        try:
            output_bytes = subprocess.check_output(cmd, timeout=self.timeout)
        except FileNotFoundError as e:
            raise EnumerationError(f"{cmd[0]} not found: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise EnumerationError(f"{cmd[0]} did not finish within {self.timeout} seconds") from e
        except subprocess.CalledProcessError as e:
            raise EnumerationError(f"error running {cmd[0]}: {e}") from e

        try:
            return output_bytes.decode('utf-8')
        except UnicodeDecodeError:
            self.logger.debug("utf-8 decoding failed, falling back to latin-1")
            return output_bytes.decode('latin-1')
