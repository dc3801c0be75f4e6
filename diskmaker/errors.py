"""Exception types raised by the disk maker components"""


class DiskMakerError(RuntimeError):
    """Base class for disk maker failures."""


class ConfigError(DiskMakerError):
    """Raised when the disk configuration cannot be read or parsed."""


class EnumerationError(DiskMakerError):
    """Raised when the block device listing command fails."""


class StableIdNotFoundError(DiskMakerError):
    """Raised when a device has no resolvable entry in the by-id directory."""


class SymlinkDirError(DiskMakerError):
    """Raised when the root symlink directory cannot be created."""
