"""
Custom exceptions for the medialib package.
"""

from pathlib import Path


class MediaLibError(Exception):
    """Base exception for all medialib errors."""
    pass


class ScanRootError(MediaLibError):
    """Raised when the media root cannot be walked at all."""

    def __init__(self, root: Path | str, reason: str):
        self.root = Path(root)
        self.reason = reason
        super().__init__(f"Cannot scan media root '{root}': {reason}")


class CacheWriteError(MediaLibError):
    """Raised when the catalog cache cannot be created or committed."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to write catalog cache '{path}': {reason}")


class CacheDecodeError(MediaLibError):
    """Raised when a catalog cache stream is malformed or has an unknown format."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Cannot decode catalog cache: {reason}")
