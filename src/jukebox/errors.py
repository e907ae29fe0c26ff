"""Exception types shared across Jukebox components."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class JukeboxError(Exception):
    """Base class for every recoverable Jukebox failure."""


class ValidationError(JukeboxError):
    """Input rejected before any state was touched."""


class InvalidName(ValidationError):
    """Playlist name is empty or not usable as a file name."""


class DuplicateName(ValidationError):
    """A playlist with the same name (ignoring case) already exists."""


class NotFoundError(JukeboxError):
    """Requested song or playlist does not exist."""


class IndexOutOfRange(NotFoundError):
    """A 1-based selection number is outside the valid range."""


class CapacityError(JukeboxError):
    """Collection is already at its maximum size."""


class CapacityExceeded(CapacityError):
    """No room for another playlist."""


class PersistenceError(JukeboxError):
    """A playlist file could not be read or written."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class DeviceError(JukeboxError):
    """The playback device could not open or decode a track."""


class UnsupportedFormat(DeviceError):
    """The device opened the file but reported no usable length."""
