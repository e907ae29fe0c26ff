"""Named playlist collection with a current selection."""

from __future__ import annotations

import logging
import unicodedata
from typing import TYPE_CHECKING, Iterator, Optional

from jukebox.errors import (
    CapacityExceeded,
    DuplicateName,
    IndexOutOfRange,
    InvalidName,
)
from jukebox.playlist import MAX_FIELD_BYTES, Playlist, has_line_break

if TYPE_CHECKING:
    from jukebox.playlist_io import PlaylistStorage

logger = logging.getLogger(__name__)

MAX_PLAYLISTS = 10
RESERVED_NAME_CHARS = '\\/:*?"<>|'
# The master index lives next to the playlist files under this name.
MASTER_INDEX_STEM = "playlists"


def validate_playlist_name(name: str) -> str:
    """Return ``name`` if it can be used as a playlist file name."""
    if not name or not name.strip():
        raise InvalidName("Playlist name cannot be empty.")
    if any(char in RESERVED_NAME_CHARS for char in name):
        raise InvalidName(
            'Playlist name contains invalid characters (e.g., \\ / : * ? " < > |).'
        )
    if has_line_break(name):
        raise InvalidName("Playlist name cannot contain line breaks.")
    if any(unicodedata.category(char) == "Cc" for char in name):
        raise InvalidName("Playlist name cannot contain control characters.")
    if name.casefold() == MASTER_INDEX_STEM:
        raise InvalidName(f'"{name}" is reserved for the playlist index.')
    if len(name.encode("utf-8")) > MAX_FIELD_BYTES:
        raise InvalidName(f"Playlist name is longer than {MAX_FIELD_BYTES} bytes.")
    return name


class PlaylistRegistry:
    """Bounded, ordered set of playlists with unique names."""

    def __init__(
        self,
        storage: Optional[PlaylistStorage] = None,
        max_playlists: int = MAX_PLAYLISTS,
    ) -> None:
        self.storage = storage
        self.max_playlists = max_playlists
        self._playlists: list[Playlist] = []
        self._current: Optional[int] = None

    def __len__(self) -> int:
        return len(self._playlists)

    def __iter__(self) -> Iterator[Playlist]:
        return iter(list(self._playlists))

    @property
    def playlists(self) -> list[Playlist]:
        return list(self._playlists)

    @property
    def current_index(self) -> Optional[int]:
        """0-based index of the selected playlist, or None."""
        return self._current

    @property
    def current(self) -> Optional[Playlist]:
        if self._current is None:
            return None
        return self._playlists[self._current]

    def is_full(self) -> bool:
        return len(self._playlists) >= self.max_playlists

    def find(self, name: str) -> Optional[Playlist]:
        wanted = name.casefold()
        for playlist in self._playlists:
            if playlist.name.casefold() == wanted:
                return playlist
        return None

    def _check_new_name(self, name: str) -> None:
        validate_playlist_name(name)
        if self.find(name) is not None:
            raise DuplicateName("A playlist with this name already exists.")
        if self.is_full():
            raise CapacityExceeded("Maximum number of playlists reached.")

    def create(self, name: str) -> Playlist:
        """Append a new empty playlist and select it."""
        self._check_new_name(name)
        playlist = Playlist(name)
        self._playlists.append(playlist)
        self._current = len(self._playlists) - 1
        logger.info("Created playlist %r", name)
        return playlist

    def add_loaded(self, playlist: Playlist) -> None:
        """Append an already populated playlist without changing the selection."""
        self._check_new_name(playlist.name)
        self._playlists.append(playlist)

    def _checked_index(self, number: int) -> int:
        if number < 1 or number > len(self._playlists):
            raise IndexOutOfRange("Invalid playlist number.")
        return number - 1

    def switch_to(self, number: int) -> Playlist:
        """Select the playlist at 1-based position ``number``."""
        self._current = self._checked_index(number)
        return self._playlists[self._current]

    def select_name(self, name: str) -> bool:
        """Select a playlist by name; return False if it does not exist."""
        wanted = name.casefold()
        for index, playlist in enumerate(self._playlists):
            if playlist.name.casefold() == wanted:
                self._current = index
                return True
        return False

    def delete(self, number: int) -> Playlist:
        """Remove the playlist at 1-based position ``number``."""
        index = self._checked_index(number)
        playlist = self._playlists[index]
        if self.storage is not None:
            self.storage.delete_backing_file(playlist)
        del self._playlists[index]
        if self._current is not None:
            if self._current == index:
                self._current = 0 if self._playlists else None
            elif self._current > index:
                self._current -= 1
        logger.info("Deleted playlist %r", playlist.name)
        return playlist

    def list(self) -> list[tuple[str, int]]:
        return [(playlist.name, len(playlist)) for playlist in self._playlists]

    def select_first(self) -> None:
        self._current = 0 if self._playlists else None
