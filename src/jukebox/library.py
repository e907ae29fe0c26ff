"""Process-owned library state: playlists, history and their storage."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Optional

from jukebox.errors import CapacityError, NotFoundError, PersistenceError
from jukebox.history import HISTORY_SIZE, PlaybackHistory
from jukebox.playlist import Playlist, Song, check_field
from jukebox.playlist_io import PlaylistStorage
from jukebox.registry import PlaylistRegistry

logger = logging.getLogger(__name__)


@dataclass
class LibraryState:
    """Everything the menus operate on, created at startup and saved at exit."""

    storage: PlaylistStorage
    registry: PlaylistRegistry
    history: PlaybackHistory = field(default_factory=PlaybackHistory)

    @classmethod
    def load(
        cls,
        root: Path,
        *,
        history_size: int = HISTORY_SIZE,
        last_playlist: Optional[str] = None,
    ) -> LibraryState:
        storage = PlaylistStorage(root)
        registry = storage.load_all()
        if last_playlist and not registry.select_name(last_playlist):
            logger.info("Last playlist %r no longer exists", last_playlist)
        return cls(
            storage=storage,
            registry=registry,
            history=PlaybackHistory(history_size),
        )

    def save(self) -> list[PersistenceError]:
        return self.storage.save_all(self.registry)

    def require_current(self) -> Playlist:
        playlist = self.registry.current
        if playlist is None:
            raise NotFoundError("Please create or switch to a playlist first.")
        return playlist

    def add_song(self, title: str, artist: str, file_path: str) -> Song:
        """Add a fully specified song to the current playlist."""
        playlist = self.require_current()
        check_field("Title", title, required=True)
        check_field("Artist", artist, required=True)
        check_field("File path", file_path, required=True)
        if playlist.is_full():
            raise CapacityError(
                f"Playlist {playlist.name!r} already holds {playlist.max_size} songs."
            )
        try:
            song = playlist.append(title, artist, file_path)
        except MemoryError:
            logger.critical("Memory allocation failed while adding %r", title)
            raise
        if song is None:
            raise CapacityError(f"Playlist {playlist.name!r} is full.")
        logger.info("Added %r to %r", title, playlist.name)
        return song

    def remove_song(self, title: str) -> Song:
        playlist = self.require_current()
        song = playlist.remove_by_title(title)
        logger.info("Removed %r from %r", song.title, playlist.name)
        return song
