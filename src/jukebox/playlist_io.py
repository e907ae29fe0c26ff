"""Playlist I/O helpers (master index plus one text file per playlist)."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from jukebox.errors import JukeboxError, PersistenceError
from jukebox.playlist import PLAYLIST_FILE_EXTENSION, Playlist
from jukebox.registry import MASTER_INDEX_STEM, MAX_PLAYLISTS, PlaylistRegistry

logger = logging.getLogger(__name__)

MASTER_INDEX_NAME = MASTER_INDEX_STEM + PLAYLIST_FILE_EXTENSION


def _write_lines(dest: Path, lines: list[str]) -> None:
    temp_path = dest.with_name(dest.name + ".tmp")
    temp_path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    os.replace(temp_path, dest)


def _read_lines(path: Path) -> list[str]:
    # Split on "\n" only so other Unicode line boundaries stay inside a field.
    lines = path.read_text(encoding="utf-8").split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


class PlaylistStorage:
    """Maps playlists to files inside a library directory."""

    def __init__(self, root: Path, max_playlists: int = MAX_PLAYLISTS) -> None:
        self.root = root
        self.max_playlists = max_playlists

    @property
    def master_path(self) -> Path:
        return self.root / MASTER_INDEX_NAME

    def path_for(self, playlist: Playlist) -> Path:
        return self.root / playlist.filename

    def load_all(self) -> PlaylistRegistry:
        """Rebuild the registry from disk, skipping what cannot be read."""
        registry = PlaylistRegistry(storage=self, max_playlists=self.max_playlists)
        try:
            names = _read_lines(self.master_path)
        except FileNotFoundError:
            logger.info("No master index at %s; starting empty", self.master_path)
            return registry
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(
                f"Could not read master playlist file: {exc}", self.master_path
            ) from exc
        for name in names:
            if not name.strip():
                continue
            if registry.is_full():
                logger.warning(
                    "Playlist limit of %d reached; ignoring %r and later entries",
                    registry.max_playlists,
                    name,
                )
                break
            playlist = Playlist(name)
            try:
                registry.add_loaded(playlist)
            except JukeboxError as exc:
                logger.warning("Skipping playlist %r from index: %s", name, exc)
                continue
            try:
                self.load_playlist(playlist)
            except PersistenceError as exc:
                logger.warning(
                    "Could not load data for playlist %r. The file may be missing "
                    "or corrupted: %s",
                    name,
                    exc,
                )
        registry.select_first()
        logger.info("Loaded %d playlists from %s", len(registry), self.root)
        return registry

    def load_playlist(self, playlist: Playlist) -> None:
        """Append the songs stored in the playlist's backing file."""
        path = self.path_for(playlist)
        try:
            lines = _read_lines(path)
        except (OSError, ValueError) as exc:
            raise PersistenceError(str(exc), path) from exc
        usable = len(lines) - len(lines) % 3
        if usable != len(lines):
            logger.warning("Ignoring incomplete trailing entry in %s", path)
        for start in range(0, usable, 3):
            title, artist, file_path = lines[start : start + 3]
            try:
                added = playlist.append(title, artist, file_path)
            except JukeboxError as exc:
                logger.warning("Skipping song in %s: %s", path, exc)
                continue
            if added is None:
                logger.warning(
                    "Playlist %r is full; ignoring remaining songs in %s",
                    playlist.name,
                    path,
                )
                break

    def save_playlist(self, playlist: Playlist) -> None:
        path = self.path_for(playlist)
        lines: list[str] = []
        for song in playlist:
            lines.extend((song.title, song.artist, song.file_path))
        try:
            _write_lines(path, lines)
        except (OSError, ValueError) as exc:
            raise PersistenceError(
                f"Could not save playlist {playlist.name!r}: {exc}", path
            ) from exc

    def save_all(self, registry: PlaylistRegistry) -> list[PersistenceError]:
        """Write the master index and every playlist file.

        Raises PersistenceError if the master index cannot be written. Failures
        for individual playlists are logged and returned.
        """
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            _write_lines(self.master_path, [playlist.name for playlist in registry])
        except (OSError, ValueError) as exc:
            logger.error("Could not save master playlist file %s", self.master_path)
            raise PersistenceError(
                f"Could not save master playlist file: {exc}", self.master_path
            ) from exc
        failures: list[PersistenceError] = []
        for playlist in registry:
            try:
                self.save_playlist(playlist)
            except PersistenceError as exc:
                logger.error("%s", exc)
                failures.append(exc)
        logger.info(
            "Saved %d playlists to %s (%d failed)",
            len(registry),
            self.root,
            len(failures),
        )
        return failures

    def delete_backing_file(self, playlist: Playlist) -> None:
        path = self.path_for(playlist)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except (OSError, ValueError) as exc:
            raise PersistenceError(
                f"Could not delete playlist file: {exc}", path
            ) from exc
