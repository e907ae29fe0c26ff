"""Song and playlist modeling for Jukebox."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, Iterator, Optional

from jukebox.errors import IndexOutOfRange, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MAX_FIELD_BYTES = 255
MAX_PLAYLIST_SIZE = 100
PLAYLIST_FILE_EXTENSION = ".txt"

# Everything str.splitlines() treats as a line boundary.
LINE_BREAK_CHARS = frozenset("\n\r\x0b\x0c\x1c\x1d\x1e\x85\u2028\u2029")


@dataclass(frozen=True)
class Song:
    """A single song entry."""

    title: str
    artist: str
    file_path: str


def _fold(text: str) -> str:
    return text.casefold()


def has_line_break(text: str) -> bool:
    return any(char in LINE_BREAK_CHARS for char in text)


def check_field(label: str, value: str, *, required: bool = False) -> str:
    """Validate one text field and return it unchanged."""
    if required and not value.strip():
        raise ValidationError(f"{label} cannot be empty.")
    if has_line_break(value):
        raise ValidationError(f"{label} cannot contain line breaks.")
    if "\x00" in value:
        raise ValidationError(f"{label} cannot contain NUL characters.")
    if len(value.encode("utf-8")) > MAX_FIELD_BYTES:
        raise ValidationError(f"{label} is longer than {MAX_FIELD_BYTES} bytes.")
    return value


class Playlist:
    """Ordered, bounded collection of songs owned by one named playlist."""

    def __init__(
        self,
        name: str,
        songs: Iterable[Song] = (),
        max_size: int = MAX_PLAYLIST_SIZE,
    ) -> None:
        self.name = name
        self.max_size = max_size
        self._songs: list[Song] = []
        for song in songs:
            self.append(song.title, song.artist, song.file_path)

    @property
    def filename(self) -> str:
        """Name of the backing file for this playlist."""
        return f"{self.name}{PLAYLIST_FILE_EXTENSION}"

    @property
    def songs(self) -> list[Song]:
        return list(self._songs)

    def __len__(self) -> int:
        return len(self._songs)

    def __iter__(self) -> Iterator[Song]:
        return iter(list(self._songs))

    def __repr__(self) -> str:
        return f"Playlist(name={self.name!r}, songs={len(self._songs)})"

    def is_empty(self) -> bool:
        return not self._songs

    def is_full(self) -> bool:
        return len(self._songs) >= self.max_size

    def append(self, title: str, artist: str, file_path: str) -> Optional[Song]:
        """Add a song at the tail.

        Returns the new song, or None when the playlist is already full.
        Field problems raise ValidationError before anything is stored.
        """
        check_field("Title", title, required=True)
        check_field("Artist", artist)
        check_field("File path", file_path)
        if self.is_full():
            logger.debug("Playlist %r is full; dropped %r", self.name, title)
            return None
        song = Song(title=title, artist=artist, file_path=file_path)
        self._songs.append(song)
        return song

    def _index_of(self, title: str) -> int:
        wanted = _fold(title)
        for index, song in enumerate(self._songs):
            if _fold(song.title) == wanted:
                return index
        return -1

    def get_by_title(self, title: str) -> Optional[Song]:
        index = self._index_of(title)
        if index < 0:
            return None
        return self._songs[index]

    def remove_by_title(self, title: str) -> Song:
        """Remove the first song whose title matches, ignoring case."""
        index = self._index_of(title)
        if index < 0:
            raise NotFoundError(f'Song "{title}" not found.')
        return self._songs.pop(index)

    def song_at(self, index: int) -> Song:
        if index < 0 or index >= len(self._songs):
            raise IndexOutOfRange(f"No song at position {index + 1}.")
        return self._songs[index]

    def find(
        self, query: str, also_match_artist: bool = True
    ) -> Iterator[tuple[str, str]]:
        """Yield (title, artist) for songs containing ``query``, ignoring case."""
        needle = _fold(query)
        for song in list(self._songs):
            if needle in _fold(song.title) or (
                also_match_artist and needle in _fold(song.artist)
            ):
                yield song.title, song.artist
