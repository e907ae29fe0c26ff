"""Bounded log of recently played songs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from jukebox.playlist import Song

HISTORY_SIZE = 20


@dataclass(frozen=True)
class HistoryEntry:
    """Snapshot of a song's display fields at the time it started playing."""

    title: str
    artist: str
    file_path: str

    @classmethod
    def from_song(cls, song: Song) -> HistoryEntry:
        return cls(title=song.title, artist=song.artist, file_path=song.file_path)


class PlaybackHistory:
    """Fixed-size ring buffer that overwrites the oldest entry when full."""

    def __init__(self, capacity: int = HISTORY_SIZE) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self._slots: list[Optional[HistoryEntry]] = [None] * capacity
        self._cursor = 0

    @property
    def capacity(self) -> int:
        return len(self._slots)

    def __len__(self) -> int:
        return sum(1 for slot in self._slots if slot is not None)

    def record(self, song: Song) -> None:
        self._slots[self._cursor] = HistoryEntry.from_song(song)
        self._cursor = (self._cursor + 1) % self.capacity

    def most_recent_first(self) -> Iterator[HistoryEntry]:
        capacity = self.capacity
        for step in range(1, capacity + 1):
            entry = self._slots[(self._cursor - step) % capacity]
            if entry is not None:
                yield entry

    def clear(self) -> None:
        self._slots = [None] * self.capacity
        self._cursor = 0
