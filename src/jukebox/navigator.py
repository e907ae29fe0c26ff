"""Playback navigation: per-song state machine and the multi-song loop."""

from __future__ import annotations

from enum import Enum
import logging
import random
import time
from typing import Callable, Optional, Protocol, Sequence

from jukebox.errors import DeviceError, UnsupportedFormat
from jukebox.history import PlaybackHistory
from jukebox.playlist import Playlist, Song

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.2


class ControlSignal(Enum):
    """Playback commands, independent of how the user typed them."""

    TOGGLE_PAUSE = "toggle_pause"
    STOP = "stop"
    SKIP_NEXT = "skip_next"
    SKIP_PREVIOUS = "skip_previous"


class NavigatorState(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


class PlaybackAction(Enum):
    """How a single song session ended."""

    STOPPED = "stopped"
    NEXT = "next"
    PREVIOUS = "previous"
    FINISHED = "finished"
    TRACK_ERROR = "track_error"


class SessionResult(Enum):
    """How a multi-song session ended."""

    STOPPED = "stopped"
    EXHAUSTED = "exhausted"


class AudioDevice(Protocol):
    def open(self, path: str) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def resume(self) -> None: ...

    def close(self) -> None: ...

    def get_position_ms(self) -> Optional[int]: ...

    def get_length_ms(self) -> Optional[int]: ...

    def consume_end_reached(self) -> bool: ...


SignalSource = Callable[[], Optional[ControlSignal]]
ProgressCallback = Callable[[Song, int, int, bool], None]
SongCallback = Callable[[Song], None]
ErrorCallback = Callable[[Song, DeviceError], None]


def shuffle_order(songs: Sequence[Song], rng: random.Random) -> list[Song]:
    """Return a Fisher-Yates permutation of ``songs`` without touching the input."""
    order = list(songs)
    for i in range(len(order) - 1, 0, -1):
        j = rng.randint(0, i)
        order[i], order[j] = order[j], order[i]
    return order


class PlaybackNavigator:
    """Drives the playback device for one song at a time.

    Each poll samples at most one control signal, reads the device position and
    reports progress; ``play_song`` sleeps once between polls.
    """

    def __init__(
        self,
        device: AudioDevice,
        history: PlaybackHistory,
        signals: SignalSource,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        on_progress: Optional[ProgressCallback] = None,
        on_track_start: Optional[SongCallback] = None,
        on_track_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._device = device
        self._history = history
        self._signals = signals
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._on_progress = on_progress
        self._on_track_start = on_track_start
        self._on_track_error = on_track_error
        self.state = NavigatorState.IDLE
        self.current_song: Optional[Song] = None
        self.elapsed_ms = 0
        self.total_ms = 0

    @property
    def paused(self) -> bool:
        return self.state is NavigatorState.PAUSED

    def _reset(self) -> None:
        self.state = NavigatorState.IDLE
        self.current_song = None
        self.elapsed_ms = 0
        self.total_ms = 0

    def _end(self, action: PlaybackAction) -> PlaybackAction:
        self._device.close()
        logger.debug("Song session ended: %s", action.value)
        self._reset()
        return action

    def start(self, song: Song) -> Optional[PlaybackAction]:
        """Open and start ``song``; return TRACK_ERROR if the device refuses it."""
        if self.state is not NavigatorState.IDLE:
            self._end(PlaybackAction.STOPPED)
        try:
            self._device.open(song.file_path)
            total = self._device.get_length_ms()
            if total is None or total <= 0:
                raise UnsupportedFormat("Unsupported format or zero-length file.")
            self._device.play()
        except DeviceError as exc:
            logger.warning("Cannot play %r (%s): %s", song.title, song.file_path, exc)
            self._device.close()
            if self._on_track_error is not None:
                self._on_track_error(song, exc)
            return PlaybackAction.TRACK_ERROR
        self.state = NavigatorState.PLAYING
        self.current_song = song
        self.elapsed_ms = 0
        self.total_ms = total
        self._history.record(song)
        logger.info("Now playing %r by %r", song.title, song.artist)
        if self._on_track_start is not None:
            self._on_track_start(song)
        return None

    def handle(self, signal: ControlSignal) -> Optional[PlaybackAction]:
        """Apply a control signal; return an action if the song session ended."""
        if self.state is NavigatorState.IDLE:
            return None
        if signal is ControlSignal.TOGGLE_PAUSE:
            if self.state is NavigatorState.PLAYING:
                self._device.pause()
                self.state = NavigatorState.PAUSED
            else:
                self._device.resume()
                self.state = NavigatorState.PLAYING
            return None
        if signal is ControlSignal.STOP:
            return self._end(PlaybackAction.STOPPED)
        if signal is ControlSignal.SKIP_NEXT:
            return self._end(PlaybackAction.NEXT)
        return self._end(PlaybackAction.PREVIOUS)

    def poll(self) -> Optional[PlaybackAction]:
        """Run one polling iteration without sleeping."""
        if self.state is NavigatorState.IDLE or self.current_song is None:
            return None
        signal = self._signals()
        if signal is not None:
            action = self.handle(signal)
            if action is not None:
                return action
        position = self._device.get_position_ms()
        if position is not None:
            self.elapsed_ms = position
        length = self._device.get_length_ms()
        if length is not None and length > 0:
            self.total_ms = length
        if self.state is NavigatorState.PLAYING and (
            self._device.consume_end_reached() or self.elapsed_ms >= self.total_ms
        ):
            return self._end(PlaybackAction.FINISHED)
        if self._on_progress is not None:
            self._on_progress(
                self.current_song, self.elapsed_ms, self.total_ms, self.paused
            )
        return None

    def play_song(self, song: Song) -> PlaybackAction:
        """Play ``song`` until a control signal or completion ends it."""
        action = self.start(song)
        while action is None:
            action = self.poll()
            if action is None:
                self._sleep(self.poll_interval)
        return action

    def play_sequence(
        self,
        songs: Sequence[Song],
        start: int = 0,
        *,
        allow_previous: bool = True,
    ) -> SessionResult:
        """Play ``songs`` from ``start`` until stopped or past the last song."""
        index = start
        while 0 <= index < len(songs):
            action = self.play_song(songs[index])
            if action is PlaybackAction.STOPPED:
                logger.info("Playback stopped")
                return SessionResult.STOPPED
            if action is PlaybackAction.PREVIOUS and allow_previous:
                index = max(0, index - 1)
            else:
                index += 1
        return SessionResult.EXHAUSTED

    def play_playlist(self, playlist: Playlist) -> SessionResult:
        return self.play_sequence(playlist.songs)

    def play_from(self, playlist: Playlist, number: int) -> SessionResult:
        """Play ``playlist`` starting at 1-based song ``number``."""
        playlist.song_at(number - 1)
        return self.play_sequence(playlist.songs, number - 1)

    def play_shuffled(
        self, playlist: Playlist, rng: Optional[random.Random] = None
    ) -> SessionResult:
        order = shuffle_order(playlist.songs, rng or random.Random())
        logger.info("Shuffling %d songs from %r", len(order), playlist.name)
        return self.play_sequence(order, allow_previous=False)
