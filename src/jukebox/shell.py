"""Interactive menu shell."""

from __future__ import annotations

import logging
import random
from contextlib import AbstractContextManager
from typing import Any, Callable, Optional

from rich.console import Console
from rich.live import Live
from rich.table import Table
from rich.text import Text

from jukebox.diagnostics import dump_threads
from jukebox.errors import JukeboxError, PersistenceError
from jukebox.formatters import progress_line, song_label
from jukebox.keys import KeyReader
from jukebox.library import LibraryState
from jukebox.navigator import (
    AudioDevice,
    PlaybackNavigator,
    SessionResult,
)
from jukebox.playlist import Playlist, Song

logger = logging.getLogger(__name__)

CONTROLS_HINT = "[SPACE] Pause/Resume | [ENTER] Stop | [n] Next | [p] Previous"


DeviceFactory = Callable[[], AudioDevice]
ReaderFactory = Callable[[], AbstractContextManager[Any]]


class MenuShell:
    """Text menus for playlist, song and playback management."""

    def __init__(
        self,
        state: LibraryState,
        device_factory: DeviceFactory,
        *,
        console: Optional[Console] = None,
        ask: Optional[Callable[[str], str]] = None,
        reader_factory: ReaderFactory = KeyReader,
        poll_interval: float = 0.2,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.state = state
        self.console = console or Console(highlight=False)
        self._ask = ask or self.console.input
        self._device_factory = device_factory
        self._device: Optional[AudioDevice] = None
        self._reader_factory = reader_factory
        self._poll_interval = poll_interval
        self._rng = rng or random.Random()

    # ---- helpers -------------------------------------------------------

    def _info(self, message: str) -> None:
        self.console.print(Text(f"[INFO] {message}"))

    def _error(self, message: str) -> None:
        self.console.print(Text(f"[ERROR] {message}", style="red"))

    def _read(self, prompt: str) -> str:
        return self._ask(prompt)

    def _read_int(self, prompt: str) -> int:
        raw = self._read(prompt).strip()
        try:
            return int(raw)
        except ValueError:
            return -1

    def _pause(self) -> None:
        self._read("\nPress Enter to continue...")

    def _persist(self) -> None:
        try:
            failures = self.state.save()
        except PersistenceError as exc:
            self._error(str(exc))
            return
        for failure in failures:
            self._error(str(failure))

    def _header(self, title: str) -> None:
        self.console.print(f"\n========== {title} ==========", markup=False)
        current = self.state.registry.current
        if current is not None:
            self.console.print(
                f"   >>> Current Playlist: {current.name} <<<", markup=False
            )
        else:
            self.console.print("   >>> No Playlist Selected <<<", markup=False)

    def _choose(self, title: str, options: list[str]) -> int:
        self._header(title)
        for number, option in enumerate(options, start=1):
            self.console.print(f"{number}. {option}", markup=False)
        return self._read_int("Enter your choice: ")

    # ---- main loop -----------------------------------------------------

    def run(self) -> int:
        """Run menus until the user exits; return a process exit code."""
        try:
            self._main_menu()
        except EOFError:
            logger.info("Input closed; exiting")
        except MemoryError:
            self.console.print(
                "[FATAL] Memory allocation failed. Exiting.", markup=False
            )
            logger.critical("Out of memory", exc_info=True)
            dump_threads("out of memory")
            return 1
        self._exit()
        return 0

    def _main_menu(self) -> None:
        while True:
            self.console.clear()
            choice = self._choose(
                "MUSIC PLAYER",
                [
                    "Playlist Management",
                    "Song Management",
                    "Playback Controls",
                    "Exit",
                ],
            )
            if choice == 1:
                self.playlist_menu()
            elif choice == 2:
                self.song_menu()
            elif choice == 3:
                self.playback_menu()
            elif choice == 4:
                return
            else:
                self._error("Invalid choice.")

    def _exit(self) -> None:
        self._info("Saving all playlists and exiting...")
        self._persist()
        if self._device is not None:
            self._device.close()
        self.console.print("Goodbye!")

    def _dispatch(self, handlers: dict[int, Callable[[], object]], choice: int) -> None:
        handler = handlers.get(choice)
        if handler is None:
            self._error("Invalid choice.")
            return
        try:
            handler()
        except JukeboxError as exc:
            self._error(str(exc))

    # ---- playlist management -------------------------------------------

    def playlist_menu(self) -> None:
        choice = self._choose(
            "PLAYLIST MANAGEMENT",
            [
                "Create New Playlist",
                "Switch To Another Playlist",
                "Delete A Playlist",
                "View All Playlists",
                "Back to Main Menu",
            ],
        )
        if choice == 5:
            return
        self._dispatch(
            {
                1: self.create_playlist,
                2: self.switch_playlist,
                3: self.delete_playlist,
                4: self.view_playlists,
            },
            choice,
        )
        self._pause()

    def create_playlist(self) -> None:
        name = self._read("Enter new playlist name: ")
        playlist = self.state.registry.create(name)
        self._info(f'Playlist "{playlist.name}" created.')
        self._persist()

    def view_playlists(self) -> bool:
        entries = self.state.registry.list()
        if not entries:
            self._info("No playlists exist.")
            return False
        table = Table(title="Available Playlists", show_lines=False)
        table.add_column("#", justify="right")
        table.add_column("Playlist")
        table.add_column("Songs", justify="right")
        for number, (name, count) in enumerate(entries, start=1):
            table.add_row(str(number), Text(name), str(count))
        self.console.print(table)
        return True

    def switch_playlist(self) -> None:
        if not self.view_playlists():
            return
        number = self._read_int("Enter playlist number to switch to: ")
        playlist = self.state.registry.switch_to(number)
        self._info(f'Switched to playlist "{playlist.name}".')

    def delete_playlist(self) -> None:
        if not self.view_playlists():
            return
        number = self._read_int("Enter playlist number to delete: ")
        playlist = self.state.registry.delete(number)
        self._info(f'Playlist "{playlist.name}" deleted.')
        self._persist()

    # ---- song management -----------------------------------------------

    def song_menu(self) -> None:
        choice = self._choose(
            "SONG MANAGEMENT",
            [
                "Add Song to Current Playlist",
                "Remove Song from Current Playlist",
                "Display Songs in Current Playlist",
                "Search for a Song",
                "Back to Main Menu",
            ],
        )
        if choice == 5:
            return
        self._dispatch(
            {
                1: self.add_song,
                2: self.remove_song,
                3: self.display_songs,
                4: self.search_songs,
            },
            choice,
        )
        self._pause()

    def add_song(self) -> None:
        playlist = self.state.require_current()
        title = self._read("Enter song title: ")
        artist = self._read("Enter song artist: ")
        file_path = self._read("Enter song file path: ")
        self.state.add_song(title, artist, file_path)
        self._info(f'Song "{title}" added to "{playlist.name}".')
        self._persist()

    def remove_song(self) -> None:
        playlist = self.state.require_current()
        if not self.display_songs():
            return
        title = self._read("Enter the exact title of the song to remove: ")
        song = self.state.remove_song(title)
        self._info(f'Song "{song.title}" removed from "{playlist.name}".')
        self._persist()

    def display_songs(self) -> bool:
        playlist = self.state.require_current()
        if playlist.is_empty():
            self._info(f'Playlist "{playlist.name}" is empty.')
            return False
        self.console.print(f"\n--- Songs in: {playlist.name} ---", markup=False)
        for number, song in enumerate(playlist, start=1):
            self.console.print(f"{number}. {song_label(song)}", markup=False)
        return True

    def search_songs(self) -> None:
        playlist = self.state.require_current()
        query = self._read("Enter search query (case-insensitive): ")
        self.console.print(
            f'\n--- Search Results in "{playlist.name}" ---', markup=False
        )
        found = False
        for title, artist in playlist.find(query):
            self.console.print(f'- "{title}" by {artist}', markup=False)
            found = True
        if not found:
            self.console.print("No songs found matching query.")

    # ---- playback ------------------------------------------------------

    def playback_menu(self) -> None:
        choice = self._choose(
            "PLAYBACK CONTROLS",
            [
                "Play Current Playlist",
                "Play a Specific Song",
                "Shuffle and Play Current Playlist",
                "Display Playback History",
                "Back to Main Menu",
            ],
        )
        if choice == 5:
            return
        self._dispatch(
            {
                1: self.play_playlist,
                2: self.play_specific_song,
                3: self.shuffle_and_play,
                4: self.display_history,
            },
            choice,
        )
        self._pause()

    def _playable(self) -> Optional[Playlist]:
        playlist = self.state.registry.current
        if playlist is None or playlist.is_empty():
            self._info("Playlist is empty or not selected.")
            return None
        return playlist

    def _ensure_device(self) -> Optional[AudioDevice]:
        if self._device is None:
            try:
                self._device = self._device_factory()
            except RuntimeError as exc:
                self._error(str(exc))
                return None
        return self._device

    def _run_session(
        self, run: Callable[[PlaybackNavigator], SessionResult]
    ) -> Optional[SessionResult]:
        device = self._ensure_device()
        if device is None:
            return None
        with self._reader_factory() as reader:
            with Live(
                console=self.console, auto_refresh=False, transient=True
            ) as live:

                def on_progress(
                    song: Song, elapsed_ms: int, total_ms: int, paused: bool
                ) -> None:
                    live.update(
                        Text(progress_line(elapsed_ms, total_ms, paused)),
                        refresh=True,
                    )

                def on_track_start(song: Song) -> None:
                    self.console.print(
                        f"\nNow Playing: {song_label(song)}", markup=False
                    )
                    self.console.print(CONTROLS_HINT, markup=False)

                def on_track_error(song: Song, exc: JukeboxError) -> None:
                    self._error(f"{exc} ({song.file_path})")

                navigator = PlaybackNavigator(
                    device,
                    self.state.history,
                    reader.poll_signal,
                    poll_interval=self._poll_interval,
                    on_progress=on_progress,
                    on_track_start=on_track_start,
                    on_track_error=on_track_error,
                )
                result = run(navigator)
        if result is SessionResult.STOPPED:
            self._info("Playback stopped.")
        return result

    def play_playlist(self) -> None:
        playlist = self._playable()
        if playlist is None:
            return
        result = self._run_session(lambda nav: nav.play_playlist(playlist))
        if result is SessionResult.EXHAUSTED:
            self._info(f'Finished playing playlist "{playlist.name}".')

    def play_specific_song(self) -> None:
        playlist = self._playable()
        if playlist is None:
            return
        self.display_songs()
        number = self._read_int("Enter song number to play: ")
        playlist.song_at(number - 1)
        self._run_session(lambda nav: nav.play_from(playlist, number))

    def shuffle_and_play(self) -> None:
        playlist = self._playable()
        if playlist is None:
            return
        self._info(f'Shuffling and playing playlist "{playlist.name}".')
        result = self._run_session(lambda nav: nav.play_shuffled(playlist, self._rng))
        if result is not None:
            self._info("Shuffle play finished.")

    def display_history(self) -> None:
        self.console.print(
            "\n--- Playback History (Most Recent First) ---", markup=False
        )
        count = 0
        for count, entry in enumerate(self.state.history.most_recent_first(), start=1):
            self.console.print(f"{count}. {song_label(entry)}", markup=False)
        if count == 0:
            self.console.print("No songs have been played yet.")
