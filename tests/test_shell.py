"""Tests for the interactive menu shell."""

from __future__ import annotations

import io
import random
from pathlib import Path
from typing import Iterable, Optional

import pytest
from rich.console import Console

from jukebox.library import LibraryState
from jukebox.navigator import ControlSignal
from jukebox.playlist_io import MASTER_INDEX_NAME
from jukebox.shell import MenuShell


class ScriptedInput:
    def __init__(self, answers: Iterable[str]) -> None:
        self.answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


class FakeReader:
    def __init__(self, signals: Iterable[Optional[ControlSignal]] = ()) -> None:
        self.signals = list(signals)

    def __enter__(self) -> FakeReader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None

    def poll_signal(self) -> Optional[ControlSignal]:
        if not self.signals:
            return None
        return self.signals.pop(0)


class InstantDevice:
    """Every track is 1 second long and reaches its end on the first poll."""

    def __init__(self, failing: Iterable[str] = ()) -> None:
        self.failing = set(failing)
        self.opened: list[str] = []
        self.closed = 0
        self.path: Optional[str] = None

    def open(self, path: str) -> None:
        self.opened.append(path)
        if path in self.failing:
            from jukebox.errors import DeviceError

            raise DeviceError(f"Could not open/play file: {path}")
        self.path = path

    def play(self) -> None:
        pass

    def pause(self) -> None:
        pass

    def resume(self) -> None:
        pass

    def close(self) -> None:
        self.closed += 1
        self.path = None

    def get_position_ms(self) -> Optional[int]:
        return 1000 if self.path else None

    def get_length_ms(self) -> Optional[int]:
        return 1000 if self.path else None

    def consume_end_reached(self) -> bool:
        return False


def _shell(
    state: LibraryState,
    answers: Iterable[str] = (),
    *,
    device: Optional[InstantDevice] = None,
    signals: Iterable[Optional[ControlSignal]] = (),
) -> tuple[MenuShell, ScriptedInput, io.StringIO]:
    output = io.StringIO()
    console = Console(file=output, width=200, color_system=None)
    scripted = ScriptedInput(answers)
    used_device = device or InstantDevice()
    shell = MenuShell(
        state,
        lambda: used_device,
        console=console,
        ask=scripted,
        reader_factory=lambda: FakeReader(signals),
        poll_interval=0,
        rng=random.Random(3),
    )
    return shell, scripted, output


def _state_with_songs(tmp_path: Path) -> LibraryState:
    state = LibraryState.load(tmp_path)
    state.registry.create("Mix")
    state.add_song("Alpha", "Band A", "a.mp3")
    state.add_song("Beta", "Band B", "b.mp3")
    state.add_song("Gamma", "Band C", "c.mp3")
    return state


def test_create_playlist_through_menus_and_exit(tmp_path: Path) -> None:
    state = LibraryState.load(tmp_path)
    shell, _, output = _shell(state, ["1", "1", "Favorites", "", "4"])
    assert shell.run() == 0
    text = output.getvalue()
    assert 'Playlist "Favorites" created.' in text
    assert "Goodbye!" in text
    assert (tmp_path / MASTER_INDEX_NAME).read_text(encoding="utf-8") == (
        "Favorites\n"
    )
    assert (tmp_path / "Favorites.txt").exists()


def test_duplicate_playlist_reports_error(tmp_path: Path) -> None:
    state = LibraryState.load(tmp_path)
    state.registry.create("Favorites")
    shell, _, output = _shell(state, ["favorites"])
    shell._dispatch({1: shell.create_playlist}, 1)
    assert "A playlist with this name already exists." in output.getvalue()
    assert len(state.registry) == 1


def test_invalid_menu_choice(tmp_path: Path) -> None:
    shell, _, output = _shell(LibraryState.load(tmp_path), ["9", "4"])
    shell.run()
    assert "[ERROR] Invalid choice." in output.getvalue()


def test_end_of_input_exits_and_saves(tmp_path: Path) -> None:
    state = LibraryState.load(tmp_path)
    state.registry.create("Mix")
    shell, _, _ = _shell(state, [])
    assert shell.run() == 0
    assert (tmp_path / MASTER_INDEX_NAME).exists()


def test_header_shows_current_playlist(tmp_path: Path) -> None:
    state = LibraryState.load(tmp_path)
    shell, _, output = _shell(state, ["4"])
    shell.run()
    assert "No Playlist Selected" in output.getvalue()
    state.registry.create("Road Trip")
    shell, _, output = _shell(state, ["4"])
    shell.run()
    assert ">>> Current Playlist: Road Trip <<<" in output.getvalue()


def test_switch_and_delete_playlists(tmp_path: Path) -> None:
    state = LibraryState.load(tmp_path)
    state.registry.create("One")
    state.registry.create("Two")
    shell, _, output = _shell(state, ["1", "1", "1"])
    shell.switch_playlist()
    assert state.registry.current is not None
    assert state.registry.current.name == "One"
    shell.delete_playlist()
    shell.delete_playlist()
    assert len(state.registry) == 0
    text = output.getvalue()
    assert 'Switched to playlist "One".' in text
    assert 'Playlist "One" deleted.' in text


def test_switch_with_bad_number(tmp_path: Path) -> None:
    state = LibraryState.load(tmp_path)
    state.registry.create("One")
    shell, _, output = _shell(state, ["7"])
    shell._dispatch({1: shell.switch_playlist}, 1)
    assert "Invalid playlist number." in output.getvalue()


def test_add_song_through_menu_persists(tmp_path: Path) -> None:
    state = LibraryState.load(tmp_path)
    state.registry.create("Mix")
    shell, _, output = _shell(state, ["1", "Song", "Band", "song.mp3", ""])
    shell.song_menu()
    assert 'Song "Song" added to "Mix".' in output.getvalue()
    assert (tmp_path / "Mix.txt").read_text(encoding="utf-8") == (
        "Song\nBand\nsong.mp3\n"
    )


def test_add_song_requires_all_fields(tmp_path: Path) -> None:
    state = LibraryState.load(tmp_path)
    state.registry.create("Mix")
    shell, _, output = _shell(state, ["1", "Song", "", "song.mp3", ""])
    shell.song_menu()
    assert "[ERROR] Artist cannot be empty." in output.getvalue()
    assert len(state.require_current()) == 0


def test_add_song_without_playlist(tmp_path: Path) -> None:
    shell, scripted, output = _shell(LibraryState.load(tmp_path), ["1", ""])
    shell.song_menu()
    assert "Please create or switch to a playlist first." in output.getvalue()
    assert "Enter song title: " not in scripted.prompts


def test_remove_song(tmp_path: Path) -> None:
    state = _state_with_songs(tmp_path)
    shell, _, output = _shell(state, ["beta", "missing"])
    shell.remove_song()
    assert [song.title for song in state.require_current()] == ["Alpha", "Gamma"]
    shell._dispatch({1: shell.remove_song}, 1)
    text = output.getvalue()
    assert 'Song "Beta" removed from "Mix".' in text
    assert 'Song "missing" not found.' in text


def test_display_and_search(tmp_path: Path) -> None:
    state = _state_with_songs(tmp_path)
    shell, _, output = _shell(state, ["band b", "zzz"])
    shell.display_songs()
    shell.search_songs()
    shell.search_songs()
    text = output.getvalue()
    assert '2. "Beta" by Band B' in text
    assert '- "Beta" by Band B' in text
    assert '- "Alpha"' not in text
    assert "No songs found matching query." in text


def test_play_playlist_records_history(tmp_path: Path) -> None:
    state = _state_with_songs(tmp_path)
    device = InstantDevice()
    shell, _, output = _shell(state, device=device)
    shell.play_playlist()
    assert device.opened == ["a.mp3", "b.mp3", "c.mp3"]
    assert 'Finished playing playlist "Mix".' in output.getvalue()
    shell.display_history()
    text = output.getvalue()
    assert '1. "Gamma" by Band C' in text
    assert '3. "Alpha" by Band A' in text


def test_play_stopped_by_signal(tmp_path: Path) -> None:
    state = _state_with_songs(tmp_path)
    device = InstantDevice()
    shell, _, output = _shell(state, device=device, signals=[ControlSignal.STOP])
    shell.play_playlist()
    assert device.opened == ["a.mp3"]
    assert "Playback stopped." in output.getvalue()


def test_play_skips_unplayable_track(tmp_path: Path) -> None:
    state = _state_with_songs(tmp_path)
    device = InstantDevice(failing={"b.mp3"})
    shell, _, output = _shell(state, device=device)
    shell.play_playlist()
    assert "Could not open/play file: b.mp3" in output.getvalue()
    assert [entry.title for entry in state.history.most_recent_first()] == [
        "Gamma",
        "Alpha",
    ]


def test_play_specific_song(tmp_path: Path) -> None:
    state = _state_with_songs(tmp_path)
    device = InstantDevice()
    shell, _, output = _shell(state, ["2", "9"], device=device)
    shell.play_specific_song()
    assert device.opened == ["b.mp3", "c.mp3"]
    shell._dispatch({1: shell.play_specific_song}, 1)
    assert "No song at position 9." in output.getvalue()


def test_shuffle_and_play_keeps_store_order(tmp_path: Path) -> None:
    state = _state_with_songs(tmp_path)
    device = InstantDevice()
    shell, _, output = _shell(state, device=device)
    shell.shuffle_and_play()
    assert sorted(device.opened) == ["a.mp3", "b.mp3", "c.mp3"]
    assert [song.title for song in state.require_current()] == [
        "Alpha",
        "Beta",
        "Gamma",
    ]
    assert "Shuffle play finished." in output.getvalue()


def test_play_empty_playlist(tmp_path: Path) -> None:
    state = LibraryState.load(tmp_path)
    state.registry.create("Empty")
    shell, _, output = _shell(state)
    shell.play_playlist()
    assert "Playlist is empty or not selected." in output.getvalue()


def test_missing_device_is_reported(tmp_path: Path) -> None:
    state = _state_with_songs(tmp_path)
    output = io.StringIO()

    def no_device():
        raise RuntimeError("VLC backend is unavailable.")

    shell = MenuShell(
        state,
        no_device,
        console=Console(file=output, width=200, color_system=None),
        ask=ScriptedInput([]),
        reader_factory=FakeReader,
    )
    shell.play_playlist()
    assert "VLC backend is unavailable." in output.getvalue()


def test_empty_history_message(tmp_path: Path) -> None:
    shell, _, output = _shell(LibraryState.load(tmp_path))
    shell.display_history()
    assert "No songs have been played yet." in output.getvalue()


def test_memory_error_is_fatal(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    state = LibraryState.load(tmp_path)
    state.registry.create("Mix")

    def out_of_memory(*_args) -> None:
        raise MemoryError

    monkeypatch.setattr(state, "add_song", out_of_memory)
    shell, _, output = _shell(state, ["2", "1", "Song", "Band", "song.mp3"])
    assert shell.run() == 1
    assert "[FATAL] Memory allocation failed. Exiting." in output.getvalue()
    assert not (tmp_path / MASTER_INDEX_NAME).exists()


@pytest.mark.parametrize("name", ["bad\x00name", "playlists"])
def test_unusable_playlist_name_is_reported(tmp_path: Path, name: str) -> None:
    state = LibraryState.load(tmp_path)
    shell, _, output = _shell(state, [name])
    shell._dispatch({1: shell.create_playlist}, 1)
    assert "[ERROR] " in output.getvalue()
    assert len(state.registry) == 0
    assert not (tmp_path / MASTER_INDEX_NAME).exists()
