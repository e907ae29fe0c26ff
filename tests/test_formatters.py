"""Tests for now-playing text helpers."""

from __future__ import annotations

from jukebox.formatters import (
    format_time_ms,
    progress_line,
    render_progress_bar,
    song_label,
)
from jukebox.history import HistoryEntry
from jukebox.playlist import Song


def test_format_time_ms() -> None:
    assert format_time_ms(None) == "--:--"
    assert format_time_ms(0) == "00:00"
    assert format_time_ms(61_999) == "01:01"
    assert format_time_ms(3_725_000) == "01:02:05"
    assert format_time_ms(-500) == "00:00"


def test_render_progress_bar_positions_head() -> None:
    assert render_progress_bar(0.0, 5) == ">    "
    assert render_progress_bar(0.5, 4) == "==> "
    assert render_progress_bar(1.0, 4) == "===="
    assert render_progress_bar(2.0, 4) == "===="
    assert render_progress_bar(0.5, 0) == ""


def test_progress_line_shows_times_and_pause() -> None:
    line = progress_line(30_000, 120_000, paused=True, width=8)
    assert line == "[00:30] ==>      [02:00] (Paused)"
    assert progress_line(0, 0, paused=False, width=2) == "[00:00] >  [00:00]"


def test_song_label_for_song_and_history_entry() -> None:
    assert song_label(Song("Title", "Band", "x.mp3")) == '"Title" by Band'
    assert song_label(HistoryEntry("Old", "Group", "y.mp3")) == '"Old" by Group'
