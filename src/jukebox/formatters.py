"""Text formatting for the now-playing line and listings."""

from __future__ import annotations

from typing import Optional

from jukebox.history import HistoryEntry
from jukebox.playlist import Song

PROGRESS_BAR_WIDTH = 40


def format_time_ms(value: Optional[int]) -> str:
    if value is None:
        return "--:--"
    total_seconds = max(0, value // 1000)
    minutes, seconds = divmod(total_seconds, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def render_progress_bar(ratio: float, width: int = PROGRESS_BAR_WIDTH) -> str:
    """Render ``====>    `` style bar for a 0.0-1.0 ratio."""
    if width <= 0:
        return ""
    ratio = max(0.0, min(1.0, ratio))
    head = int(ratio * width)
    cells = []
    for col in range(width):
        if col == head:
            cells.append(">")
        elif col < head:
            cells.append("=")
        else:
            cells.append(" ")
    return "".join(cells)


def progress_line(
    elapsed_ms: int,
    total_ms: int,
    paused: bool,
    width: int = PROGRESS_BAR_WIDTH,
) -> str:
    ratio = elapsed_ms / total_ms if total_ms > 0 else 0.0
    bar = render_progress_bar(ratio, width)
    state = "(Paused)" if paused else ""
    return (
        f"[{format_time_ms(elapsed_ms)}] {bar} [{format_time_ms(total_ms)}] {state}"
    ).rstrip()


def song_label(song: Song | HistoryEntry) -> str:
    return f'"{song.title}" by {song.artist}'
