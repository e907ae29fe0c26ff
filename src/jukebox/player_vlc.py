"""VLC-backed audio device."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, cast
import threading

from jukebox.errors import DeviceError

logger = logging.getLogger(__name__)

vlc: Any | None = None
_VLC_IMPORT_ERROR: Optional[Exception] = None


def _load_vlc() -> None:
    global vlc
    global _VLC_IMPORT_ERROR
    if vlc is not None or _VLC_IMPORT_ERROR is not None:
        return
    try:
        import vlc as vlc_module  # type: ignore
    except Exception as exc:  # pragma: no cover - platform-dependent import
        vlc = None
        _VLC_IMPORT_ERROR = exc
    else:
        vlc = cast(Any, vlc_module)
        _VLC_IMPORT_ERROR = None


class VlcPlayer:
    """Thin wrapper around python-vlc's MediaPlayer."""

    def __init__(self) -> None:
        _load_vlc()
        if vlc is None:
            raise RuntimeError(
                "VLC backend is unavailable. Install VLC and the python-vlc package."
            ) from _VLC_IMPORT_ERROR
        self._instance = cast(Any, vlc).Instance()
        self._player = self._instance.media_player_new()
        self._media: Any = None
        self._current_media: Optional[str] = None
        self._end_reached = threading.Event()
        self._attach_end_reached_event()

    def _attach_end_reached_event(self) -> None:
        if vlc is None:
            return
        vlc_module = cast(Any, vlc)
        try:
            event_manager = self._player.event_manager()
            event_manager.event_attach(
                vlc_module.EventType.MediaPlayerEndReached, self._handle_end_reached
            )
        except Exception:
            logger.debug("End-reached event unavailable", exc_info=True)

    def _handle_end_reached(self, event: object) -> None:
        del event
        self._end_reached.set()

    @property
    def current_media(self) -> Optional[str]:
        """Return the current media path if loaded."""
        return self._current_media

    def consume_end_reached(self) -> bool:
        """Return True if an end-reached event fired since last check."""
        if self._end_reached.is_set():
            self._end_reached.clear()
            return True
        return False

    def signal_end_reached(self) -> None:
        """Manually flag end reached (for tests)."""
        self._end_reached.set()

    def open(self, path: str) -> None:
        """Load media for ``path``, raising DeviceError if it cannot be used."""
        self.close()
        if not Path(path).is_file():
            raise DeviceError(f"Could not open/play file: {path}")
        try:
            media = self._instance.media_new(path)
        except Exception as exc:
            raise DeviceError(f"Could not open/play file: {path}") from exc
        if media is None:
            raise DeviceError(f"Could not open/play file: {path}")
        try:
            media.parse()
        except Exception:
            logger.debug("Media parse failed for %s", path, exc_info=True)
        self._player.set_media(media)
        self._media = media
        self._current_media = path
        self._end_reached.clear()

    def play(self) -> None:
        """Start playback."""
        if self._player.play() == -1:
            raise DeviceError(f"Could not open/play file: {self._current_media}")

    def pause(self) -> None:
        """Pause playback."""
        self._player.set_pause(1)

    def resume(self) -> None:
        """Resume paused playback."""
        self._player.set_pause(0)

    def close(self) -> None:
        """Stop playback and release the current media."""
        if self._current_media is None:
            return
        try:
            self._player.stop()
        except Exception:
            logger.debug("Stop failed for %s", self._current_media, exc_info=True)
        self._media = None
        self._current_media = None
        self._end_reached.clear()

    def get_position_ms(self) -> Optional[int]:
        """Return the current playback position in ms, if available."""
        try:
            position = self._player.get_time()
        except Exception:
            return None
        if position is None or position < 0:
            return None
        return int(position)

    def get_length_ms(self) -> Optional[int]:
        """Return the media length in ms, if available."""
        try:
            length = self._player.get_length()
        except Exception:
            length = None
        if (length is None or length <= 0) and self._media is not None:
            try:
                length = self._media.get_duration()
            except Exception:
                return None
        if length is None or length < 0:
            return None
        return int(length)
