"""Non-blocking keyboard input and key to control signal mapping."""

from __future__ import annotations

import os
import sys
from types import TracebackType
from typing import Any, Optional, TextIO

from jukebox.navigator import ControlSignal

_KEY_SIGNALS = {
    " ": ControlSignal.TOGGLE_PAUSE,
    "\r": ControlSignal.STOP,
    "\n": ControlSignal.STOP,
    "n": ControlSignal.SKIP_NEXT,
    "p": ControlSignal.SKIP_PREVIOUS,
}


def signal_for_key(key: str) -> Optional[ControlSignal]:
    """Map a raw key to a control signal, ignoring case."""
    if not key:
        return None
    return _KEY_SIGNALS.get(key.lower())


class KeyReader:
    """Reads single keys without blocking.

    On POSIX the terminal is switched to cbreak mode for the lifetime of the
    context manager and restored afterwards.
    """

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream or sys.stdin
        self._saved: Any = None

    def __enter__(self) -> KeyReader:
        if os.name != "nt" and self._stream.isatty():
            import termios
            import tty

            fd = self._stream.fileno()
            self._saved = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if self._saved is None:
            return
        import termios

        termios.tcsetattr(self._stream.fileno(), termios.TCSADRAIN, self._saved)
        self._saved = None

    def key_available(self) -> bool:
        if os.name == "nt":
            import msvcrt

            return bool(msvcrt.kbhit())  # type: ignore[attr-defined]
        import select

        readable, _, _ = select.select([self._stream], [], [], 0)
        return bool(readable)

    def read_key(self) -> str:
        if os.name == "nt":
            import msvcrt

            return msvcrt.getwch()  # type: ignore[attr-defined]
        # Bypass the text wrapper so select() sees every pending byte.
        data = os.read(self._stream.fileno(), 1)
        return data.decode("utf-8", errors="ignore")

    def poll_signal(self) -> Optional[ControlSignal]:
        """Return the signal for a pending key, if any."""
        if not self.key_available():
            return None
        return signal_for_key(self.read_key())
