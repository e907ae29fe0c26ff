"""Command-line interface for Jukebox."""

from __future__ import annotations

import argparse
from dataclasses import replace
import logging
import sys
import threading
from pathlib import Path
from types import TracebackType
from typing import Iterable, Optional, Tuple

from jukebox.config import load_config, resolve_library_dir, save_config
from jukebox.diagnostics import dump_threads, enable_faulthandler
from jukebox.errors import PersistenceError
from jukebox.library import LibraryState
from jukebox.logging_setup import init_logging, set_console_level
from jukebox.player_vlc import VlcPlayer
from jukebox.shell import MenuShell

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="jukebox", description="Console music library manager"
    )
    parser.add_argument(
        "--library",
        default=None,
        help="Directory holding playlists.txt and the playlist files",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level for this run (overrides JUKEBOX_LOG_LEVEL)",
    )
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    log_path = init_logging(level_name=args.log_level)
    enable_faulthandler(log_path)
    set_console_level(logging.WARNING)
    logger.info("App start")

    def excepthook(exc_type, exc, tb) -> None:
        logger.exception("Uncaught exception", exc_info=(exc_type, exc, tb))
        dump_threads("uncaught exception")

    sys.excepthook = excepthook

    def thread_hook(hook_args: threading.ExceptHookArgs) -> None:
        exc_value = hook_args.exc_value or RuntimeError("unknown")
        exc_info: Tuple[
            type[BaseException], BaseException, Optional[TracebackType]
        ] = (
            hook_args.exc_type,
            exc_value,
            hook_args.exc_traceback,
        )
        thread_name = hook_args.thread.name if hook_args.thread else "thread"
        logger.exception("Thread exception in %s", thread_name, exc_info=exc_info)
        dump_threads(f"thread exception in {thread_name}")

    threading.excepthook = thread_hook

    cfg = load_config()
    library_dir = Path(args.library) if args.library else resolve_library_dir(cfg)
    try:
        state = LibraryState.load(
            library_dir,
            history_size=cfg.history_size,
            last_playlist=cfg.last_playlist,
        )
    except PersistenceError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    shell = MenuShell(
        state,
        VlcPlayer,
        poll_interval=cfg.poll_interval_ms / 1000.0,
    )
    exit_code = shell.run()

    current = state.registry.current
    try:
        save_config(
            replace(cfg, last_playlist=current.name if current is not None else None)
        )
    except OSError:
        logger.exception("Failed to save config")
    logger.info("App exit code=%s", exit_code)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
