"""Nox sessions for Jukebox."""

from __future__ import annotations

import nox

nox.options.sessions = ["lint", "tests", "typecheck"]
nox.options.error_on_missing_interpreters = False

PACKAGE = "src/jukebox"


@nox.session
def lint(session: nox.Session) -> None:
    """Run ruff linting and formatting checks."""
    session.install("ruff")
    session.run("ruff", "check", "src", "tests", "noxfile.py")
    session.run("ruff", "format", "--check", "src", "tests", "noxfile.py")


@nox.session
def tests(session: nox.Session) -> None:
    """Run the suite without touching a real libvlc install."""
    session.install("-e", ".[dev]")
    session.env["JUKEBOX_CI"] = "1"
    session.run("pytest", "-q", *session.posargs)


@nox.session
def vlc(session: nox.Session) -> None:
    """Run only the tests that drive the real libvlc runtime."""
    session.install("-e", ".[dev]")
    session.run("pytest", "-q", "-m", "vlc", *session.posargs)


@nox.session
def typecheck(session: nox.Session) -> None:
    """Run mypy with the settings from pyproject.toml."""
    session.install("-e", ".", "mypy")
    session.run("mypy", PACKAGE)


@nox.session
def coverage(session: nox.Session) -> None:
    """Report coverage for the jukebox package."""
    session.install("-e", ".[dev]", "coverage")
    session.env["JUKEBOX_CI"] = "1"
    session.run("coverage", "run", "--source=jukebox", "-m", "pytest", "-q")
    # The shell's live terminal paths and player_vlc's libvlc calls stay
    # uncovered without a real terminal and runtime.
    session.run("coverage", "report", "-m", "--fail-under=85")
