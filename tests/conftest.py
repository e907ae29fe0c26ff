"""Shared pytest hooks for the Jukebox test suite."""

from __future__ import annotations

import os

import pytest


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Skip tests marked ``vlc`` (real libvlc runtime) when JUKEBOX_CI=1."""
    del config
    if os.environ.get("JUKEBOX_CI") != "1":
        return
    skip_libvlc = pytest.mark.skip(reason="JUKEBOX_CI=1: libvlc runtime not used")
    for item in items:
        if item.get_closest_marker("vlc") is not None:
            item.add_marker(skip_libvlc)
