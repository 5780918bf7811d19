"""Tests for MediaRemote loading outside macOS."""

from __future__ import annotations

import logging

import notchplay.services.media_remote as media_remote_module
from notchplay.services.now_playing_backend import UNAVAILABLE


def test_non_macos_platform_yields_unavailable(monkeypatch, caplog) -> None:
    monkeypatch.setattr(media_remote_module.sys, "platform", "linux")
    media_remote_module.load_media_remote.cache_clear()
    try:
        with caplog.at_level(logging.WARNING):
            capabilities = media_remote_module.load_media_remote()
    finally:
        media_remote_module.load_media_remote.cache_clear()
    assert capabilities is UNAVAILABLE
    assert capabilities.available is False
    assert any("only available on macOS" in r.getMessage() for r in caplog.records)


def test_unavailable_capabilities_have_no_entry_points() -> None:
    assert UNAVAILABLE.get_now_playing_info is None
    assert UNAVAILABLE.send_command is None
    assert UNAVAILABLE.set_elapsed_time is None
