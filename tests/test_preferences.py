"""Tests for preference storage."""

from __future__ import annotations

from pathlib import Path

import pytest

from notchplay.preferences import (
    Preferences,
    load_preferences,
    load_preferences_with_notice,
    save_preferences,
)


def test_preferences_roundtrip(tmp_path) -> None:
    path = tmp_path / "nested" / "state.json"
    save_preferences(path, Preferences(seek_mode=True))
    assert load_preferences(path) == Preferences(seek_mode=True)
    assert list(path.parent.glob("*.tmp")) == []


def test_missing_file_defaults_without_notice(tmp_path) -> None:
    preferences, notice = load_preferences_with_notice(tmp_path / "state.json")
    assert preferences == Preferences()
    assert notice is None


def test_legacy_key_is_honored(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text('{"useSeekMode": true}', encoding="utf-8")
    assert load_preferences(path).seek_mode is True


def test_non_bool_value_defaults(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text('{"seek_mode": "yes"}', encoding="utf-8")
    assert load_preferences(path) == Preferences()


def test_corrupt_json_defaults_with_notice(tmp_path, caplog) -> None:
    path = tmp_path / "state.json"
    path.write_text("{bad json", encoding="utf-8")

    preferences, notice = load_preferences_with_notice(path)
    assert preferences == Preferences()
    assert notice is not None and "corrupt" in notice
    assert any("invalid JSON" in record.getMessage() for record in caplog.records)


def test_non_object_json_defaults_with_notice(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text("[true]", encoding="utf-8")
    preferences, notice = load_preferences_with_notice(path)
    assert preferences == Preferences()
    assert notice is not None


def test_save_replace_failure_keeps_previous_file(tmp_path, monkeypatch) -> None:
    path = tmp_path / "state.json"
    save_preferences(path, Preferences(seek_mode=False))

    def fail_replace(self: Path, target: Path) -> None:
        del target
        if self.suffix == ".tmp":
            raise OSError("replace failed")

    monkeypatch.setattr(Path, "replace", fail_replace)
    monkeypatch.setattr("notchplay.preferences.time.sleep", lambda _s: None)

    with pytest.raises(OSError):
        save_preferences(path, Preferences(seek_mode=True))

    assert load_preferences(path) == Preferences(seek_mode=False)
    assert list(tmp_path.glob("*.tmp")) == []
