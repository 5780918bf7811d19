"""Tests for AppleScript rendering and osascript process handling."""

from __future__ import annotations

import asyncio
import subprocess
import types

import notchplay.services.automation as automation_module
from notchplay.services.automation import (
    AppLauncher,
    AutomationScript,
    OsascriptRunner,
    chrome_seek_script,
)


def _run(coro):
    return asyncio.run(coro)


def test_chrome_seek_script_targets_youtube_tabs() -> None:
    source = chrome_seek_script(15).render()
    assert source.startswith('tell application "Google Chrome"')
    assert 'URL of aTab contains "youtube.com"' in source
    assert "document.querySelector('video')" in source
    assert "vid.currentTime += 15.0;" in source
    assert source.rstrip().endswith("end tell")


def test_render_escapes_double_quotes() -> None:
    script = AutomationScript("Safari", "example.com", 'alert("hi")')
    assert 'execute javascript "alert(\\"hi\\")"' in script.render()


def test_osascript_runner_passes_source_with_timeout(monkeypatch) -> None:
    calls: list[tuple[list[str], dict]] = []

    def fake_run(argv, **kwargs):
        calls.append((argv, kwargs))
        return types.SimpleNamespace(returncode=0, stdout="", stderr="")

    monkeypatch.setattr(automation_module.subprocess, "run", fake_run)
    result = _run(OsascriptRunner(timeout_s=2.5).run("return 1"))
    assert result.ok is True
    argv, kwargs = calls[0]
    assert argv == ["osascript", "-e", "return 1"]
    assert kwargs["timeout"] == 2.5
    assert kwargs["check"] is False


def test_osascript_nonzero_exit_reports_stderr(monkeypatch) -> None:
    monkeypatch.setattr(
        automation_module.subprocess,
        "run",
        lambda *args, **kwargs: types.SimpleNamespace(
            returncode=1,
            stdout="",
            stderr="execution error: Not authorized to send Apple events (-1743)\n",
        ),
    )
    result = _run(OsascriptRunner().run("return 1"))
    assert result.ok is False
    assert result.error == "execution error: Not authorized to send Apple events (-1743)"


def test_osascript_timeout_is_a_failure(monkeypatch) -> None:
    def fake_run(argv, **kwargs):
        raise subprocess.TimeoutExpired(argv, kwargs["timeout"])

    monkeypatch.setattr(automation_module.subprocess, "run", fake_run)
    result = _run(OsascriptRunner(timeout_s=1.0).run("delay 5"))
    assert result.ok is False
    assert "timed out" in (result.error or "")


def test_missing_binary_is_a_failure(monkeypatch) -> None:
    def fake_run(argv, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", argv[0])

    monkeypatch.setattr(automation_module.subprocess, "run", fake_run)
    result = _run(OsascriptRunner().run("return 1"))
    assert result.ok is False
    assert "launch failed" in (result.error or "")


def test_app_launcher_uses_open(monkeypatch) -> None:
    calls: list[list[str]] = []

    def fake_run(argv, **kwargs):
        calls.append(argv)
        return types.SimpleNamespace(returncode=0, stdout="", stderr="")

    monkeypatch.setattr(automation_module.subprocess, "run", fake_run)
    result = _run(AppLauncher().launch("Spotify"))
    assert result.ok is True
    assert calls == [["open", "-a", "Spotify"]]
