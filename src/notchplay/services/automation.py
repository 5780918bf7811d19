"""AppleScript automation for sources without a direct transport command.

`AutomationScript` renders the script text; `AutomationRunner` implementations
execute it. The router only sees the runner protocol, so tests swap in an
in-memory runner.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Protocol

from notchplay.utils.async_utils import run_blocking

logger = logging.getLogger(__name__)

CHROME_APP = "Google Chrome"
YOUTUBE_DOMAIN = "youtube.com"
DEFAULT_SCRIPT_TIMEOUT_S = 5.0


@dataclass(frozen=True)
class AutomationResult:
    ok: bool
    error: str | None = None


@dataclass(frozen=True)
class AutomationScript:
    """Runs `javascript` in the first tab of `target_app` whose URL matches."""

    target_app: str
    url_substring: str
    javascript: str

    def render(self) -> str:
        javascript = _escape_applescript(self.javascript)
        return "\n".join(
            [
                f'tell application "{_escape_applescript(self.target_app)}"',
                "    repeat with aWindow in every window",
                "        repeat with aTab in every tab of aWindow",
                f'            if (URL of aTab contains "{_escape_applescript(self.url_substring)}") then',
                "                tell aTab",
                f'                    execute javascript "{javascript}"',
                "                end tell",
                "                return",
                "            end if",
                "        end repeat",
                "    end repeat",
                "end tell",
            ]
        )


def chrome_seek_script(delta_seconds: float) -> AutomationScript:
    """Script that moves the first YouTube video in Chrome by `delta_seconds`."""
    javascript = (
        "var vid = document.querySelector('video'); "
        f"if (vid) {{ vid.currentTime += {float(delta_seconds)}; }}"
    )
    return AutomationScript(CHROME_APP, YOUTUBE_DOMAIN, javascript)


def _escape_applescript(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


class AutomationRunner(Protocol):
    """Executes rendered automation scripts."""

    async def run(self, source: str) -> AutomationResult: ...


class OsascriptRunner:
    """Runs AppleScript source through the `osascript` binary."""

    def __init__(
        self,
        *,
        executable: str = "osascript",
        timeout_s: float = DEFAULT_SCRIPT_TIMEOUT_S,
    ) -> None:
        self._executable = executable
        self._timeout_s = timeout_s

    async def run(self, source: str) -> AutomationResult:
        return await run_blocking(self._run_sync, source)

    def _run_sync(self, source: str) -> AutomationResult:
        return _run_process([self._executable, "-e", source], self._timeout_s)


class AppLauncher:
    """Brings an application to the foreground with `open -a`."""

    def __init__(self, *, timeout_s: float = DEFAULT_SCRIPT_TIMEOUT_S) -> None:
        self._timeout_s = timeout_s

    async def launch(self, app_name: str) -> AutomationResult:
        return await run_blocking(
            _run_process, ["open", "-a", app_name], self._timeout_s
        )


def _run_process(argv: list[str], timeout_s: float) -> AutomationResult:
    try:
        proc = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            timeout=timeout_s,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return AutomationResult(False, f"{argv[0]} timed out after {timeout_s:g}s")
    except OSError as exc:
        return AutomationResult(False, f"{argv[0]} launch failed: {exc}")
    if proc.returncode != 0:
        detail = (proc.stderr or "").strip() or f"exit={proc.returncode}"
        return AutomationResult(False, detail)
    return AutomationResult(True)
