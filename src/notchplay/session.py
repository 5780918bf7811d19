"""Presentation-facing facade tying monitor, router and preferences together.

A UI holds one `NowPlayingSession`: it reads `state`, calls the command
methods, and subscribes through `emit_event`. Command methods never raise;
they return `DispatchOutcome` and trigger a refresh once complete.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable

from notchplay.events import CommandCompleted
from notchplay.preferences import load_preferences, save_preferences
from notchplay.services.artwork import decode_artwork as default_decode_artwork
from notchplay.services.automation import AppLauncher, AutomationRunner, OsascriptRunner
from notchplay.services.command_router import (
    Command,
    CommandRouter,
    DispatchOutcome,
    Next,
    Previous,
    SeekRelative,
    TogglePlayPause,
)
from notchplay.services.now_playing_backend import MediaRemoteCapabilities
from notchplay.services.reconciler import NowPlayingMonitor, PlaybackState
from notchplay.services.snapshot_adapter import SnapshotAdapter
from notchplay.services.source_profiles import profile_for

logger = logging.getLogger(__name__)

TOGGLE_DEBOUNCE_S = 0.5


async def _discard_event(_event: object) -> None:
    return None


class NowPlayingSession:
    """Owns the observation loop and routes UI intents to backends."""

    def __init__(
        self,
        *,
        capabilities: MediaRemoteCapabilities,
        preferences_path: Path,
        emit_event: Callable[[object], Awaitable[None]] | None = None,
        automation: AutomationRunner | None = None,
        launcher: AppLauncher | None = None,
        decode_artwork: Callable[[bytes], Any] = default_decode_artwork,
        poll_interval_s: float = 1.0,
        toggle_debounce_s: float = TOGGLE_DEBOUNCE_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._emit_event = emit_event or _discard_event
        self._preferences_path = preferences_path
        self._preferences = load_preferences(preferences_path)
        self._launcher = launcher or AppLauncher()
        self._toggle_debounce_s = toggle_debounce_s
        self._clock = clock
        self._toggle_blocked_until = 0.0
        self._monitor = NowPlayingMonitor(
            adapter=SnapshotAdapter(capabilities),
            emit_event=self._emit_event,
            decode_artwork=decode_artwork,
            poll_interval_s=poll_interval_s,
        )
        self._router = CommandRouter(
            capabilities=capabilities,
            read_elapsed=self._read_elapsed,
            automation=automation or OsascriptRunner(),
            on_complete=self._on_command_complete,
        )

    @property
    def state(self) -> PlaybackState:
        return self._monitor.state

    @property
    def monitor(self) -> NowPlayingMonitor:
        return self._monitor

    @property
    def seek_mode(self) -> bool:
        return self._preferences.seek_mode

    @property
    def controls_enabled(self) -> bool:
        return self.state.controls_enabled

    @property
    def toggle_enabled(self) -> bool:
        return self.controls_enabled and self._clock() >= self._toggle_blocked_until

    async def start(self) -> None:
        await self._monitor.start()

    async def shutdown(self) -> None:
        await self._monitor.shutdown()

    def set_seek_mode(self, enabled: bool) -> bool:
        """Persist the seek-mode flag; the in-memory value changes even if saving fails."""
        self._preferences = replace(self._preferences, seek_mode=enabled)
        try:
            save_preferences(self._preferences_path, self._preferences)
        except OSError as exc:
            logger.warning("Failed to save preferences to %s: %s", self._preferences_path, exc)
        logger.info("Seek mode %s", "enabled" if enabled else "disabled")
        return enabled

    def toggle_seek_mode(self) -> bool:
        return self.set_seek_mode(not self.seek_mode)

    async def toggle_play_pause(self) -> DispatchOutcome | None:
        """Toggle playback; repeated presses inside the debounce window are dropped."""
        now = self._clock()
        if now < self._toggle_blocked_until:
            logger.debug("Play/pause ignored; debounce window still open.")
            return None
        if self.controls_enabled:
            self._toggle_blocked_until = now + self._toggle_debounce_s
        return await self._dispatch(TogglePlayPause())

    async def previous(self, *, seek_mode: bool | None = None) -> DispatchOutcome:
        return await self._dispatch(Previous(), seek_mode=seek_mode)

    async def next(self, *, seek_mode: bool | None = None) -> DispatchOutcome:
        return await self._dispatch(Next(), seek_mode=seek_mode)

    async def seek(self, delta_seconds: float) -> DispatchOutcome:
        return await self._dispatch(SeekRelative(delta_seconds))

    async def open_current_source(self) -> bool:
        """Bring the application that owns the current media to the front."""
        source = self.state.active_source
        if source is None:
            return False
        app_name = profile_for(source).app_name
        if app_name is None:
            logger.info("No associated app for: %s", source)
            return False
        result = await self._launcher.launch(app_name)
        if not result.ok:
            logger.warning("Failed to open %s: %s", app_name, result.error)
        return result.ok

    async def _dispatch(
        self, command: Command, *, seek_mode: bool | None = None
    ) -> DispatchOutcome:
        return await self._router.dispatch(
            command,
            self.state.active_source,
            seek_mode=self.seek_mode if seek_mode is None else seek_mode,
        )

    async def _read_elapsed(self) -> float | None:
        state = await self._monitor.refresh()
        return state.elapsed_seconds

    async def _on_command_complete(self, outcome: DispatchOutcome) -> None:
        await self._emit_event(CommandCompleted(outcome))
        if outcome.path != "none":
            await self._monitor.refresh()

