"""Command routing between MediaRemote transport calls and scripted automation.

`CommandRouter.dispatch` never raises: every failure is logged and reported
as an unsuccessful `DispatchOutcome`, and nothing is retried. The next poll
observes whatever effect the command had.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Callable, Literal, Union

from notchplay.errors import (
    AutomationError,
    CommandDispatchFailed,
    NowPlayingError,
)
from notchplay.services.automation import AutomationRunner, chrome_seek_script
from notchplay.services.now_playing_backend import MediaRemoteCapabilities, MRCommand
from notchplay.services.source_profiles import SourceProfile, profile_for

logger = logging.getLogger(__name__)

DispatchPath = Literal["none", "direct", "automation"]


@dataclass(frozen=True)
class TogglePlayPause:
    pass


@dataclass(frozen=True)
class Previous:
    pass


@dataclass(frozen=True)
class Next:
    pass


@dataclass(frozen=True)
class SeekRelative:
    delta_seconds: float


Command = Union[TogglePlayPause, Previous, Next, SeekRelative]


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of one routed command."""

    command: Command
    ok: bool
    path: DispatchPath
    detail: str | None = None


def resolve_command(
    command: Command, profile: SourceProfile, *, seek_mode: bool
) -> Command:
    """Reinterpret previous/next as relative seeks while seek mode is on."""
    if not seek_mode:
        return command
    if isinstance(command, Previous):
        return SeekRelative(-profile.seek_step_seconds)
    if isinstance(command, Next):
        return SeekRelative(profile.seek_step_seconds)
    return command


class CommandRouter:
    """Selects and executes the backend strategy for each command.

    `read_elapsed` must return a fresh playback position. The session wires it
    to the monitor's single-flight refresh so seek reads never overlap a poll.
    """

    def __init__(
        self,
        *,
        capabilities: MediaRemoteCapabilities,
        read_elapsed: Callable[[], Awaitable[float | None]],
        automation: AutomationRunner,
        on_complete: Callable[[DispatchOutcome], Awaitable[None]] | None = None,
    ) -> None:
        self._capabilities = capabilities
        self._read_elapsed = read_elapsed
        self._automation = automation
        self._on_complete = on_complete

    async def dispatch(
        self,
        command: Command,
        active_source: str | None,
        *,
        seek_mode: bool = False,
    ) -> DispatchOutcome:
        if active_source is None:
            logger.debug("Ignoring %s: no active source.", type(command).__name__)
            return DispatchOutcome(command, ok=False, path="none", detail="no source")

        profile = profile_for(active_source)
        resolved = resolve_command(command, profile, seek_mode=seek_mode)
        seeking = isinstance(resolved, SeekRelative)
        path: DispatchPath = (
            "automation" if seeking and profile.seek_via_automation else "direct"
        )
        try:
            if isinstance(resolved, SeekRelative):
                if path == "automation":
                    await self._seek_automation(resolved.delta_seconds)
                else:
                    await self._seek_direct(resolved.delta_seconds)
            else:
                self._send(_COMMAND_CODES[type(resolved)])
            outcome = DispatchOutcome(resolved, ok=True, path=path)
        except AutomationError as exc:
            logger.warning(
                "Automation failed for %s on %s: %s",
                _describe(resolved),
                active_source,
                exc.description,
            )
            outcome = DispatchOutcome(resolved, ok=False, path=path, detail=str(exc))
        except NowPlayingError as exc:
            logger.warning(
                "Failed to dispatch %s for %s: %s",
                _describe(resolved),
                active_source,
                exc,
            )
            outcome = DispatchOutcome(resolved, ok=False, path=path, detail=str(exc))
        else:
            logger.debug("Dispatched %s via %s", _describe(resolved), path)

        if self._on_complete is not None:
            try:
                await self._on_complete(outcome)
            except Exception as exc:
                logger.warning(
                    "Completion handler failed after %s: %s", _describe(resolved), exc
                )
        return outcome

    def _send(self, code: MRCommand) -> None:
        send_command = self._capabilities.send_command
        if send_command is None:
            raise CommandDispatchFailed("MRMediaRemoteSendCommand is not loaded.")
        try:
            accepted = send_command(int(code))
        except Exception as exc:
            raise CommandDispatchFailed(f"{code.name} raised: {exc}") from exc
        if not accepted:
            raise CommandDispatchFailed(f"{code.name} was rejected by MediaRemote.")

    async def _seek_automation(self, delta_seconds: float) -> None:
        result = await self._automation.run(chrome_seek_script(delta_seconds).render())
        if not result.ok:
            raise AutomationError(result.error or "unknown automation error")

    async def _seek_direct(self, delta_seconds: float) -> None:
        set_elapsed_time = self._capabilities.set_elapsed_time
        try:
            elapsed = await self._read_elapsed()
        except Exception as exc:
            raise CommandDispatchFailed(f"Reading playback position raised: {exc}") from exc
        if elapsed is None or set_elapsed_time is None:
            raise CommandDispatchFailed(
                "Failed to fetch playback position or set elapsed time."
            )
        target = max(0.0, elapsed + delta_seconds)
        try:
            set_elapsed_time(target)
        except Exception as exc:
            raise CommandDispatchFailed(f"Setting elapsed time raised: {exc}") from exc


_COMMAND_CODES: dict[type, MRCommand] = {
    TogglePlayPause: MRCommand.TOGGLE_PLAY_PAUSE,
    Previous: MRCommand.PREVIOUS_TRACK,
    Next: MRCommand.NEXT_TRACK,
}


def _describe(command: Command) -> str:
    if isinstance(command, SeekRelative):
        return f"seek {command.delta_seconds:+g}s"
    return type(command).__name__
