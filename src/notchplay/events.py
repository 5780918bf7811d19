"""Service events emitted to presentation-layer subscribers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from notchplay.services.command_router import DispatchOutcome
    from notchplay.services.reconciler import PlaybackState


@dataclass(frozen=True)
class PlaybackStateChanged:
    """Emitted when the reconciled playback state differs from the previous one."""

    state: PlaybackState


@dataclass(frozen=True)
class TrackChanged:
    """Emitted when the playing title changes; `track` is `None` when idle."""

    track: str | None
    artist: str | None
    source: str | None


@dataclass(frozen=True)
class CommandCompleted:
    """Emitted after a routed command finished, successfully or not."""

    outcome: DispatchOutcome
