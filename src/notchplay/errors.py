"""Failure taxonomy for now-playing observation and command dispatch.

Every error here is absorbed at the boundary where it occurs: the monitor
degrades to the idle state and the router degrades to a no-op. Nothing in this
hierarchy is fatal to the process.
"""

from __future__ import annotations


class NowPlayingError(Exception):
    """Base type for all now-playing failures."""


class ServiceUnavailable(NowPlayingError):
    """Required MediaRemote entry points were never resolved.

    Permanent for the process lifetime; callers should not retry.
    """


class FetchFailed(NowPlayingError):
    """A single poll produced no usable payload (transient)."""


class IdentifierUnresolved(NowPlayingError):
    """The owning application could not be resolved from the payload."""


class CommandDispatchFailed(NowPlayingError):
    """A transport command or automation script did not take effect."""


class AutomationError(CommandDispatchFailed):
    """A scripted automation call reported an error."""

    def __init__(self, description: str) -> None:
        super().__init__(description)
        self.description = description
