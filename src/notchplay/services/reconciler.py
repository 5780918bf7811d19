"""Poll loop and reconciliation of snapshots into the observable playback state.

`NowPlayingMonitor` is the single writer of `PlaybackState`. Every mutation
happens on the event loop that called `start()`; fetches and artwork decode
may run elsewhere but their results are awaited back onto that loop before the
state is touched.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any, Callable

from notchplay.errors import FetchFailed, ServiceUnavailable
from notchplay.events import PlaybackStateChanged, TrackChanged
from notchplay.services.artwork import decode_artwork as default_decode_artwork
from notchplay.services.snapshot_adapter import Snapshot, SnapshotAdapter
from notchplay.utils.async_utils import run_blocking

logger = logging.getLogger(__name__)

IDLE_TRACK = "Nothing Playing"
DEFAULT_POLL_INTERVAL_S = 1.0


@dataclass(frozen=True)
class PlaybackState:
    """Normalized now-playing state exposed to the presentation layer."""

    is_playing: bool = False
    track: str = IDLE_TRACK
    artist: str = ""
    thumbnail: Any | None = field(default=None, compare=False)
    active_source: str | None = None
    elapsed_seconds: float | None = None

    @property
    def controls_enabled(self) -> bool:
        return self.active_source is not None


IDLE_STATE = PlaybackState()


class NowPlayingMonitor:
    """Owns `PlaybackState` and refreshes it on a fixed-period timer."""

    def __init__(
        self,
        *,
        adapter: SnapshotAdapter,
        emit_event: Callable[[object], Awaitable[None]],
        decode_artwork: Callable[[bytes], Any] = default_decode_artwork,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    ) -> None:
        if poll_interval_s <= 0:
            raise ValueError("poll_interval_s must be > 0")
        self._adapter = adapter
        self._emit_event = emit_event
        self._decode_artwork = decode_artwork
        self._poll_interval = float(poll_interval_s)
        self._state = IDLE_STATE
        self._active_title: str | None = None
        self._refresh_task: asyncio.Task[None] | None = None
        self._timer_task: asyncio.Task[None] | None = None
        self._unavailable_logged = False

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def adapter(self) -> SnapshotAdapter:
        return self._adapter

    async def start(self) -> None:
        """Poll once immediately, then keep polling every interval."""
        await self.refresh()
        if self._timer_task is None:
            self._timer_task = asyncio.create_task(self._tick_loop())

    async def shutdown(self) -> None:
        """Stop the timer and abandon any in-flight poll."""
        for task in (self._timer_task, self._refresh_task):
            if task is None or task.done():
                continue
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        self._timer_task = None
        self._refresh_task = None

    async def refresh(self) -> PlaybackState:
        """Run (or join) a single poll and return the resulting state."""
        task = self._refresh_task
        if task is None or task.done():
            task = asyncio.create_task(self._refresh_once())
            self._refresh_task = task
        await asyncio.shield(task)
        return self._state

    async def _apply(self, snapshot: Snapshot | None) -> PlaybackState:
        """Reconcile one poll result into the current state.

        `None` stands for an unavailable service or a failed poll. Artwork is
        decoded only when the title differs from the previous active title.
        Only the poll path calls this, so reconciliation stays single-flight.
        """
        previous = self._state
        if snapshot is None or not snapshot.is_active:
            track_changed = self._active_title is not None
            self._active_title = None
            new_state = IDLE_STATE
        else:
            track_changed = snapshot.title != self._active_title
            thumbnail = previous.thumbnail
            if track_changed:
                thumbnail = await self._decode(snapshot.artwork)
            new_state = PlaybackState(
                is_playing=snapshot.playback_rate > 0,
                track=snapshot.title,
                artist=snapshot.artist,
                thumbnail=thumbnail,
                active_source=snapshot.source_id,
                elapsed_seconds=snapshot.elapsed_seconds,
            )
            self._active_title = snapshot.title
        self._state = new_state

        if track_changed:
            logger.info(
                "Now playing: %s (source=%s)",
                new_state.track if self._active_title else "idle",
                new_state.active_source or "none",
            )
            await self._emit_event(
                TrackChanged(
                    track=self._active_title,
                    artist=new_state.artist if self._active_title else None,
                    source=new_state.active_source,
                )
            )
        if new_state != previous or new_state.thumbnail is not previous.thumbnail:
            await self._emit_event(PlaybackStateChanged(new_state))
        return new_state

    async def _refresh_once(self) -> None:
        snapshot: Snapshot | None
        try:
            snapshot = await self._adapter.fetch()
        except ServiceUnavailable as exc:
            if not self._unavailable_logged:
                logger.warning("Now-playing service unavailable: %s", exc)
                self._unavailable_logged = True
            snapshot = None
        except FetchFailed as exc:
            logger.debug("Now-playing poll failed: %s", exc)
            snapshot = None
        except Exception:  # pragma: no cover - adapter safety net
            logger.exception("Unexpected error while polling now-playing info.")
            snapshot = None
        try:
            await self._apply(snapshot)
        except Exception:
            logger.exception("Failed to publish now-playing state.")

    async def _tick_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self._poll_interval)
                if self._refresh_task is not None and not self._refresh_task.done():
                    logger.debug("Previous poll still in flight; skipping tick.")
                    continue
                self._refresh_task = asyncio.create_task(self._refresh_once())
        except asyncio.CancelledError:
            return

    async def _decode(self, artwork: bytes | None) -> Any | None:
        if artwork is None:
            return None
        try:
            return await run_blocking(self._decode_artwork, artwork)
        except Exception as exc:
            logger.warning("Artwork decode failed (%d bytes): %s", len(artwork), exc)
            return None
