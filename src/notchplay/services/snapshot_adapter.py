"""Typed snapshots from the MediaRemote now-playing payload.

The payload is a weakly-typed key/value mapping. `PAYLOAD_FIELDS` is the one
place where external keys are translated into typed `Snapshot` fields; the
rest of the package never touches raw keys except heuristics and diagnostics.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from notchplay.errors import FetchFailed, IdentifierUnresolved, ServiceUnavailable
from notchplay.services.now_playing_backend import (
    INFO_ARTIST,
    INFO_ARTWORK_DATA,
    INFO_CLIENT_PROPERTIES_DATA,
    INFO_ELAPSED_TIME,
    INFO_PLAYBACK_RATE,
    INFO_TITLE,
    MediaRemoteCapabilities,
    NowPlayingPayload,
)
from notchplay.services.source_heuristics import UNKNOWN_APP_LABEL, infer_source

logger = logging.getLogger(__name__)

DEFAULT_ARTIST = "Unknown Artist"

SourceResolution = Literal["resolved", "inferred", "unknown"]


@dataclass(frozen=True)
class Snapshot:
    """One normalized read of now-playing metadata."""

    title: str = ""
    artist: str = DEFAULT_ARTIST
    playback_rate: float = 0.0
    elapsed_seconds: float | None = None
    artwork: bytes | None = None
    source_id: str | None = None
    source_resolution: SourceResolution = "unknown"
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_active(self) -> bool:
        return bool(self.title)


def _as_str(value: Any) -> str | None:
    return str(value) if isinstance(value, str) else None


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    normalized = float(value)
    return normalized if math.isfinite(normalized) else None


def _as_bytes(value: Any) -> bytes | None:
    if value is None or isinstance(value, str):
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        data = bytes(value)
    else:
        # NSData and friends support the buffer protocol under PyObjC.
        try:
            data = bytes(value)
        except (TypeError, ValueError):
            return None
    return data or None


# (snapshot field, payload key, coercer, default when absent or mistyped)
PAYLOAD_FIELDS: tuple[tuple[str, str, Callable[[Any], Any], Any], ...] = (
    ("title", INFO_TITLE, _as_str, ""),
    ("artist", INFO_ARTIST, _as_str, DEFAULT_ARTIST),
    ("playback_rate", INFO_PLAYBACK_RATE, _as_float, 0.0),
    ("elapsed_seconds", INFO_ELAPSED_TIME, _as_float, None),
    ("artwork", INFO_ARTWORK_DATA, _as_bytes, None),
)


def snapshot_from_payload(
    payload: NowPlayingPayload,
    *,
    source_id: str | None = None,
    source_resolution: SourceResolution = "unknown",
) -> Snapshot:
    """Translate a raw payload into a `Snapshot` using `PAYLOAD_FIELDS`."""
    values: dict[str, Any] = {}
    for name, key, coerce, default in PAYLOAD_FIELDS:
        value = coerce(payload.get(key))
        values[name] = default if value is None else value
    return Snapshot(
        **values,
        source_id=source_id,
        source_resolution=source_resolution,
        raw=dict(payload),
    )


class SnapshotAdapter:
    """Fetches now-playing payloads and resolves the owning application.

    Callers must not overlap `fetch()` calls; `NowPlayingMonitor` serializes
    them with a single-flight guard.
    """

    def __init__(self, capabilities: MediaRemoteCapabilities) -> None:
        self._capabilities = capabilities
        self._dumped_title: str | None = None

    @property
    def capabilities(self) -> MediaRemoteCapabilities:
        return self._capabilities

    async def fetch(self) -> Snapshot:
        """Return the current snapshot.

        Raises `ServiceUnavailable` when entry points were never resolved and
        `FetchFailed` when this poll produced no payload.
        """
        payload = await self.fetch_raw()
        if payload is None:
            raise FetchFailed("MediaRemote returned no now-playing payload.")
        source_id, resolution = self._identify(payload)
        snapshot = snapshot_from_payload(
            payload, source_id=source_id, source_resolution=resolution
        )
        if resolution == "unknown" and snapshot.is_active:
            self._dump_payload(snapshot.title, payload)
        return snapshot

    async def fetch_raw(self) -> NowPlayingPayload | None:
        """Fetch the untyped payload; `None` means the service had nothing."""
        get_info = self._capabilities.get_now_playing_info
        if not self._capabilities.available or get_info is None:
            raise ServiceUnavailable("Required MediaRemote functions are not loaded.")
        loop = asyncio.get_running_loop()
        future: asyncio.Future[NowPlayingPayload | None] = loop.create_future()

        def _deliver(payload: NowPlayingPayload | None) -> None:
            loop.call_soon_threadsafe(_settle, future, payload)

        try:
            get_info(_deliver)
        except Exception as exc:
            raise FetchFailed(f"Now-playing query raised: {exc}") from exc
        return await future

    def _identify(
        self, payload: NowPlayingPayload
    ) -> tuple[str, SourceResolution]:
        try:
            return self._resolve_identifier(payload), "resolved"
        except IdentifierUnresolved as exc:
            logger.debug("Bundle identifier unresolved: %s", exc)
        inferred = infer_source(payload)
        if inferred is not None:
            return inferred, "inferred"
        return UNKNOWN_APP_LABEL, "unknown"

    def _resolve_identifier(self, payload: NowPlayingPayload) -> str:
        blob = _as_bytes(payload.get(INFO_CLIENT_PROPERTIES_DATA))
        if blob is None:
            raise IdentifierUnresolved("payload carries no client properties blob")
        make_client = self._capabilities.client_from_data
        get_identifier = self._capabilities.get_client_bundle_identifier
        if make_client is None or get_identifier is None:
            raise IdentifierUnresolved("client protobuf class is unavailable")
        try:
            client = make_client(blob)
            identifier = get_identifier(client) if client is not None else None
        except Exception as exc:
            raise IdentifierUnresolved(f"client lookup raised: {exc}") from exc
        if not identifier:
            raise IdentifierUnresolved("service returned no bundle identifier")
        return identifier

    def _dump_payload(self, title: str, payload: NowPlayingPayload) -> None:
        if title == self._dumped_title or not logger.isEnabledFor(logging.DEBUG):
            return
        self._dumped_title = title
        for key, value in sorted(payload.items()):
            if isinstance(value, (bytes, bytearray)) or key == INFO_ARTWORK_DATA:
                value = f"<{len(value) if hasattr(value, '__len__') else '?'} bytes>"
            logger.debug("now-playing payload dump: %s = %r", key, value)


def _settle(
    future: asyncio.Future[NowPlayingPayload | None],
    payload: NowPlayingPayload | None,
) -> None:
    if not future.done():
        future.set_result(payload)
