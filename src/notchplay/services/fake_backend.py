"""In-memory now-playing service for deterministic testing and demos."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from notchplay.services.now_playing_backend import (
    INFO_ARTIST,
    INFO_ARTWORK_DATA,
    INFO_CLIENT_PROPERTIES_DATA,
    INFO_ELAPSED_TIME,
    INFO_PLAYBACK_RATE,
    INFO_TITLE,
    InfoCallback,
    MediaRemoteCapabilities,
    MRCommand,
)


@dataclass(frozen=True)
class FakeTrack:
    """One item the fake service can report as now playing."""

    title: str
    artist: str | None = None
    artwork: bytes | None = None
    bundle_id: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class _FakeClient:
    bundle_id: str | None


class FakeNowPlayingService:
    """Simulates MediaRemote: a track list, a transport and elapsed time."""

    def __init__(
        self,
        tracks: Sequence[FakeTrack] = (),
        *,
        playing: bool = True,
        elapsed_s: float = 0.0,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._tracks = list(tracks)
        self._index = 0
        self._clock = clock or time.monotonic
        self._rate = 1.0 if playing else 0.0
        self._elapsed_base = float(elapsed_s)
        self._elapsed_anchor = self._clock()
        self.accept_commands = True
        self.fail_fetch = False
        self.fetch_count = 0
        self.sent_commands: list[MRCommand] = []
        self.elapsed_writes: list[float] = []

    @property
    def current(self) -> FakeTrack | None:
        if not self._tracks:
            return None
        return self._tracks[self._index]

    @property
    def elapsed_s(self) -> float:
        return self._elapsed_base + (self._clock() - self._elapsed_anchor) * self._rate

    def set_tracks(self, tracks: Sequence[FakeTrack], *, index: int = 0) -> None:
        self._tracks = list(tracks)
        self._index = index
        self._seek_to(0.0)

    def capabilities(
        self,
        *,
        resolve_bundle_ids: bool = True,
        allow_commands: bool = True,
        allow_elapsed_writes: bool = True,
    ) -> MediaRemoteCapabilities:
        """Build a capability object; disabled features are left unresolved."""
        return MediaRemoteCapabilities(
            get_now_playing_info=self._get_now_playing_info,
            get_client_bundle_identifier=self._get_client_bundle_identifier,
            client_from_data=self._client_from_data if resolve_bundle_ids else None,
            send_command=self._send_command if allow_commands else None,
            set_elapsed_time=self._set_elapsed_time if allow_elapsed_writes else None,
        )

    def payload(self) -> dict[str, Any] | None:
        track = self.current
        if track is None:
            return None
        payload: dict[str, Any] = {
            INFO_TITLE: track.title,
            INFO_PLAYBACK_RATE: self._rate,
            INFO_ELAPSED_TIME: self.elapsed_s,
        }
        if track.artist is not None:
            payload[INFO_ARTIST] = track.artist
        if track.artwork is not None:
            payload[INFO_ARTWORK_DATA] = track.artwork
        if track.bundle_id is not None:
            payload[INFO_CLIENT_PROPERTIES_DATA] = track.bundle_id.encode("utf-8")
        payload.update(track.extra)
        return payload

    def _get_now_playing_info(self, callback: InfoCallback) -> None:
        self.fetch_count += 1
        if self.fail_fetch:
            callback(None)
            return
        callback(self.payload())

    def _client_from_data(self, data: bytes) -> _FakeClient:
        return _FakeClient(bytes(data).decode("utf-8") or None)

    def _get_client_bundle_identifier(self, client: Any) -> str | None:
        if isinstance(client, _FakeClient):
            return client.bundle_id
        return None

    def _send_command(self, code: int) -> bool:
        command = MRCommand(code)
        self.sent_commands.append(command)
        if not self.accept_commands:
            return False
        if command in {MRCommand.TOGGLE_PLAY_PAUSE, MRCommand.PLAY, MRCommand.PAUSE}:
            elapsed = self.elapsed_s
            if command is MRCommand.TOGGLE_PLAY_PAUSE:
                self._rate = 0.0 if self._rate > 0 else 1.0
            else:
                self._rate = 1.0 if command is MRCommand.PLAY else 0.0
            self._seek_to(elapsed)
        elif command is MRCommand.NEXT_TRACK and self._tracks:
            self._index = (self._index + 1) % len(self._tracks)
            self._seek_to(0.0)
        elif command is MRCommand.PREVIOUS_TRACK and self._tracks:
            self._index = (self._index - 1) % len(self._tracks)
            self._seek_to(0.0)
        elif command is MRCommand.STOP:
            self._tracks = []
        return True

    def _set_elapsed_time(self, seconds: float) -> None:
        self.elapsed_writes.append(seconds)
        self._seek_to(seconds)

    def _seek_to(self, seconds: float) -> None:
        self._elapsed_base = float(seconds)
        self._elapsed_anchor = self._clock()
