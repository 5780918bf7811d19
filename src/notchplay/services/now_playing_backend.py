"""Now-playing service contracts and well-known payload keys.

`SnapshotAdapter` and `CommandRouter` depend only on `MediaRemoteCapabilities`
so they stay independent of how the entry points were resolved. The PyObjC
loader (`media_remote`) and the in-memory fake (`fake_backend`) both produce
this object.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional

INFO_TITLE = "kMRMediaRemoteNowPlayingInfoTitle"
INFO_ARTIST = "kMRMediaRemoteNowPlayingInfoArtist"
INFO_ALBUM = "kMRMediaRemoteNowPlayingInfoAlbum"
INFO_PLAYBACK_RATE = "kMRMediaRemoteNowPlayingInfoPlaybackRate"
INFO_ELAPSED_TIME = "kMRMediaRemoteNowPlayingInfoElapsedTime"
INFO_ARTWORK_DATA = "kMRMediaRemoteNowPlayingInfoArtworkData"
INFO_MEDIA_TYPE = "kMRMediaRemoteNowPlayingInfoMediaType"
INFO_TRACK_NUMBER = "kMRMediaRemoteNowPlayingInfoTrackNumber"
INFO_CURRENT_PLAYBACK_DATE = "kMRMediaRemoteNowPlayingInfoCurrentPlaybackDate"
INFO_CLIENT_PROPERTIES_DATA = "kMRMediaRemoteNowPlayingInfoClientPropertiesData"

MEDIA_TYPE_AUDIO = "kMRMediaRemoteNowPlayingInfoTypeAudio"

NowPlayingPayload = Mapping[str, Any]
InfoCallback = Callable[[Optional[NowPlayingPayload]], None]


class MRCommand(IntEnum):
    """Discrete transport command codes accepted by `MRMediaRemoteSendCommand`."""

    PLAY = 0
    PAUSE = 1
    TOGGLE_PLAY_PAUSE = 2
    STOP = 3
    NEXT_TRACK = 4
    PREVIOUS_TRACK = 5


@dataclass(frozen=True)
class MediaRemoteCapabilities:
    """Entry points resolved once at startup and shared read-only afterwards.

    Any field left as `None` was not resolvable in this environment.
    """

    get_now_playing_info: Callable[[InfoCallback], None] | None = None
    get_client_bundle_identifier: Callable[[Any], str | None] | None = None
    client_from_data: Callable[[bytes], Any] | None = None
    send_command: Callable[[int], bool] | None = None
    set_elapsed_time: Callable[[float], None] | None = None

    @property
    def available(self) -> bool:
        """Whether snapshots can be fetched at all."""
        return (
            self.get_now_playing_info is not None
            and self.get_client_bundle_identifier is not None
        )


UNAVAILABLE = MediaRemoteCapabilities()
