"""Heuristic source identification from payload signal shapes.

MediaRemote does not expose a client identifier for every source (media
playing inside a browser tab is the common case). These rules are a
best-effort fallback and are never consulted when an identifier was resolved
directly.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from notchplay.services.now_playing_backend import (
    INFO_ALBUM,
    INFO_CURRENT_PLAYBACK_DATE,
    INFO_MEDIA_TYPE,
    INFO_TRACK_NUMBER,
    MEDIA_TYPE_AUDIO,
)

SPOTIFY_LABEL = "Spotify"
YOUTUBE_CHROME_LABEL = "YouTube (Chrome)"
UNKNOWN_APP_LABEL = "Unknown App"


@dataclass(frozen=True)
class HeuristicRule:
    """One (label, predicate) pair evaluated against raw payload fields."""

    label: str
    predicate: Callable[[Mapping[str, Any]], bool]


def _is_audio_with_track_number(fields: Mapping[str, Any]) -> bool:
    return fields.get(INFO_MEDIA_TYPE) == MEDIA_TYPE_AUDIO and INFO_TRACK_NUMBER in fields


def _is_browser_video(fields: Mapping[str, Any]) -> bool:
    album = fields.get(INFO_ALBUM)
    return (
        INFO_CURRENT_PLAYBACK_DATE in fields
        and isinstance(album, str)
        and album == ""
        and INFO_MEDIA_TYPE not in fields
    )


DEFAULT_RULES: tuple[HeuristicRule, ...] = (
    HeuristicRule(SPOTIFY_LABEL, _is_audio_with_track_number),
    HeuristicRule(YOUTUBE_CHROME_LABEL, _is_browser_video),
)


def infer_source(
    fields: Mapping[str, Any], rules: Sequence[HeuristicRule] = DEFAULT_RULES
) -> str | None:
    """Return the first matching rule label, or `None` when nothing matches."""
    for rule in rules:
        if rule.predicate(fields):
            return rule.label
    return None
