"""Per-source behavioral parameters derived from the active source identifier."""

from __future__ import annotations

from dataclasses import dataclass

from notchplay.services.source_heuristics import (
    SPOTIFY_LABEL,
    UNKNOWN_APP_LABEL,
    YOUTUBE_CHROME_LABEL,
)

SPOTIFY_BUNDLE_ID = "com.spotify.client"
CHROME_BUNDLE_ID = "com.google.Chrome"
SPOTIFY_SEEK_STEP_S = 15.0
DEFAULT_SEEK_STEP_S = 10.0


@dataclass(frozen=True)
class SourceProfile:
    key: str
    seek_step_seconds: float = DEFAULT_SEEK_STEP_S
    seek_via_automation: bool = False
    known: bool = False
    app_name: str | None = None


@dataclass(frozen=True)
class _ProfileEntry:
    pattern: str
    profile: SourceProfile
    substring: bool = False

    def matches(self, source_id: str) -> bool:
        if self.substring:
            return self.pattern in source_id
        return self.pattern == source_id


# Ordered; first match wins.
PROFILE_TABLE: tuple[_ProfileEntry, ...] = (
    _ProfileEntry(
        SPOTIFY_BUNDLE_ID,
        SourceProfile(
            key=SPOTIFY_BUNDLE_ID,
            seek_step_seconds=SPOTIFY_SEEK_STEP_S,
            known=True,
            app_name="Spotify",
        ),
    ),
    _ProfileEntry(
        SPOTIFY_LABEL,
        SourceProfile(
            key=SPOTIFY_LABEL,
            seek_step_seconds=SPOTIFY_SEEK_STEP_S,
            app_name="Spotify",
        ),
    ),
    _ProfileEntry(
        CHROME_BUNDLE_ID,
        SourceProfile(
            key=CHROME_BUNDLE_ID,
            seek_via_automation=True,
            known=True,
            app_name="Google Chrome",
        ),
        substring=True,
    ),
    _ProfileEntry(
        YOUTUBE_CHROME_LABEL,
        SourceProfile(
            key=YOUTUBE_CHROME_LABEL,
            seek_via_automation=True,
            app_name="Google Chrome",
        ),
    ),
    _ProfileEntry(UNKNOWN_APP_LABEL, SourceProfile(key=UNKNOWN_APP_LABEL)),
)


def profile_for(source_id: str) -> SourceProfile:
    """Return the profile for a resolved id or inferred label.

    Unlisted identifiers are assumed to be stable bundle ids with default
    seek behavior.
    """
    for entry in PROFILE_TABLE:
        if entry.matches(source_id):
            return entry.profile
    return SourceProfile(key=source_id, known=True)
