"""JSON persistence for the seek-mode preference.

The store is tolerant of invalid/missing values so partial or corrupt writes
degrade to safe defaults instead of aborting startup.
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import suppress
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any
from uuid import uuid4

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Preferences:
    """User preferences read at startup and rewritten on toggle."""

    seek_mode: bool = False


def _coerce_preferences(data: dict[str, Any]) -> Preferences:
    # Older builds stored the flag under the UI toggle name.
    value = data.get("seek_mode", data.get("useSeekMode"))
    return Preferences(seek_mode=value if isinstance(value, bool) else False)


def load_preferences_with_notice(path: Path) -> tuple[Preferences, str | None]:
    """Load preferences and return an optional user-facing notice."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("Preferences file missing at %s; using defaults.", path)
        return Preferences(), None
    except OSError as exc:
        logger.warning(
            "Failed to read preferences %s: %s; using defaults.", path, exc
        )
        return (
            Preferences(),
            "Preferences were reset to defaults.\n"
            "Likely cause: preferences file is unreadable due to permissions or IO issues.\n"
            f"Next step: verify access to '{path}' and restart.",
        )

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Preferences at %s are invalid JSON; using defaults.", path)
        return (
            Preferences(),
            "Preferences were reset to defaults.\n"
            "Likely cause: preferences file is corrupt or partially written.\n"
            f"Next step: remove or repair '{path}' and restart.",
        )

    if not isinstance(data, dict):
        logger.warning("Preferences at %s are not a JSON object; using defaults.", path)
        return (
            Preferences(),
            "Preferences were reset to defaults.\n"
            "Likely cause: preferences file format is invalid for this version.\n"
            f"Next step: remove '{path}' and restart.",
        )

    return _coerce_preferences(data), None


def load_preferences(path: Path) -> Preferences:
    """Load preferences from disk, falling back to defaults."""
    preferences, _notice = load_preferences_with_notice(path)
    return preferences


def save_preferences(path: Path, preferences: Preferences) -> None:
    """Persist preferences atomically via write-then-replace."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f"{path.name}.{uuid4().hex}.tmp")
    payload = json.dumps(asdict(preferences), indent=2, sort_keys=True)
    delay_s = 0.02
    try:
        for attempt in range(4):
            tmp_path.write_text(payload, encoding="utf-8")
            try:
                tmp_path.replace(path)
                return
            except OSError:
                if attempt >= 3:
                    raise
                time.sleep(delay_s)
                delay_s = min(0.25, delay_s * 2.0)
    finally:
        with suppress(OSError):
            tmp_path.unlink()
