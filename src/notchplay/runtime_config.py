"""Runtime configuration normalization helpers.

These helpers keep CLI flag and environment interpretation deterministic
across entrypoints.
"""

from __future__ import annotations

import math
import os

POLL_INTERVAL_ENV = "NOTCHPLAY_POLL_INTERVAL"
DEFAULT_POLL_INTERVAL_S = 1.0
POLL_INTERVAL_MIN_S = 0.1
POLL_INTERVAL_MAX_S = 10.0


def resolve_log_level(*, verbose: bool, quiet: bool) -> str:
    """Resolve effective log level from CLI flags.

    Precedence is deterministic: --quiet overrides --verbose.
    """
    if quiet:
        return "WARNING"
    if verbose:
        return "DEBUG"
    return "INFO"


def normalize_poll_interval(value: float | str | None) -> float:
    """Clamp a poll interval into the supported range, defaulting bad input."""
    if value is None:
        return DEFAULT_POLL_INTERVAL_S
    try:
        interval = float(value)
    except (TypeError, ValueError):
        return DEFAULT_POLL_INTERVAL_S
    if not math.isfinite(interval):
        return DEFAULT_POLL_INTERVAL_S
    return max(POLL_INTERVAL_MIN_S, min(POLL_INTERVAL_MAX_S, interval))


def default_poll_interval() -> float:
    """Poll interval from the environment, or the built-in default."""
    return normalize_poll_interval(os.environ.get(POLL_INTERVAL_ENV))
