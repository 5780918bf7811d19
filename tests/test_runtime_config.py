"""Tests for runtime config precedence behavior."""

from __future__ import annotations

from notchplay.cli import build_parser
from notchplay.runtime_config import (
    DEFAULT_POLL_INTERVAL_S,
    POLL_INTERVAL_ENV,
    default_poll_interval,
    normalize_poll_interval,
    resolve_log_level,
)


def test_resolve_log_level_precedence_matrix() -> None:
    assert resolve_log_level(verbose=False, quiet=False) == "INFO"
    assert resolve_log_level(verbose=True, quiet=False) == "DEBUG"
    assert resolve_log_level(verbose=False, quiet=True) == "WARNING"
    assert resolve_log_level(verbose=True, quiet=True) == "WARNING"


def test_parser_flags_feed_log_resolution() -> None:
    args = build_parser().parse_args(["--verbose", "--quiet", "watch"])
    assert resolve_log_level(verbose=args.verbose, quiet=args.quiet) == "WARNING"


def test_poll_interval_is_clamped() -> None:
    assert normalize_poll_interval(0.01) == 0.1
    assert normalize_poll_interval(60) == 10.0
    assert normalize_poll_interval("2.5") == 2.5


def test_poll_interval_bad_values_use_default() -> None:
    assert normalize_poll_interval(None) == DEFAULT_POLL_INTERVAL_S
    assert normalize_poll_interval("fast") == DEFAULT_POLL_INTERVAL_S
    assert normalize_poll_interval(float("inf")) == DEFAULT_POLL_INTERVAL_S


def test_poll_interval_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv(POLL_INTERVAL_ENV, "0.5")
    assert default_poll_interval() == 0.5
    monkeypatch.delenv(POLL_INTERVAL_ENV)
    assert default_poll_interval() == DEFAULT_POLL_INTERVAL_S
