"""Command-line interface for notchplay."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

from . import __version__
from .doctor import render_report, run_doctor
from .events import CommandCompleted, PlaybackStateChanged
from .logging_utils import setup_logging
from .paths import log_dir, preferences_path
from .preferences import load_preferences_with_notice, save_preferences
from .runtime_config import (
    default_poll_interval,
    normalize_poll_interval,
    resolve_log_level,
)
from .services.fake_backend import FakeNowPlayingService, FakeTrack
from .services.media_remote import load_media_remote
from .services.now_playing_backend import (
    INFO_ALBUM,
    INFO_CURRENT_PLAYBACK_DATE,
    MediaRemoteCapabilities,
)
from .services.reconciler import PlaybackState
from .services.source_profiles import DEFAULT_SEEK_STEP_S, SPOTIFY_BUNDLE_ID, profile_for
from .session import NowPlayingSession

logger = logging.getLogger(__name__)

BACKENDS = ("mediaremote", "fake")
CONTROL_ACTIONS = ("toggle", "previous", "next", "seek", "open")
SEEK_MODE_ACTIONS = ("on", "off", "toggle", "show")

DEMO_TRACKS = (
    FakeTrack("Midnight City", "M83", bundle_id=SPOTIFY_BUNDLE_ID),
    FakeTrack(
        "Lo-fi beats to relax to",
        "Lofi Girl",
        extra={INFO_ALBUM: "", INFO_CURRENT_PLAYBACK_DATE: 0.0},
    ),
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notchplay",
        description="Observe and control whatever is playing on this Mac.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument(
        "--quiet", action="store_true", help="Only show warnings and errors"
    )
    parser.add_argument("--log-file", help="Write logs to a file path")
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default="mediaremote",
        help="Now-playing backend (mediaremote or an in-memory fake).",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Poll interval in seconds (default: $NOTCHPLAY_POLL_INTERVAL or 1.0).",
    )
    commands = parser.add_subparsers(dest="command")

    watch = commands.add_parser("watch", help="Print now-playing changes.")
    watch.add_argument(
        "--duration", type=float, default=None, help="Stop after this many seconds."
    )

    control = commands.add_parser("control", help="Send one transport command.")
    control.add_argument("action", choices=CONTROL_ACTIONS)
    control.add_argument(
        "--delta",
        type=float,
        default=None,
        help="Seek offset in seconds (default: the source's step).",
    )
    control.add_argument(
        "--seek-mode",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Treat previous/next as relative seeks (default: saved preference).",
    )

    seek_mode = commands.add_parser("seek-mode", help="Show or change seek mode.")
    seek_mode.add_argument("action", choices=SEEK_MODE_ACTIONS, nargs="?", default="show")

    commands.add_parser("doctor", help="Check MediaRemote and tooling readiness.")
    return parser


def build_capabilities(backend: str) -> MediaRemoteCapabilities:
    logger.info("Now-playing backend selected: %s", backend)
    if backend == "fake":
        return FakeNowPlayingService(DEMO_TRACKS).capabilities()
    return load_media_remote()


def format_state(state: PlaybackState) -> str:
    if not state.controls_enabled:
        return state.track
    marker = "playing" if state.is_playing else "paused"
    artist = f" - {state.artist}" if state.artist else ""
    return (
        f"[{marker}] {state.track}{artist} "
        f"({state.active_source}, {_format_time(state.elapsed_seconds)})"
    )


def _format_time(seconds: float | None) -> str:
    if seconds is None or seconds < 0:
        return "--:--"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


async def _print_event(event: object) -> None:
    if isinstance(event, PlaybackStateChanged):
        print(format_state(event.state), flush=True)
    elif isinstance(event, CommandCompleted):
        outcome = event.outcome
        status = "ok" if outcome.ok else "failed"
        detail = f": {outcome.detail}" if outcome.detail else ""
        print(f"{type(outcome.command).__name__} {status} via {outcome.path}{detail}")


async def _watch(session: NowPlayingSession, duration: float | None) -> int:
    await session.start()
    try:
        if duration is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(duration)
    finally:
        await session.shutdown()
    return 0


async def _control(
    session: NowPlayingSession,
    action: str,
    *,
    delta: float | None,
    seek_mode: bool | None,
) -> int:
    try:
        return await _dispatch_action(session, action, delta=delta, seek_mode=seek_mode)
    finally:
        await session.shutdown()


async def _dispatch_action(
    session: NowPlayingSession,
    action: str,
    *,
    delta: float | None,
    seek_mode: bool | None,
) -> int:
    state = await session.monitor.refresh()
    if action == "open":
        return 0 if await session.open_current_source() else 1
    if action == "toggle":
        outcome = await session.toggle_play_pause()
    elif action == "previous":
        outcome = await session.previous(seek_mode=seek_mode)
    elif action == "next":
        outcome = await session.next(seek_mode=seek_mode)
    else:
        if delta is None:
            source = state.active_source
            delta = (
                profile_for(source).seek_step_seconds
                if source is not None
                else DEFAULT_SEEK_STEP_S
            )
        outcome = await session.seek(delta)
    return 0 if outcome is not None and outcome.ok else 1


def _seek_mode(path: Path, action: str) -> int:
    preferences, notice = load_preferences_with_notice(path)
    if notice:
        print(notice, file=sys.stderr)
    if action != "show":
        if action == "toggle":
            enabled = not preferences.seek_mode
        else:
            enabled = action == "on"
        preferences = replace(preferences, seek_mode=enabled)
        save_preferences(path, preferences)
        logger.info("Seek mode %s", "enabled" if enabled else "disabled")
    print(f"seek mode: {'on' if preferences.seek_mode else 'off'}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        level = resolve_log_level(verbose=args.verbose, quiet=args.quiet)
        setup_logging(
            log_dir=log_dir(),
            level=level,
            log_file=Path(args.log_file) if args.log_file else None,
        )
        command = args.command or "watch"
        logger.info("Starting notchplay %s", command)
        if command == "doctor":
            report = run_doctor(args.backend)
            print(render_report(report))
            return report.exit_code
        if command == "seek-mode":
            return _seek_mode(preferences_path(), args.action)

        interval = (
            normalize_poll_interval(args.interval)
            if args.interval is not None
            else default_poll_interval()
        )
        session = NowPlayingSession(
            capabilities=build_capabilities(args.backend),
            preferences_path=preferences_path(),
            emit_event=_print_event,
            poll_interval_s=interval,
        )
        if command == "control":
            return asyncio.run(
                _control(
                    session,
                    args.action,
                    delta=args.delta,
                    seek_mode=args.seek_mode,
                )
            )
        try:
            return asyncio.run(_watch(session, getattr(args, "duration", None)))
        except KeyboardInterrupt:
            logger.info("Interrupted; exiting.")
            return 0
    except Exception as exc:  # pragma: no cover - top-level safety net
        logger.exception("Unhandled error: %s", exc)
        print(
            "Unexpected error. Run `notchplay doctor` or re-run with --verbose.",
            file=sys.stderr,
        )
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
