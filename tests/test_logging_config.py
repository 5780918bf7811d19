"""Tests for logging configuration and entrypoint wiring."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import SimpleNamespace

import notchplay.cli as cli_module
from notchplay.logging_utils import setup_logging


def _flush_root_handlers() -> None:
    for handler in logging.getLogger().handlers:
        flush = getattr(handler, "flush", None)
        if callable(flush):
            flush()


class _RestoreRoot:
    def __enter__(self) -> None:
        root = logging.getLogger()
        self._handlers = list(root.handlers)
        self._level = root.level

    def __exit__(self, *exc: object) -> None:
        root = logging.getLogger()
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()
        for handler in self._handlers:
            root.addHandler(handler)
        root.setLevel(self._level)


def test_setup_logging_default_path_writes_json(tmp_path) -> None:
    with _RestoreRoot():
        setup_logging(log_dir=tmp_path, level="INFO")
        logging.getLogger("notchplay.test").info(
            "default-log-path", extra={"artwork": b"\x89PNG"}
        )
        _flush_root_handlers()
        lines = (tmp_path / "notchplay.log").read_text(encoding="utf-8").splitlines()
    record = json.loads(lines[-1])
    assert record["message"] == "default-log-path"
    assert record["level"] == "INFO"
    assert record["context"] == {"artwork": "<4 bytes>"}


def test_setup_logging_custom_log_file_writes_log(tmp_path) -> None:
    custom_path = tmp_path / "custom" / "notchplay.log"
    with _RestoreRoot():
        setup_logging(log_dir=tmp_path, level="DEBUG", log_file=custom_path)
        logging.getLogger("notchplay.test").debug("custom-log-path")
        _flush_root_handlers()
        assert "custom-log-path" in custom_path.read_text(encoding="utf-8")


def test_setup_logging_quiets_pillow_debug(tmp_path) -> None:
    with _RestoreRoot():
        setup_logging(log_dir=tmp_path, level="DEBUG")
        assert logging.getLogger("PIL").level == logging.INFO


def _fake_parser(args: SimpleNamespace):
    class FakeParser:
        def parse_args(self, argv=None):
            del argv
            return args

    return lambda: FakeParser()


def test_cli_main_passes_effective_level_and_log_file(monkeypatch, tmp_path) -> None:
    args = SimpleNamespace(
        command="seek-mode",
        action="show",
        verbose=True,
        quiet=True,
        log_file=str(tmp_path / "cli.log"),
        backend="fake",
        interval=None,
    )
    captured: dict[str, object] = {}

    def fake_setup_logging(*, log_dir: Path, level: str, log_file: Path | None):
        captured["log_dir"] = log_dir
        captured["level"] = level
        captured["log_file"] = log_file

    monkeypatch.setattr(cli_module, "build_parser", _fake_parser(args))
    monkeypatch.setattr(cli_module, "setup_logging", fake_setup_logging)
    monkeypatch.setattr(cli_module, "log_dir", lambda: tmp_path / "logs")
    monkeypatch.setattr(cli_module, "preferences_path", lambda: tmp_path / "state.json")

    rc = cli_module.main()

    assert rc == 0
    assert captured["level"] == "WARNING"
    assert captured["log_file"] == tmp_path / "cli.log"


def test_cli_main_returns_nonzero_when_logging_setup_fails(
    monkeypatch, tmp_path, capsys
) -> None:
    args = SimpleNamespace(
        command=None,
        verbose=False,
        quiet=False,
        log_file=None,
        backend="fake",
        interval=None,
    )

    def fail_setup_logging(**kwargs):
        del kwargs
        raise OSError("cannot open log")

    monkeypatch.setattr(cli_module, "build_parser", _fake_parser(args))
    monkeypatch.setattr(cli_module, "setup_logging", fail_setup_logging)
    monkeypatch.setattr(cli_module, "log_dir", lambda: tmp_path / "logs")

    rc = cli_module.main()
    captured = capsys.readouterr()

    assert rc == 1
    assert "Unexpected error." in captured.err
