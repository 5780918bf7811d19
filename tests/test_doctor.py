"""Tests for environment diagnostics probes and report behavior."""

from __future__ import annotations

import types

import notchplay.doctor as doctor_module
from notchplay.services.fake_backend import FakeNowPlayingService
from notchplay.services.now_playing_backend import UNAVAILABLE


def _check(name: str, status: str, required: bool) -> doctor_module.DoctorCheck:
    return doctor_module.DoctorCheck(
        name=name,
        status=status,  # type: ignore[arg-type]
        required=required,
        detail="detail",
    )


def _patch_probes(monkeypatch, *, media_remote: str, osascript: str = "ok") -> None:
    monkeypatch.setattr(
        doctor_module, "probe_pillow", lambda: _check("pillow", "ok", True)
    )
    monkeypatch.setattr(
        doctor_module,
        "probe_pyobjc",
        lambda **kwargs: _check("pyobjc", media_remote, kwargs["required"]),
    )
    monkeypatch.setattr(
        doctor_module,
        "probe_media_remote",
        lambda **kwargs: _check("mediaremote", media_remote, kwargs["required"]),
    )
    monkeypatch.setattr(
        doctor_module,
        "probe_osascript",
        lambda **kwargs: _check("osascript", osascript, kwargs["required"]),
    )


def test_fake_backend_tolerates_missing_media_remote(monkeypatch) -> None:
    _patch_probes(monkeypatch, media_remote="missing", osascript="missing")
    assert doctor_module.run_doctor("fake").exit_code == 0


def test_mediaremote_backend_fails_when_framework_missing(monkeypatch) -> None:
    _patch_probes(monkeypatch, media_remote="missing")
    assert doctor_module.run_doctor("mediaremote").exit_code == 2


def test_missing_osascript_is_optional(monkeypatch) -> None:
    _patch_probes(monkeypatch, media_remote="ok", osascript="missing")
    assert doctor_module.run_doctor("mediaremote").exit_code == 0


def test_probe_osascript_missing(monkeypatch) -> None:
    monkeypatch.setattr(doctor_module.shutil, "which", lambda _name: None)
    check = doctor_module.probe_osascript(required=False)
    assert check.status == "missing"
    assert check.required is False


def test_probe_pillow_ok(monkeypatch) -> None:
    fake = types.SimpleNamespace(__version__="10.4.0")
    monkeypatch.setattr(doctor_module.importlib, "import_module", lambda name: fake)
    check = doctor_module.probe_pillow()
    assert check.status == "ok"
    assert "10.4.0" in check.detail


def test_probe_pyobjc_off_macos(monkeypatch) -> None:
    monkeypatch.setattr(doctor_module.sys, "platform", "linux")
    check = doctor_module.probe_pyobjc(required=True)
    assert check.status == "missing"
    assert check.hint is not None


def test_probe_media_remote_reports_degraded_features(monkeypatch) -> None:
    capabilities = FakeNowPlayingService().capabilities(
        resolve_bundle_ids=False, allow_elapsed_writes=False
    )
    monkeypatch.setattr(doctor_module, "load_media_remote", lambda: capabilities)
    check = doctor_module.probe_media_remote(required=True)
    assert check.status == "ok"
    assert "no elapsed-time writes" in check.detail
    assert "bundle ids inferred" in check.detail


def test_probe_media_remote_unavailable(monkeypatch) -> None:
    monkeypatch.setattr(doctor_module, "load_media_remote", lambda: UNAVAILABLE)
    check = doctor_module.probe_media_remote(required=True)
    assert check.status != "ok"


def test_render_report_includes_result_and_hint() -> None:
    report = doctor_module.DoctorReport(
        backend="mediaremote",
        checks=[
            doctor_module.DoctorCheck(
                name="mediaremote",
                status="error",
                required=True,
                detail="now-playing entry points unresolved",
                hint="Check the framework path.",
            )
        ],
    )
    text = doctor_module.render_report(report)
    assert "notchplay doctor (backend=mediaremote)" in text
    assert "[ERR] mediaremote" in text
    assert "hint: Check the framework path." in text
    assert "Result: FAIL" in text
