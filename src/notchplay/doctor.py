"""Runtime diagnostics for MediaRemote access and automation tooling."""

from __future__ import annotations

import importlib
import shutil
import sys
from dataclasses import dataclass
from typing import Literal

from notchplay.services.media_remote import MEDIA_REMOTE_PATH, load_media_remote

DoctorStatus = Literal["ok", "missing", "error"]


@dataclass(frozen=True)
class DoctorCheck:
    """One environment readiness check result."""

    name: str
    status: DoctorStatus
    required: bool
    detail: str
    hint: str | None = None


@dataclass(frozen=True)
class DoctorReport:
    """Collection of doctor checks and derived process exit contract."""

    backend: str
    checks: list[DoctorCheck]

    @property
    def exit_code(self) -> int:
        """Return non-zero when any required check failed or is missing."""
        for check in self.checks:
            if check.required and check.status != "ok":
                return 2
        return 0


def run_doctor(backend: str) -> DoctorReport:
    """Run diagnostics for the selected backend mode."""
    native = backend == "mediaremote"
    checks = [
        probe_pillow(),
        probe_pyobjc(required=native),
        probe_media_remote(required=native),
        probe_osascript(required=False),
    ]
    return DoctorReport(backend=backend, checks=checks)


def render_report(report: DoctorReport) -> str:
    """Render terminal-friendly diagnostics report text."""
    lines = [f"notchplay doctor (backend={report.backend})", ""]
    for check in report.checks:
        state = _status_token(check.status)
        req = "required" if check.required else "optional"
        lines.append(f"{state} {check.name:<12} [{req}] {check.detail}")
        if check.hint:
            lines.append(f"      hint: {check.hint}")
    lines.append("")
    lines.append("Result: OK" if report.exit_code == 0 else "Result: FAIL")
    return "\n".join(lines)


def probe_pillow() -> DoctorCheck:
    """Verify Pillow is importable for artwork decoding."""
    try:
        module = importlib.import_module("PIL")
    except Exception as exc:
        return DoctorCheck(
            name="pillow",
            status="missing",
            required=True,
            detail=f"not importable ({exc.__class__.__name__})",
            hint="Install Python dependencies (pip install notchplay).",
        )
    version = getattr(module, "__version__", None)
    detail = f"importable ({version})" if version else "importable"
    return DoctorCheck(name="pillow", status="ok", required=True, detail=detail)


def probe_pyobjc(*, required: bool) -> DoctorCheck:
    """Verify the PyObjC bridge and libdispatch bindings import."""
    if sys.platform != "darwin":
        return DoctorCheck(
            name="pyobjc",
            status="missing",
            required=required,
            detail=f"not supported on {sys.platform}",
            hint="MediaRemote access requires macOS; use --backend fake elsewhere.",
        )
    try:
        objc = importlib.import_module("objc")
        importlib.import_module("Foundation")
        importlib.import_module("dispatch")
    except Exception as exc:
        return DoctorCheck(
            name="pyobjc",
            status="missing",
            required=required,
            detail=f"import failed ({exc.__class__.__name__})",
            hint="Install pyobjc-framework-Cocoa and pyobjc-framework-libdispatch.",
        )
    version = getattr(objc, "__version__", "unknown")
    return DoctorCheck(
        name="pyobjc", status="ok", required=required, detail=f"pyobjc {version}"
    )


def probe_media_remote(*, required: bool) -> DoctorCheck:
    """Verify the MediaRemote entry points needed for observation resolve."""
    capabilities = load_media_remote()
    if not capabilities.available:
        return DoctorCheck(
            name="mediaremote",
            status="missing" if sys.platform != "darwin" else "error",
            required=required,
            detail="now-playing entry points unresolved",
            hint=f"Check that {MEDIA_REMOTE_PATH} exists on this system.",
        )
    extras = []
    if capabilities.send_command is None:
        extras.append("no transport commands")
    if capabilities.set_elapsed_time is None:
        extras.append("no elapsed-time writes")
    if capabilities.client_from_data is None:
        extras.append("bundle ids inferred")
    detail = "loaded" + (f" ({', '.join(extras)})" if extras else "")
    return DoctorCheck(name="mediaremote", status="ok", required=required, detail=detail)


def probe_osascript(*, required: bool) -> DoctorCheck:
    """Verify osascript is present for browser seek automation."""
    path = shutil.which("osascript")
    if path is None:
        return DoctorCheck(
            name="osascript",
            status="missing",
            required=required,
            detail="binary not found on PATH",
            hint="Browser seeking falls back to failure without osascript.",
        )
    return DoctorCheck(
        name="osascript", status="ok", required=required, detail=f"found at {path}"
    )


def _status_token(status: DoctorStatus) -> str:
    if status == "ok":
        return "[OK]"
    if status == "missing":
        return "[MISS]"
    return "[ERR]"
