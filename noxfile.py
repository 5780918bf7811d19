"""Nox sessions for lint, type checking and the test suite."""

from __future__ import annotations

import nox

nox.options.sessions = ["lint", "typecheck", "tests"]


@nox.session
def lint(session: nox.Session) -> None:
    """Check lint and formatting without touching files."""
    session.install("ruff")
    session.run("ruff", "check", "src", "tests")
    session.run("ruff", "format", "--check", "src", "tests")


@nox.session(name="lint-fix")
def lint_fix(session: nox.Session) -> None:
    session.install("ruff")
    session.run("ruff", "check", "--fix", "src", "tests")
    session.run("ruff", "format", "src", "tests")


@nox.session
def typecheck(session: nox.Session) -> None:
    """Run mypy over the notchplay package."""
    session.install("mypy")
    session.install("-e", ".")
    session.run("mypy", "src/notchplay")


@nox.session
def tests(session: nox.Session) -> None:
    """Run the pytest suite; everything runs against the in-memory fake."""
    session.install("-e", ".[test]")
    session.run("pytest", *session.posargs)


@nox.session(python=False)
def local(session: nox.Session) -> None:
    """Run the toolchain from the current environment (no virtualenv)."""
    session.run("ruff", "check", "--fix", "src", "tests", external=True)
    session.run("ruff", "format", "src", "tests", external=True)
    session.run("mypy", "src/notchplay", external=True)
    session.run("pytest", external=True)
