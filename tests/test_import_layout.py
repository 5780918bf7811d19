"""Regression tests for the services package import convention."""

from __future__ import annotations

import ast
from pathlib import Path

SERVICES_DIR = Path(__file__).resolve().parents[1] / "src/notchplay/services"


def test_services_import_siblings_absolutely() -> None:
    modules = sorted(SERVICES_DIR.glob("*.py"))
    assert modules
    for module in modules:
        parsed = ast.parse(module.read_text(encoding="utf-8"))
        for node in ast.walk(parsed):
            if isinstance(node, ast.ImportFrom):
                assert node.level == 0, (
                    f"{module.name} uses a relative import of '{node.module}'"
                )
