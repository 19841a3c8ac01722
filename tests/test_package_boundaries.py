"""Guardrail tests for package boundaries."""

from __future__ import annotations

import ast
from pathlib import Path

import pytest

pytestmark = pytest.mark.unit

TIMESERIES_DIR = Path(__file__).resolve().parent.parent / "timeseries"


def _imported_roots(path: Path) -> set[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"))
    roots: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            roots.update(alias.name.split(".")[0] for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module and node.level == 0:
            roots.add(node.module.split(".")[0])
    return roots


def test_timeseries_package_does_not_import_django_or_core() -> None:
    """Keep the time-series model free of Django and presentation code."""

    offenders = {
        path.name: sorted(_imported_roots(path) & {"django", "core", "mosjCharts"})
        for path in sorted(TIMESERIES_DIR.glob("*.py"))
    }

    assert {name: roots for name, roots in offenders.items() if roots} == {}
