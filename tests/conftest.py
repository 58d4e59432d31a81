"""Shared fixtures for the planview test suite."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import pytest

from planview.config import reset_config

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> list[dict[str, Any]]:
    """Load a JSON fixture file."""
    path = FIXTURES_DIR / f"{name}.json"
    return json.loads(path.read_text())


def make_plan(node_type: str = "Seq Scan", **fields: Any) -> dict[str, Any]:
    """
    Build a raw EXPLAIN plan node dict.

    Keyword arguments use EXPLAIN key names with spaces replaced by
    underscores, e.g. make_plan(Total_Cost=5.0, Plans=[...]).
    """
    node: dict[str, Any] = {
        "Node Type": node_type,
        "Actual Loops": 1,
    }
    for key, value in fields.items():
        node[key.replace("_", " ")] = value
    return node


def make_report(plan: dict[str, Any], **fields: Any) -> dict[str, Any]:
    """Wrap a plan node in an EXPLAIN report object."""
    report: dict[str, Any] = {"Plan": plan, "Planning Time": 0.1, "Execution Time": 10.0}
    for key, value in fields.items():
        report[key.replace("_", " ")] = value
    return report


@pytest.fixture(autouse=True)
def clean_config(monkeypatch: pytest.MonkeyPatch):
    """Isolate every test from PLANVIEW_* variables in the caller's shell."""
    for key in list(os.environ):
        if key.startswith("PLANVIEW_"):
            monkeypatch.delenv(key)
    reset_config()
    yield
    reset_config()
