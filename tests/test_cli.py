"""
CLI tests.

Run through typer's test runner; output assertions use --no-color so the
text is free of terminal escapes.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from conftest import FIXTURES_DIR
from planview import __version__
from planview.cli.main import app


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def fixture_path(name: str) -> str:
    return str(FIXTURES_DIR / f"{name}.json")


class TestVisualizeCommand:
    """planview visualize"""

    def test_prints_tree(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["visualize", fixture_path("hash_join"), "--no-color"])

        assert result.exit_code == 0
        assert "○ Total Cost: 20" in result.output
        assert "└─⌠ Hash Join" in result.output
        assert "  ├─⌠ Seq Scan" in result.output
        assert "on (orders.user_id = users.id)" in result.output

    def test_reads_stdin(self, runner: CliRunner) -> None:
        data = (FIXTURES_DIR / "limit_sort.json").read_bytes()

        result = runner.invoke(app, ["visualize", "-", "--no-color"], input=data)

        assert result.exit_code == 0
        assert "└─⌠ Limit" in result.output
        assert "⌡► u.id + u.name" in result.output

    def test_reads_stdin_without_argument(self, runner: CliRunner) -> None:
        data = (FIXTURES_DIR / "cte_scan.json").read_text()

        result = runner.invoke(app, ["visualize", "--no-color"], input=data)

        assert result.exit_code == 0
        assert "CTE recent" in result.output

    def test_multiple_reports_in_order(self, runner: CliRunner, tmp_path: Path) -> None:
        batch = json.loads((FIXTURES_DIR / "single_seq_scan.json").read_text())
        batch += json.loads((FIXTURES_DIR / "cte_scan.json").read_text())
        path = tmp_path / "batch.json"
        path.write_text(json.dumps(batch))

        result = runner.invoke(app, ["visualize", str(path), "--no-color"])

        assert result.exit_code == 0
        assert result.output.count("○ Total Cost:") == 2
        assert result.output.index("Seq Scan") < result.output.index("CTE Scan")

    def test_empty_array_prints_nothing(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["visualize", "-", "--no-color"], input=b"[]")

        assert result.exit_code == 0
        assert result.output == ""

    def test_nan_literal_exits_1(self, runner: CliRunner) -> None:
        data = b'[{"Plan": {"Node Type": "Seq Scan", "Total Cost": NaN}}]'

        result = runner.invoke(app, ["visualize", "-", "--no-color"], input=data)

        assert result.exit_code == 1
        assert "Invalid JSON format" in result.output
        assert "Total Cost" not in result.output

    def test_json_output(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["visualize", fixture_path("cte_scan"), "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload[0]["total_cost"] == 42.0
        assert payload[0]["Plan"]["Plans"][0]["CTE Name"] == "recent"

    def test_legacy_seconds(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "slow.json"
        path.write_text(json.dumps([{
            "Plan": {"Node Type": "Seq Scan", "Actual Total Time": 1500.0, "Actual Loops": 1},
            "Planning Time": 0.1,
            "Execution Time": 1500.0,
        }]))

        default = runner.invoke(app, ["visualize", str(path), "--no-color"])
        legacy = runner.invoke(app, ["visualize", str(path), "--no-color", "--legacy-seconds"])

        assert "○ Execution Time: 1.50 s" in default.output
        assert "○ Execution Time: 0.75 s" in legacy.output

    def test_wrap_width(self, runner: CliRunner) -> None:
        result = runner.invoke(
            app, ["visualize", fixture_path("single_seq_scan"), "--no-color", "-w", "30"]
        )

        assert result.exit_code == 0
        assert "│ │ Finds relevant records by\n" in result.output

    def test_invalid_json_exits_1(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("[{")

        result = runner.invoke(app, ["visualize", str(path)])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "Total Cost" not in result.output

    def test_missing_file_exits_1(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(app, ["visualize", str(tmp_path / "absent.json")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_bad_configuration_exits_2(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PLANVIEW_MAX_DEPTH", "0")

        result = runner.invoke(app, ["visualize", fixture_path("hash_join")])

        assert result.exit_code == 2
        assert "Configuration error:" in result.output


class TestDescribeCommand:
    """planview describe"""

    def test_known_operator(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["describe", "Hash Join"])

        assert result.exit_code == 0
        assert "Joins to record sets by hashing one of them" in result.output

    def test_unknown_operator(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["describe", "Gather Merge"])

        assert result.exit_code == 1
        assert "Unknown operator: Gather Merge" in result.output
        assert "Hashaggregate" in result.output


class TestGlobalOptions:

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"planview version {__version__}" in result.output

    def test_verbose_flag_accepted(self, runner: CliRunner) -> None:
        result = runner.invoke(
            app, ["--verbose", "visualize", fixture_path("limit_sort"), "--no-color"]
        )

        assert result.exit_code == 0
        assert "└─⌠ Limit" in result.output
