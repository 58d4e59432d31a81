"""
Tests for the EXPLAIN JSON parser.

Test philosophy:
- Test the happy path (valid EXPLAIN outputs parse correctly)
- Test edge cases (missing optional fields, single-object input)
- Test error cases (invalid JSON, malformed EXPLAIN, resource limits)
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import FIXTURES_DIR, load_fixture, make_plan, make_report
from planview.parser import (
    Explain,
    NodeType,
    ParseError,
    ParserConfig,
    PlanNode,
    parse_explain_file,
    parse_explains,
)


# =============================================================================
# Happy Path Tests
# =============================================================================

class TestParseValidExplain:
    """Test parsing of valid EXPLAIN ANALYZE output."""

    def test_parse_single_seq_scan(self) -> None:
        """Raw fields are decoded through their EXPLAIN aliases."""
        explains = parse_explains(load_fixture("single_seq_scan"))

        assert len(explains) == 1
        explain = explains[0]
        assert isinstance(explain, Explain)
        assert explain.planning_time == 0.2
        assert explain.execution_time == 10.5

        plan = explain.plan
        assert isinstance(plan, PlanNode)
        assert plan.node_type == NodeType.SEQ_SCAN.value
        assert plan.relation_name == "users"
        assert plan.schema_name == "public"
        assert plan.actual_rows == 100
        assert plan.plan_rows == 50
        assert plan.total_cost == 20.0
        assert plan.filter == "(active IS TRUE)"
        assert plan.rows_removed_by_filter == 1500
        assert plan.output == ["id", "email"]

    def test_derived_fields_start_zeroed(self) -> None:
        """Nothing is derived at decode time."""
        explain = parse_explains(load_fixture("single_seq_scan"))[0]

        assert explain.total_cost == 0
        assert explain.max_rows == 0
        assert explain.plan.actual_cost == 0
        assert explain.plan.actual_duration == 0
        assert explain.plan.planner_row_estimate_factor == 0
        assert explain.plan.planner_row_estimate_direction is None
        assert not explain.plan.costliest

    def test_parse_nested_plan(self) -> None:
        """Children keep their input order."""
        explain = parse_explains(load_fixture("hash_join"))[0]

        assert explain.plan.node_type == "Hash Join"
        assert [c.relation_name for c in explain.plan.plans] == ["orders", "users"]
        assert len(explain.all_nodes) == 3

    def test_parse_from_path(self) -> None:
        explains = parse_explains(FIXTURES_DIR / "cte_scan.json")
        assert explains[0].plan.plans[0].cte_name == "recent"

    def test_parse_from_str_path(self) -> None:
        explains = parse_explains(str(FIXTURES_DIR / "cte_scan.json"))
        assert explains[0].plan.node_type == "Limit"

    def test_parse_from_bytes(self) -> None:
        data = json.dumps(load_fixture("limit_sort")).encode("utf-8")
        explains = parse_explains(data)
        assert explains[0].plan.plans[0].node_type == "Sort"

    def test_parse_from_string(self) -> None:
        explains = parse_explains(json.dumps(load_fixture("limit_sort")))
        assert explains[0].plan.node_type == "Limit"

    def test_parse_single_object(self) -> None:
        """A bare report object, decoded or as JSON text, is a batch of one."""
        inner = load_fixture("single_seq_scan")[0]

        assert len(parse_explains(inner)) == 1
        assert len(parse_explains(json.dumps(inner))) == 1

    @pytest.mark.parametrize("source", [[], "[]", b"  []\n"])
    def test_empty_array_is_empty_batch(self, source: object) -> None:
        assert parse_explains(source) == []

    def test_bracketed_file_name_needs_path(self, tmp_path: Path) -> None:
        """A str starting with '[' is JSON text; a Path is always a file."""
        path = tmp_path / "[2024]plan.json"
        path.write_text(json.dumps(load_fixture("limit_sort")))

        assert parse_explains(path)[0].plan.node_type == "Limit"
        assert parse_explain_file(str(path))[0].plan.node_type == "Limit"

    def test_parse_multiple_reports(self) -> None:
        """Every report in the array is decoded, in order."""
        batch = load_fixture("single_seq_scan") + load_fixture("hash_join")
        explains = parse_explains(batch)

        assert [e.plan.node_type for e in explains] == ["Seq Scan", "Hash Join"]

    def test_missing_numeric_fields_default_to_zero(self) -> None:
        explains = parse_explains([{"Plan": {"Node Type": "Result"}}])
        plan = explains[0].plan

        assert plan.actual_rows == 0
        assert plan.actual_loops == 0
        assert plan.total_cost == 0.0
        assert plan.plans == []
        assert explains[0].execution_time == 0.0

    def test_unknown_node_type_is_accepted(self) -> None:
        explains = parse_explains([make_report(make_plan("Gather Merge"))])
        assert explains[0].plan.node_type == "Gather Merge"

    def test_unknown_fields_are_kept(self) -> None:
        plan = make_plan("Seq Scan", Sort_Method="quicksort")
        explains = parse_explains([make_report(plan)])
        assert explains[0].plan.model_extra["Sort Method"] == "quicksort"

    def test_parse_explain_file(self) -> None:
        explains = parse_explain_file(FIXTURES_DIR / "nested_loop_verbose.json")
        index_scan = explains[0].find_nodes_by_type("Index Scan")[0]

        assert index_scan.actual_loops == 800
        assert index_scan.scan_direction == "Forward"


# =============================================================================
# Error Handling Tests
# =============================================================================

class TestParseErrors:
    """Malformed input always surfaces as ParseError."""

    def test_invalid_json(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_explains("[{not json")

        assert exc_info.value.source == "json_decode"
        assert "Invalid JSON" in exc_info.value.message

    def test_invalid_utf8_bytes(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_explains(b"\xff\xfe[")

        assert exc_info.value.source == "json_decode"

    def test_scalar_json(self) -> None:
        with pytest.raises(ParseError):
            parse_explains(b"42")

    @pytest.mark.parametrize(
        "text",
        [
            '[{"Plan": {"Node Type": "Seq Scan", "Total Cost": NaN}}]',
            '[{"Plan": {"Node Type": "Seq Scan"}, "Execution Time": Infinity}]',
            '[{"Plan": {"Node Type": "Seq Scan", "Actual Total Time": -Infinity}}]',
        ],
    )
    def test_non_finite_literals_rejected(self, text: str) -> None:
        """NaN and Infinity are not JSON and would break the outlier maxima."""
        with pytest.raises(ParseError) as exc_info:
            parse_explains(text)

        assert exc_info.value.source == "json_decode"
        assert "not a JSON number" in exc_info.value.detail

    def test_non_finite_decoded_values_rejected(self) -> None:
        plan = make_plan("Seq Scan", Total_Cost=float("nan"))

        with pytest.raises(ParseError) as exc_info:
            parse_explains([make_report(plan)])

        assert exc_info.value.source == "validation"

    def test_non_object_element(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_explains([make_report(make_plan()), "oops"])

        assert "index 1" in exc_info.value.message

    def test_missing_plan(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_explains([{"Planning Time": 1.0}])

        assert "Plan" in exc_info.value.message

    def test_validation_error_lists_location(self) -> None:
        plan = make_plan("Seq Scan", Actual_Rows="lots")
        with pytest.raises(ParseError) as exc_info:
            parse_explains([make_report(plan)])

        error = exc_info.value
        assert error.source == "validation"
        assert "Actual Rows" in error.detail

    def test_missing_node_type(self) -> None:
        with pytest.raises(ParseError):
            parse_explains([{"Plan": {"Total Cost": 1.0}}])

    def test_second_report_failure_fails_batch(self) -> None:
        """A batch is decoded completely or not at all."""
        good = make_report(make_plan())
        with pytest.raises(ParseError) as exc_info:
            parse_explains([good, {"Plan": {}}])

        assert "Report 1" in exc_info.value.message

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_explains(tmp_path / "nope.json")

        assert exc_info.value.source == "file_read"

    def test_parse_explain_file_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.json"
        path.write_text("   ")

        with pytest.raises(ParseError, match="empty"):
            parse_explain_file(path)

    def test_parse_explain_file_directory(self, tmp_path: Path) -> None:
        with pytest.raises(ParseError, match="not a file"):
            parse_explain_file(tmp_path)

    def test_str_includes_detail(self) -> None:
        error = ParseError("Broken", detail="line 1", source="json_decode")
        assert str(error) == "Broken\n\nDetails: line 1"
        assert error.to_dict()["source"] == "json_decode"


# =============================================================================
# Resource Limit Tests
# =============================================================================

class TestParserResourceLimits:
    """Resource limits reject pathological inputs."""

    def test_rejects_oversized_bytes(self) -> None:
        data = json.dumps([make_report(make_plan())]).encode() + b" " * 2048
        config = ParserConfig(max_file_size_mb=0.001)

        with pytest.raises(ParseError) as exc_info:
            parse_explains(data, config=config)

        assert exc_info.value.source == "resource_limit"

    def test_string_size_counts_utf8_bytes(self) -> None:
        """600 characters of '○' are 1,800 bytes, over a 1,024-byte limit."""
        text = json.dumps([make_report(make_plan(Filter="○" * 600))], ensure_ascii=False)
        config = ParserConfig(max_file_size_mb=1024 / (1024 * 1024))

        assert len(text) < 1024 < len(text.encode("utf-8"))
        with pytest.raises(ParseError, match="too large"):
            parse_explains(text, config=config)

    def test_rejects_oversized_file(self, tmp_path: Path) -> None:
        path = tmp_path / "large.json"
        path.write_text(json.dumps([make_report(make_plan())]) + " " * 2048)
        config = ParserConfig(max_file_size_mb=0.001)

        with pytest.raises(ParseError, match="too large"):
            parse_explains(path, config=config)

    def test_rejects_deep_tree(self) -> None:
        plan = make_plan("Result")
        for _ in range(10):
            plan = make_plan("Result", Plans=[plan])

        with pytest.raises(ParseError, match="deeply nested"):
            parse_explains([make_report(plan)], config=ParserConfig(max_depth=5))

    def test_rejects_too_many_nodes(self) -> None:
        plan = make_plan("Append", Plans=[make_plan() for _ in range(10)])

        with pytest.raises(ParseError, match="too large"):
            parse_explains([make_report(plan)], config=ParserConfig(max_nodes=5))

    def test_within_limits(self) -> None:
        plan = make_plan("Append", Plans=[make_plan() for _ in range(4)])
        explains = parse_explains([make_report(plan)], config=ParserConfig(max_nodes=5))
        assert len(explains[0].all_nodes) == 5
