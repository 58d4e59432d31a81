"""
Tree renderer for derived EXPLAIN reports.

Turns a report whose metrics have been derived (see planview.metrics) into
styled terminal lines:

    ○ Total Cost: 20
    ○ Planning Time: <1 ms
    ○ Execution Time: 12.50 ms
    ┬
    │
    └─⌠ Hash Join  slowest   costliest
      │ Joins to record sets by hashing one of them (using a Hash
      │ Scan).
      │ ○ Duration: 8.00 ms (64%)
      ...

Each line is a rich Text so colour can be dropped without touching layout:
render_text() gives plain text, the CLI prints the Text lines as they are.
Rendering only reads the tree, so rendering twice gives identical output.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from rich.text import Text

from planview.config import Config, get_config
from planview.output.descriptions import describe
from planview.output.formatting import categorize_duration, comma, commaf, percent, wrap
from planview.output.styles import DEFAULT_STYLES, PLAIN_STYLES, StyleSheet

if TYPE_CHECKING:
    from collections.abc import Sequence

    from planview.parser.models import Explain, PlanNode


class PlanRenderer:
    """
    Renders one derived report as a list of styled lines.

    Args:
        styles: Colour strategy. Defaults to DEFAULT_STYLES, or PLAIN_STYLES
            when the config disables colour.
        config: Wrap width, tag threshold and duration units. Defaults to
            get_config().
    """

    def __init__(
        self,
        styles: StyleSheet | None = None,
        config: Config | None = None,
    ) -> None:
        self.config = config or get_config()
        if styles is None:
            styles = DEFAULT_STYLES if self.config.color else PLAIN_STYLES
        self.styles = styles

    def render(self, explain: "Explain") -> list[Text]:
        """All lines for one report: header followed by the plan tree."""
        out: list[Text] = []
        self.write_explain(out, explain)
        return out

    # =========================================================================
    # Report header
    # =========================================================================

    def write_explain(self, out: list[Text], explain: "Explain") -> None:
        """Write the summary header, then the tree from the root down."""
        out.append(Text.assemble("○ Total Cost: ", commaf(explain.total_cost)))
        out.append(Text.assemble("○ Planning Time: ", self.format_duration(explain.planning_time)))
        out.append(Text.assemble("○ Execution Time: ", self.format_duration(explain.execution_time)))
        out.append(self.styles.text("┬", "prefix"))

        # A root with exactly one child is drawn as a last child so the rail
        # closes under it.
        self.write_plan(out, explain, explain.plan, "", 0, len(explain.plan.plans) == 1)

    # =========================================================================
    # Plan tree
    # =========================================================================

    def write_plan(
        self,
        out: list[Text],
        explain: "Explain",
        plan: "PlanNode",
        prefix: str,
        depth: int,
        last_child: bool,
    ) -> None:
        """
        Write the block for `plan`, then recurse into its children.

        `prefix` is the rail drawn by the ancestors; it is extended here and
        handed down, never stored on the node.
        """
        styles = self.styles
        width = self.config.wrap_width
        closes = len(plan.plans) > 1 or last_child

        self._emit(out, prefix, styles.text("│", "prefix"))

        joint = "└" if closes else "├"
        self._emit(
            out,
            prefix,
            styles.text(f"{joint}─⌠", "prefix"),
            " ",
            styles.text(plan.node_type, "bold"),
            self.format_details(plan),
            " ",
            self.format_tags(plan),
        )

        prefix += "  " if closes else "│ "
        body = prefix + "│ "

        for line in wrap(describe(plan.node_type), width):
            self._emit(out, body, styles.text(line, "muted"))

        self._emit(
            out,
            body,
            "○ Duration: ",
            self.format_duration(plan.actual_duration),
            f" ({percent(plan.actual_duration, explain.execution_time)})",
        )
        self._emit(
            out,
            body,
            "○ Cost: ",
            commaf(plan.actual_cost),
            f" ({percent(plan.actual_cost, explain.total_cost)})",
        )
        self._emit(out, body, "○ Rows: ", comma(plan.actual_rows))

        detail = body + "  "

        if plan.join_type:
            self._emit(out, detail, plan.join_type, " ", styles.text("join", "muted"))

        if plan.relation_name:
            self._emit(
                out,
                detail,
                styles.text("on", "muted"),
                f" {plan.schema_name or ''}.{plan.relation_name}",
            )

        if plan.index_name:
            self._emit(out, detail, styles.text("using", "muted"), f" {plan.index_name}")

        if plan.index_cond:
            self._emit(out, detail, styles.text("condition", "muted"), f" {plan.index_cond}")

        if plan.filter:
            self._emit(
                out,
                detail,
                styles.text("filter", "muted"),
                f" {plan.filter} ",
                styles.text(f"[-{comma(plan.rows_removed_by_filter)} rows]", "muted"),
            )

        if plan.hash_cond:
            self._emit(out, detail, styles.text("on", "muted"), f" {plan.hash_cond}")

        if plan.cte_name:
            self._emit(out, detail, f"CTE {plan.cte_name}")

        direction = plan.planner_row_estimate_direction
        if plan.planner_row_estimate_factor != 0 and direction is not None:
            self._emit(
                out,
                detail,
                styles.text("rows", "muted"),
                f" {direction.value}estimated ",
                styles.text("by", "muted"),
                f" {plan.planner_row_estimate_factor:.2f}x",
            )

        if plan.output:
            for index, line in enumerate(wrap(" + ".join(plan.output), width)):
                self._emit(
                    out,
                    prefix,
                    styles.text(output_terminator(index, plan), "prefix"),
                    styles.text(line, "output"),
                )

        last = len(plan.plans) - 1
        for index, child in enumerate(plan.plans):
            self.write_plan(out, explain, child, prefix, depth + 1, index == last)

    # =========================================================================
    # Pieces
    # =========================================================================

    def format_duration(self, value: float) -> Text:
        text, category = categorize_duration(value, self.config.seconds_divisor)
        return self.styles.text(text, category.value)

    def format_details(self, plan: "PlanNode") -> Text:
        """Bracketed scan direction / strategy after the operator name."""
        details = [d for d in (plan.scan_direction, plan.strategy) if d]
        if not details:
            return Text()
        return self.styles.text(f" [{', '.join(details)}]", "muted")

    def format_tags(self, plan: "PlanNode") -> Text:
        tags: list[str] = []
        if plan.slowest:
            tags.append("slowest")
        if plan.costliest:
            tags.append("costliest")
        if plan.largest:
            tags.append("largest")
        if plan.planner_row_estimate_factor >= self.config.bad_estimate_threshold:
            tags.append("bad estimate")

        return Text(" ").join(self.styles.text(f" {tag} ", "tag") for tag in tags)

    def _emit(self, out: list[Text], prefix: str, *parts: str | Text) -> None:
        out.append(Text.assemble(self.styles.text(prefix, "prefix"), *parts))


def output_terminator(index: int, plan: "PlanNode") -> str:
    """Glyph leading each wrapped line of a node's projected output."""
    if index == 0:
        return "⌡► " if plan.is_leaf else "├►  "
    return "   " if plan.is_leaf else "│  "


# =============================================================================
# Convenience renderers
# =============================================================================


def render_text(explain: "Explain", config: Config | None = None) -> str:
    """Render one derived report as plain, undecorated text."""
    lines = PlanRenderer(styles=PLAIN_STYLES, config=config).render(explain)
    return "\n".join(line.plain for line in lines)


def render_json(explains: "Sequence[Explain]", indent: int = 2) -> str:
    """
    Render derived reports as JSON.

    Raw fields keep their EXPLAIN names; derived fields use their snake_case
    names alongside them.
    """
    payload = [e.model_dump(mode="json", by_alias=True) for e in explains]
    return json.dumps(payload, indent=indent)
