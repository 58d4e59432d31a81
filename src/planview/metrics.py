"""
Derived metrics for a decoded EXPLAIN report.

EXPLAIN reports cost and time *inclusively*: a node's figures cover its own
work plus everything below it. To see where a query actually spends its time
we need *exclusive* figures, planner estimate accuracy, and the tree-wide
outliers. derive_metrics() computes all of them in place:

1. process_plan() walks the tree post-order and, per node, computes the
   planner estimate, the exclusive cost/duration and updates the running
   tree-wide maxima.
2. calculate_outlier_nodes() walks the tree again and flags the nodes that
   match those maxima. It must only run once the first walk has finished,
   otherwise a node could be compared against a partial maximum.

Usage:
    from planview.metrics import derive_metrics

    for explain in parse_explains(path):
        derive_metrics(explain)
"""

from __future__ import annotations

import logging

from planview.parser.models import EstimateDirection, Explain, PlanNode

logger = logging.getLogger(__name__)


def derive_metrics(explain: Explain) -> None:
    """
    Fill in every derived field of the report and of each node in its tree.

    Call exactly once per decoded report: the tree total cost is a running
    sum and is never reset.
    """
    process_plan(explain, explain.plan)
    calculate_outlier_nodes(explain, explain.plan)

    logger.debug(
        "Derived metrics: total_cost=%.2f max_rows=%d max_cost=%.2f max_duration=%.3f",
        explain.total_cost,
        explain.max_rows,
        explain.max_cost,
        explain.max_duration,
    )


def process_plan(explain: Explain, plan: PlanNode) -> None:
    """Post-order walk: estimate, exclusive figures and maxima for each node."""
    for child in plan.plans:
        process_plan(explain, child)

    calculate_planner_estimate(plan)
    calculate_actuals(explain, plan)
    calculate_maximums(explain, plan)


def calculate_planner_estimate(plan: PlanNode) -> None:
    """
    Compare the planner's row estimate with the rows actually produced.

    The factor is always expressed as >= 1 with a direction: 200 estimated and
    100 produced is "Over by 2.00x". A factor of 0 means there is nothing to
    compare (no estimate, or no rows produced).
    """
    plan.planner_row_estimate_factor = 0.0
    plan.planner_row_estimate_direction = EstimateDirection.UNDER

    if plan.plan_rows != 0:
        plan.planner_row_estimate_factor = plan.actual_rows / plan.plan_rows

    if plan.planner_row_estimate_factor < 1.0:
        plan.planner_row_estimate_factor = 0.0
        plan.planner_row_estimate_direction = EstimateDirection.OVER
        if plan.actual_rows != 0:
            plan.planner_row_estimate_factor = plan.plan_rows / plan.actual_rows


def calculate_actuals(explain: Explain, plan: PlanNode) -> None:
    """
    Turn the node's inclusive cost/time into exclusive figures.

    CTE Scan children are not subtracted: the CTE is materialized once and
    its cost is already accounted for elsewhere in the tree.
    """
    duration = plan.actual_total_time
    cost = plan.total_cost

    for child in plan.plans:
        if not child.is_cte_scan:
            duration -= child.actual_total_time
            cost -= child.total_cost

    # Timing jitter across loops can push these below zero.
    plan.actual_cost = max(cost, 0.0)
    plan.actual_duration = max(duration, 0.0) * plan.actual_loops

    explain.total_cost += plan.actual_cost


def calculate_maximums(explain: Explain, plan: PlanNode) -> None:
    if explain.max_rows < plan.actual_rows:
        explain.max_rows = plan.actual_rows
    if explain.max_cost < plan.actual_cost:
        explain.max_cost = plan.actual_cost
    if explain.max_duration < plan.actual_duration:
        explain.max_duration = plan.actual_duration


def calculate_outlier_nodes(explain: Explain, plan: PlanNode) -> None:
    """
    Flag the nodes holding the tree-wide maxima.

    Exact equality is intended: each maximum was copied from some node's own
    value, and ties flag every tied node.
    """
    plan.costliest = plan.actual_cost == explain.max_cost
    plan.largest = plan.actual_rows == explain.max_rows
    plan.slowest = plan.actual_duration == explain.max_duration

    for child in plan.plans:
        calculate_outlier_nodes(explain, child)
