"""
Pydantic models for PostgreSQL EXPLAIN (ANALYZE, FORMAT JSON) output.

The structure is:
- Explain: one report, holding the root plan node and timing info
- PlanNode: recursive structure representing each operator in the plan tree

PostgreSQL EXPLAIN JSON uses "Title Case" keys, which we convert to snake_case
via Pydantic aliases for Pythonic access.

Both models also carry *derived* fields (exclusive cost and duration, planner
estimate accuracy, outlier flags, tree-wide totals). They are zero-valued after
decoding and filled in by planview.metrics.derive_metrics().

Reference: https://www.postgresql.org/docs/current/using-explain.html
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NodeType(str, Enum):
    """
    Plan node types planview knows how to describe.

    Not exhaustive - PlanNode.node_type stays a plain string so that any other
    operator still decodes and renders (without a description).
    """
    LIMIT = "Limit"
    APPEND = "Append"
    SORT = "Sort"
    NESTED_LOOP = "Nested Loop"
    MERGE_JOIN = "Merge Join"
    HASH = "Hash"
    HASH_JOIN = "Hash Join"
    AGGREGATE = "Aggregate"
    HASH_AGGREGATE = "Hashaggregate"
    SEQ_SCAN = "Seq Scan"
    INDEX_SCAN = "Index Scan"
    INDEX_ONLY_SCAN = "Index Only Scan"
    BITMAP_HEAP_SCAN = "Bitmap Heap Scan"
    BITMAP_INDEX_SCAN = "Bitmap Index Scan"
    CTE_SCAN = "CTE Scan"


class EstimateDirection(str, Enum):
    """Whether the planner predicted too many or too few rows."""
    OVER = "Over"
    UNDER = "Under"


class PlanNode(BaseModel):
    """
    Represents a single operator node in the query execution plan.

    This is a recursive structure - each node owns its child nodes in the
    `plans` field. Nodes keep no reference to their parent.

    Fields are divided into:
    - Raw fields: decoded from EXPLAIN, never modified afterwards
    - Derived fields: computed by the metric deriver
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        allow_inf_nan=False,
    )

    # =========================================================================
    # Raw fields
    # =========================================================================

    node_type: str = Field(
        ...,
        alias="Node Type",
        description="The type of plan node (e.g., 'Seq Scan', 'Hash Join')",
    )

    startup_cost: float = Field(default=0.0, alias="Startup Cost")
    total_cost: float = Field(
        default=0.0,
        alias="Total Cost",
        description="Estimated cost to return all rows, including children",
    )
    plan_rows: int = Field(
        default=0,
        alias="Plan Rows",
        description="Planner's estimate of rows returned",
    )
    plan_width: int = Field(default=0, alias="Plan Width")

    actual_startup_time: float = Field(default=0.0, alias="Actual Startup Time")
    actual_total_time: float = Field(
        default=0.0,
        alias="Actual Total Time",
        description="Time in ms per loop, including children",
    )
    actual_rows: int = Field(default=0, alias="Actual Rows")
    actual_loops: int = Field(
        default=0,
        alias="Actual Loops",
        description="Number of times this node was executed",
    )

    parent_relationship: str | None = Field(default=None, alias="Parent Relationship")
    join_type: str | None = Field(default=None, alias="Join Type")
    relation_name: str | None = Field(default=None, alias="Relation Name")
    schema_name: str | None = Field(default=None, alias="Schema")
    alias: str | None = Field(default=None, alias="Alias")
    index_name: str | None = Field(default=None, alias="Index Name")
    index_cond: str | None = Field(default=None, alias="Index Cond")
    hash_cond: str | None = Field(default=None, alias="Hash Cond")
    filter: str | None = Field(default=None, alias="Filter")
    rows_removed_by_filter: int = Field(default=0, alias="Rows Removed by Filter")
    rows_removed_by_index_recheck: int = Field(
        default=0, alias="Rows Removed by Index Recheck"
    )
    cte_name: str | None = Field(default=None, alias="CTE Name")
    scan_direction: str | None = Field(default=None, alias="Scan Direction")
    strategy: str | None = Field(default=None, alias="Strategy")
    heap_fetches: int = Field(default=0, alias="Heap Fetches")
    group_key: list[str] | None = Field(default=None, alias="Group Key")
    output: list[str] | None = Field(
        default=None,
        alias="Output",
        description="Projected expressions (VERBOSE only)",
    )

    # Buffer statistics (BUFFERS option)
    shared_hit_blocks: int = Field(default=0, alias="Shared Hit Blocks")
    shared_read_blocks: int = Field(default=0, alias="Shared Read Blocks")
    shared_dirtied_blocks: int = Field(default=0, alias="Shared Dirtied Blocks")
    shared_written_blocks: int = Field(default=0, alias="Shared Written Blocks")
    local_hit_blocks: int = Field(default=0, alias="Local Hit Blocks")
    local_read_blocks: int = Field(default=0, alias="Local Read Blocks")
    local_dirtied_blocks: int = Field(default=0, alias="Local Dirtied Blocks")
    local_written_blocks: int = Field(default=0, alias="Local Written Blocks")
    temp_read_blocks: int = Field(default=0, alias="Temp Read Blocks")
    temp_written_blocks: int = Field(default=0, alias="Temp Written Blocks")
    io_read_time: float = Field(default=0.0, alias="I/O Read Time")
    io_write_time: float = Field(default=0.0, alias="I/O Write Time")

    plans: list[PlanNode] = Field(
        default_factory=list,
        alias="Plans",
        description="Child plan nodes, in execution order",
    )

    # =========================================================================
    # Derived fields
    # =========================================================================

    actual_cost: float = Field(
        default=0.0,
        description="Exclusive cost: this node's own share of total_cost",
    )
    actual_duration: float = Field(
        default=0.0,
        description="Exclusive duration in ms, scaled by loop count",
    )
    planner_row_estimate_factor: float = Field(
        default=0.0,
        description="Estimate accuracy, >= 1 or 0 when there is no signal",
    )
    planner_row_estimate_direction: EstimateDirection | None = None
    costliest: bool = False
    slowest: bool = False
    largest: bool = False

    @property
    def is_cte_scan(self) -> bool:
        return self.node_type == NodeType.CTE_SCAN.value

    @property
    def is_leaf(self) -> bool:
        return not self.plans

    def iter_nodes(self) -> "list[PlanNode]":
        """All nodes of this subtree, depth-first, parents before children."""
        nodes = [self]
        for child in self.plans:
            nodes.extend(child.iter_nodes())
        return nodes


class Explain(BaseModel):
    """
    One EXPLAIN report.

    PostgreSQL returns EXPLAIN JSON as an array of these objects (one per
    statement). The tree-wide fields at the bottom are only meaningful after
    derive_metrics() has run over the whole plan.

    Usage:
        explains = parse_explains(Path("explain.json"))
        for explain in explains:
            derive_metrics(explain)
            print(explain.total_cost, explain.max_duration)
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        allow_inf_nan=False,
    )

    plan: PlanNode = Field(
        ...,
        alias="Plan",
        description="Root node of the execution plan tree",
    )

    planning_time: float = Field(
        default=0.0,
        alias="Planning Time",
        description="Time spent planning the query in milliseconds",
    )

    execution_time: float = Field(
        default=0.0,
        alias="Execution Time",
        description="Total execution time in milliseconds",
    )

    query_text: str | None = Field(default=None, alias="Query Text")

    triggers: list[dict[str, Any]] | None = Field(default=None, alias="Triggers")

    # =========================================================================
    # Derived, tree-wide
    # =========================================================================

    total_cost: float = Field(
        default=0.0,
        description="Sum of every node's exclusive cost",
    )
    max_rows: int = 0
    max_cost: float = 0.0
    max_duration: float = 0.0

    @property
    def all_nodes(self) -> list[PlanNode]:
        """Get all nodes in the plan tree as a flat list."""
        return self.plan.iter_nodes()

    def find_nodes_by_type(self, node_type: str) -> list[PlanNode]:
        """Find all nodes of a specific type."""
        return [n for n in self.all_nodes if n.node_type == node_type]
