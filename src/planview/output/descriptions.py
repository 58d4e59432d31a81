"""Plain-English descriptions of plan operators, shown under each node."""

from __future__ import annotations

from types import MappingProxyType

from planview.parser.models import NodeType

DESCRIPTIONS: "MappingProxyType[NodeType, str]" = MappingProxyType({
    NodeType.APPEND: (
        "Used in a UNION to merge multiple record sets by appending them together."
    ),
    NodeType.LIMIT: "Returns a specified number of rows from a record set.",
    NodeType.SORT: "Sorts a record set based on the specified sort key.",
    NodeType.NESTED_LOOP: (
        "Merges two record sets by looping through every record in the first set "
        "and trying to find a match in the second set. All matching records are "
        "returned."
    ),
    NodeType.MERGE_JOIN: "Merges two record sets by first sorting them on a join key.",
    NodeType.HASH: (
        "Generates a hash table from the records in the input recordset. Hash is "
        "used by Hash Join."
    ),
    NodeType.HASH_JOIN: (
        "Joins to record sets by hashing one of them (using a Hash Scan)."
    ),
    NodeType.AGGREGATE: (
        "Groups records together based on a GROUP BY or aggregate function "
        "(e.g. sum())."
    ),
    NodeType.HASH_AGGREGATE: (
        "Groups records together based on a GROUP BY or aggregate function "
        "(e.g. sum()). Hash Aggregate uses a hash to first organize the records "
        "by a key."
    ),
    NodeType.SEQ_SCAN: (
        "Finds relevant records by sequentially scanning the input record set. "
        "When reading from a table, Seq Scans (unlike Index Scans) perform a "
        "single read operation (only the table is read)."
    ),
    NodeType.INDEX_SCAN: (
        "Finds relevant records based on an Index. Index Scans perform 2 read "
        "operations: one to read the index and another to read the actual value "
        "from the table."
    ),
    NodeType.INDEX_ONLY_SCAN: (
        "Finds relevant records based on an Index. Index Only Scans perform a "
        "single read operation from the index and do not read from the "
        "corresponding table."
    ),
    NodeType.BITMAP_HEAP_SCAN: (
        "Searches through the pages returned by the Bitmap Index Scan for "
        "relevant rows."
    ),
    NodeType.BITMAP_INDEX_SCAN: (
        "Uses a Bitmap Index (index which uses 1 bit per page) to find all "
        "relevant pages. Results of this node are fed to the Bitmap Heap Scan."
    ),
    NodeType.CTE_SCAN: (
        "Performs a sequential scan of Common Table Expression (CTE) query "
        "results. Note that results of a CTE are materialized (calculated and "
        "temporarily stored)."
    ),
})


def describe(node_type: str) -> str:
    """Description for an operator name, or "" for operators we don't know."""
    try:
        return DESCRIPTIONS[NodeType(node_type)]
    except ValueError:
        return ""
