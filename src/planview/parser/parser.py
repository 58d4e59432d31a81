"""
Decoding of PostgreSQL EXPLAIN (ANALYZE, FORMAT JSON) output.

EXPLAIN emits an array with one object per statement:

    [{"Plan": {"Node Type": "Limit", ..., "Plans": [...]}, "Execution Time": 0.4}]

parse_explains() turns that into a list of Explain models. The whole batch is
decoded and checked before anything is returned, so callers never see half a
batch: any problem is a ParseError.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from planview.exceptions import ParseError
from planview.parser.config import DEFAULT_CONFIG, ParserConfig
from planview.parser.models import Explain

if TYPE_CHECKING:
    from typing import Any

    Source = bytes | str | Path | dict[str, Any] | list[Any]

logger = logging.getLogger(__name__)

_JSON_START = ("[", "{")


def parse_explains(
    source: "Source",
    config: ParserConfig | None = None,
) -> list[Explain]:
    """
    Decode a batch of EXPLAIN reports.

    Args:
        source: Raw bytes, a JSON string, a path (Path, or a str that does
            not start with '[' or '{'), a decoded list of reports, or a
            single report object which is treated as a batch of one.
            A str starting with '[' or '{' (after leading whitespace) is
            always decoded as JSON, so a file named like "[2024]plan.json"
            must be passed as a Path or through parse_explain_file().
        config: Resource limits. Defaults to DEFAULT_CONFIG. The size limit
            counts UTF-8 bytes for both bytes and str input.

    Returns:
        One Explain per report, in input order, with derived fields zeroed.
        An empty array gives an empty list.

    Raises:
        ParseError: On unreadable input, invalid JSON, a wrong shape, a
            report that fails validation, or a resource limit.

    Example:
        >>> explains = parse_explains(Path("explain.json"))
        >>> explains = parse_explains('[{"Plan": {"Node Type": "Result"}}]')
    """
    config = config or DEFAULT_CONFIG

    if isinstance(source, str) and not source.lstrip().startswith(_JSON_START):
        source = Path(source)

    if isinstance(source, Path):
        source = _read_path(source, config)

    if isinstance(source, str):
        source = source.encode("utf-8")

    if isinstance(source, bytes):
        _check_size(len(source), config)
        data = _decode(source)
    elif isinstance(source, (dict, list)):
        data = source
    else:
        raise ParseError(
            f"Unsupported source type: {type(source).__name__}",
            detail="Expected bytes, a file path, a JSON string, a dict or a list",
            source="type_check",
        )

    explains = [
        _build_report(report, index, config)
        for index, report in enumerate(_reports(data))
    ]
    logger.debug("Decoded %d EXPLAIN report(s)", len(explains))
    return explains


def parse_explain_file(path: str | Path, config: ParserConfig | None = None) -> list[Explain]:
    """
    Decode the EXPLAIN reports stored in `path`.

    Unlike parse_explains(), a str argument is always a path here.
    """
    config = config or DEFAULT_CONFIG
    return parse_explains(_read_path(Path(path), config), config=config)


# =============================================================================
# Loading
# =============================================================================

def _read_path(path: Path, config: ParserConfig) -> bytes:
    if not path.exists():
        raise ParseError(f"File not found: {path}", source="file_read")
    if not path.is_file():
        raise ParseError(f"Path is not a file: {path}", source="file_read")

    try:
        _check_size(path.stat().st_size, config)
        raw = path.read_bytes()
    except OSError as e:
        raise ParseError(f"Cannot read file: {path}", detail=str(e), source="file_read") from e

    if not raw.strip():
        raise ParseError(f"File is empty: {path}", source="file_read")
    return raw


def _check_size(size_bytes: int, config: ParserConfig) -> None:
    size_mb = size_bytes / (1024 * 1024)
    if size_mb > config.max_file_size_mb:
        raise ParseError(
            f"Input too large: {size_mb:.1f}MB (max {config.max_file_size_mb}MB)",
            detail="Trim the EXPLAIN output or raise max_file_size_mb",
            source="resource_limit",
        )


def _reject_constant(name: str) -> Any:
    raise ParseError(
        "Invalid JSON format",
        detail=f"{name} is not a JSON number",
        source="json_decode",
    )


def _decode(raw: bytes) -> Any:
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError("Input is not valid UTF-8", detail=str(e), source="json_decode") from e

    try:
        return json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise ParseError(
            "Invalid JSON format",
            detail=f"Line {e.lineno}, column {e.colno}: {e.msg}",
            source="json_decode",
        ) from e


def _reports(data: Any) -> list[dict[str, Any]]:
    """
    The report objects in decoded JSON.

    A lone object is a batch of one; an empty array is an empty batch.
    """
    if isinstance(data, dict):
        return [data]

    if not isinstance(data, list):
        raise ParseError(
            f"Expected JSON array or object, got {type(data).__name__}",
            source="json_decode",
        )

    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ParseError(
                f"Expected object at index {index}, got {type(item).__name__}",
                source="structure",
            )
    return data


# =============================================================================
# Validation
# =============================================================================

def _build_report(data: dict[str, Any], index: int, config: ParserConfig) -> Explain:
    if "Plan" not in data:
        raise ParseError(
            f"Report {index}: missing 'Plan' field - this doesn't look like EXPLAIN output",
            detail="Run EXPLAIN with (ANALYZE, FORMAT JSON)",
            source="validation",
        )

    # Checked on the raw dicts so pydantic never recurses past the limit.
    depth = _plan_depth(data["Plan"], config.max_depth)
    if depth > config.max_depth:
        raise ParseError(
            f"Report {index}: plan too deeply nested: depth {depth} (max {config.max_depth})",
            source="resource_limit",
        )

    try:
        explain = Explain.model_validate(data)
    except ValidationError as e:
        raise ParseError(
            f"Report {index}: EXPLAIN output validation failed",
            detail="\n".join(
                f"  {'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ),
            source="validation",
        ) from e

    node_count = len(explain.all_nodes)
    if node_count > config.max_nodes:
        raise ParseError(
            f"Report {index}: plan too large: {node_count:,} nodes (max {config.max_nodes:,})",
            source="resource_limit",
        )
    return explain


def _plan_depth(plan: Any, limit: int) -> int:
    """Depth of a raw plan dict, counting the root as 1; stops past `limit`."""
    deepest = 0
    stack = [(plan, 1)]
    while stack:
        node, depth = stack.pop()
        if not isinstance(node, dict):
            continue
        deepest = max(deepest, depth)
        if deepest > limit:
            break
        children = node.get("Plans")
        if isinstance(children, list):
            stack.extend((child, depth + 1) for child in children)
    return deepest
