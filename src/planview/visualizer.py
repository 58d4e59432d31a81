"""
Top-level pipeline: decode a batch, derive each report, print each tree.

The CLI is a thin adapter around visualize(); library users can call it with
their own rich Console (e.g. one recording to a file).

Usage:
    from rich.console import Console
    from planview.visualizer import visualize

    visualize(Path("explain.json").read_bytes(), Console())
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.console import Console

from planview.config import Config, get_config
from planview.metrics import derive_metrics
from planview.output.renderers import PlanRenderer
from planview.parser.parser import parse_explains

if TYPE_CHECKING:
    from planview.output.styles import StyleSheet
    from planview.parser.models import Explain
    from planview.parser.parser import Source

logger = logging.getLogger(__name__)


def derive_all(source: "Source", config: Config | None = None) -> list["Explain"]:
    """
    Decode every report in `source` and derive its metrics.

    Decoding happens for the whole batch first, so a malformed batch raises
    ParseError before any report is touched.
    """
    config = config or get_config()
    explains = parse_explains(source, config=config.parser_config())
    for explain in explains:
        derive_metrics(explain)
    return explains


def visualize(
    source: "Source",
    console: Console | None = None,
    *,
    config: Config | None = None,
    styles: "StyleSheet | None" = None,
) -> list["Explain"]:
    """
    Decode, derive and print every report in `source`, in order.

    Args:
        source: EXPLAIN JSON (bytes, string, path or decoded data)
        console: Where to print. Defaults to a stdout Console.
        config: Rendering and parser configuration. Defaults to get_config().
        styles: Colour strategy, passed through to PlanRenderer.

    Returns:
        The derived reports, for callers that want the numbers too.

    Raises:
        ParseError: If the batch does not decode. Nothing is printed.
    """
    config = config or get_config()
    console = console or Console()
    renderer = PlanRenderer(styles=styles, config=config)

    explains = derive_all(source, config=config)

    for index, explain in enumerate(explains):
        logger.debug("Rendering report %d (%d nodes)", index, len(explain.all_nodes))
        for line in renderer.render(explain):
            console.print(line, soft_wrap=True, highlight=False)

    return explains
