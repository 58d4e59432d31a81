"""EXPLAIN JSON parsing module."""

from planview.exceptions import ParseError
from planview.parser.config import DEFAULT_CONFIG, ParserConfig
from planview.parser.models import EstimateDirection, Explain, NodeType, PlanNode
from planview.parser.parser import parse_explain_file, parse_explains

__all__ = [
    "Explain",
    "PlanNode",
    "NodeType",
    "EstimateDirection",
    "parse_explains",
    "parse_explain_file",
    "ParseError",
    "ParserConfig",
    "DEFAULT_CONFIG",
]
