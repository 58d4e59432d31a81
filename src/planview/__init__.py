"""planview - Annotated terminal trees for PostgreSQL EXPLAIN ANALYZE output."""

__version__ = "0.3.0"
__license__ = "MIT"

# Exception hierarchy (import first so other modules can use it)
from planview.exceptions import (
    PlanviewError,
    ParseError,
    ConfigurationError,
)

from planview.config import (
    Config,
    get_config,
    reset_config,
)
from planview.metrics import derive_metrics
from planview.output import (
    DEFAULT_STYLES,
    PLAIN_STYLES,
    PlanRenderer,
    StyleSheet,
    render_json,
    render_text,
)
from planview.parser import (
    EstimateDirection,
    Explain,
    NodeType,
    PlanNode,
    parse_explain_file,
    parse_explains,
)
from planview.visualizer import derive_all, visualize

__all__ = [
    # Exception hierarchy
    "PlanviewError",
    "ParseError",
    "ConfigurationError",
    # Core
    "parse_explains",
    "parse_explain_file",
    "derive_metrics",
    "derive_all",
    "visualize",
    # Models
    "Explain",
    "PlanNode",
    "NodeType",
    "EstimateDirection",
    # Rendering
    "PlanRenderer",
    "render_text",
    "render_json",
    "StyleSheet",
    "DEFAULT_STYLES",
    "PLAIN_STYLES",
    # Configuration
    "Config",
    "get_config",
    "reset_config",
    # Metadata
    "__version__",
    "__license__",
]
