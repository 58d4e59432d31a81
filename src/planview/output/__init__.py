"""
Output module - turns derived reports into something to read.

Presentation is kept apart from metric derivation:
- PlanRenderer: styled tree lines (rich Text) for the terminal
- render_text: the same tree as plain text
- render_json: derived reports as JSON for scripting

Usage:
    from planview.output import PlanRenderer, render_text

    derive_metrics(explain)
    print(render_text(explain))
"""

from planview.output.descriptions import DESCRIPTIONS, describe
from planview.output.formatting import DurationCategory, categorize_duration
from planview.output.renderers import PlanRenderer, render_json, render_text
from planview.output.styles import DEFAULT_STYLES, PLAIN_STYLES, StyleSheet

__all__ = [
    "PlanRenderer",
    "render_text",
    "render_json",
    "StyleSheet",
    "DEFAULT_STYLES",
    "PLAIN_STYLES",
    "DurationCategory",
    "categorize_duration",
    "DESCRIPTIONS",
    "describe",
]
