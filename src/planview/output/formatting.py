"""
Value formatting shared by the report header and the tree renderer.

Durations are bucketed into good/warning/critical so the renderer can colour
them; numbers get thousands separators; free text is word-wrapped to a column.
"""

from __future__ import annotations

import textwrap
from decimal import Decimal
from enum import Enum

from planview.config import SECONDS_DIVISOR

MINUTES_DIVISOR = 60000.0


class DurationCategory(str, Enum):
    """How worrying a duration is. Values double as StyleSheet role names."""

    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


def categorize_duration(
    value: float,
    seconds_divisor: float = SECONDS_DIVISOR,
) -> tuple[str, DurationCategory]:
    """
    Format a duration given in milliseconds and classify it.

    Examples:
        >>> categorize_duration(0.5)
        ('<1 ms', <DurationCategory.GOOD: 'good'>)
        >>> categorize_duration(250)
        ('250.00 ms', <DurationCategory.WARNING: 'warning'>)
        >>> categorize_duration(90000)
        ('1.50 m', <DurationCategory.CRITICAL: 'critical'>)
    """
    if value < 1:
        return "<1 ms", DurationCategory.GOOD
    if value < 100:
        return f"{value:.2f} ms", DurationCategory.GOOD
    if value < 1000:
        return f"{value:.2f} ms", DurationCategory.WARNING
    if value < 60000:
        return f"{value / seconds_divisor:.2f} s", DurationCategory.CRITICAL
    return f"{value / MINUTES_DIVISOR:.2f} m", DurationCategory.CRITICAL


def commaf(value: float) -> str:
    """
    Shortest decimal form of a float with thousands separators.

    >>> commaf(1234.5)
    '1,234.5'
    >>> commaf(20.0)
    '20'
    """
    return format(Decimal(repr(float(value))).normalize(), ",f")


def comma(value: int) -> str:
    """
    >>> comma(1234567)
    '1,234,567'
    """
    return f"{value:,}"


def percent(part: float, whole: float) -> str:
    """Whole-number percentage; 0% when there is nothing to divide by."""
    if whole == 0:
        return "0%"
    return f"{part / whole * 100:.0f}%"


def wrap(text: str, width: int) -> list[str]:
    """
    Word-wrap text to `width` columns.

    Words are never split, even when longer than the width, and existing line
    breaks are kept. Always returns at least one line.
    """
    lines: list[str] = []
    for paragraph in text.split("\n"):
        lines.extend(
            textwrap.wrap(
                paragraph,
                width=width,
                break_long_words=False,
                break_on_hyphens=False,
            )
            or [""]
        )
    return lines
