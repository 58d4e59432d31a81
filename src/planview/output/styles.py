"""
Colour strategy for the tree renderer.

A StyleSheet maps each visual role to a rich style string. It is passed into
the renderer rather than held globally, so plain output (tests, pipes, CI
logs) is just PLAIN_STYLES and produces the same text without decoration.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from rich.text import Text


class StyleSheet(BaseModel):
    """Rich style strings per rendering role. An empty string means no style."""

    model_config = ConfigDict(frozen=True)

    prefix: str = Field(default="bright_black", description="Tree rails and joints")
    tag: str = Field(default="white on red", description="Outlier badges")
    muted: str = Field(default="bright_black", description="Descriptions and labels")
    bold: str = Field(default="bright_white", description="Operator names")
    good: str = Field(default="green", description="Durations under 100 ms")
    warning: str = Field(default="bright_yellow", description="Durations under 1 s")
    critical: str = Field(default="bright_red", description="Durations of 1 s and up")
    output: str = Field(default="cyan", description="Projected output columns")

    def text(self, value: str, role: str) -> Text:
        """Wrap a fully formatted substring in the style for `role`."""
        return Text(value, style=getattr(self, role))


DEFAULT_STYLES = StyleSheet()

PLAIN_STYLES = StyleSheet(
    prefix="",
    tag="",
    muted="",
    bold="",
    good="",
    warning="",
    critical="",
    output="",
)
