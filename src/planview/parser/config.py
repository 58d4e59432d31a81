"""Resource limits applied while decoding EXPLAIN output."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ParserConfig(BaseModel):
    """
    Limits that reject pathological input before it is processed.

    Every stage after decoding walks the tree recursively, so `max_depth`
    also bounds recursion in derivation and rendering.
    """

    max_file_size_mb: float = Field(default=100.0, gt=0, description="Largest input accepted")
    max_nodes: int = Field(default=50_000, gt=0, description="Most plan nodes in one report")
    max_depth: int = Field(default=100, gt=0, description="Deepest plan nesting in one report")


DEFAULT_CONFIG = ParserConfig()
