"""Command-line interface for planview."""

from planview.cli.main import app

__all__ = ["app"]
