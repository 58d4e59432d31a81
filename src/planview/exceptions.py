"""
Package-level exception hierarchy for planview.

All exceptions inherit from PlanviewError, enabling:
- Catching all planview errors with a single except clause
- Context fields for debugging (source, detail, config_key)
- Structured serialization via to_dict() for JSON error output

Hierarchy:
    PlanviewError
    ├── ParseError          : Input could not be decoded into EXPLAIN reports
    └── ConfigurationError  : Invalid configuration value or file

Once a batch has been decoded, metric derivation and rendering cannot fail,
so ParseError is the only error the core raises for bad input.
"""

from __future__ import annotations

from typing import Any


class PlanviewError(Exception):
    """
    Base exception for all planview errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON error output."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
        }


# ── Parse Errors ─────────────────────────────────────────────────────────


class ParseError(PlanviewError):
    """
    Raised when EXPLAIN JSON cannot be decoded.

    Attributes:
        message: Human-readable error description
        detail: Technical details for debugging (optional)
        source: Where the error occurred (e.g., "validation", "json_decode")
    """

    def __init__(
        self,
        message: str,
        *,
        detail: str | None = None,
        source: str = "unknown",
    ) -> None:
        self.detail = detail
        self.source = source
        super().__init__(message)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}\n\nDetails: {self.detail}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["detail"] = self.detail
        result["source"] = self.source
        return result


# ── Configuration Errors ─────────────────────────────────────────────────


class ConfigurationError(PlanviewError):
    """
    Error in planview configuration.

    Attributes:
        config_key: The configuration key that caused the error (if known).
    """

    def __init__(self, message: str, config_key: str | None = None) -> None:
        self.config_key = config_key
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["config_key"] = self.config_key
        return result
