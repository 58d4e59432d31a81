"""
Configuration system for planview.

Environment variables are the primary config source, with an optional
JSON or YAML config file for local setups.

Usage:
    from planview.config import get_config

    config = get_config()
    renderer = PlanRenderer(config=config)

Environment variables:
    PLANVIEW_CONFIG_FILE              path to a JSON/YAML file (takes precedence)
    PLANVIEW_WRAP_WIDTH               description/output wrap column (60)
    PLANVIEW_BAD_ESTIMATE_THRESHOLD   factor that earns the "bad estimate" tag (100)
    PLANVIEW_SECONDS_DIVISOR          ms -> s divisor for durations >= 1 s (1000)
    PLANVIEW_COLOR                    colour output on/off (true)
    PLANVIEW_MAX_FILE_SIZE_MB, PLANVIEW_MAX_NODES, PLANVIEW_MAX_DEPTH
"""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from planview.exceptions import ConfigurationError
from planview.parser.config import ParserConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "PLANVIEW_"

# ms -> s. The first releases divided by 2000 here, so "1500 ms" printed as
# "0.75 s". Kept selectable for anyone diffing against that output.
SECONDS_DIVISOR = 1000.0
LEGACY_SECONDS_DIVISOR = 2000.0


class Config(BaseModel):
    """
    planview configuration.

    Loaded from environment variables and optional config file.
    """

    model_config = ConfigDict(frozen=True)

    wrap_width: int = Field(
        default=60,
        gt=0,
        description="Column at which descriptions and output lists wrap",
    )
    bad_estimate_threshold: float = Field(
        default=100.0,
        gt=0,
        description="Estimate factor at or above which a node is tagged 'bad estimate'",
    )
    seconds_divisor: float = Field(
        default=SECONDS_DIVISOR,
        gt=0,
        description="Divisor converting ms to the seconds shown for 1 s - 1 min durations",
    )
    color: bool = Field(
        default=True,
        description="Decorate output with terminal colours",
    )

    # Parser resource limits
    max_file_size_mb: float = Field(default=100.0, gt=0)
    max_nodes: int = Field(default=50_000, gt=0)
    max_depth: int = Field(default=100, gt=0)

    def parser_config(self) -> ParserConfig:
        """Resource limits for the EXPLAIN parser."""
        return ParserConfig(
            max_file_size_mb=self.max_file_size_mb,
            max_nodes=self.max_nodes,
            max_depth=self.max_depth,
        )


def _parse_env_bool(value: str | None, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_env_int(name: str, default: int) -> int:
    """Parse integer from environment variable."""
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Could not parse %s=%s, using %s", name, value, default)
        return default


def _parse_env_float(name: str, default: float) -> float:
    """Parse float from environment variable."""
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning("Could not parse %s=%s, using %s", name, value, default)
        return default


def load_config_from_env() -> Config:
    """
    Load configuration from PLANVIEW_* environment variables.

    Unparsable values are logged and replaced by their defaults.
    """
    defaults = Config()

    config_kwargs: dict[str, Any] = {
        "wrap_width": _parse_env_int(f"{ENV_PREFIX}WRAP_WIDTH", defaults.wrap_width),
        "bad_estimate_threshold": _parse_env_float(
            f"{ENV_PREFIX}BAD_ESTIMATE_THRESHOLD", defaults.bad_estimate_threshold
        ),
        "seconds_divisor": _parse_env_float(
            f"{ENV_PREFIX}SECONDS_DIVISOR", defaults.seconds_divisor
        ),
        "color": _parse_env_bool(os.environ.get(f"{ENV_PREFIX}COLOR"), defaults.color),
        "max_file_size_mb": _parse_env_float(
            f"{ENV_PREFIX}MAX_FILE_SIZE_MB", defaults.max_file_size_mb
        ),
        "max_nodes": _parse_env_int(f"{ENV_PREFIX}MAX_NODES", defaults.max_nodes),
        "max_depth": _parse_env_int(f"{ENV_PREFIX}MAX_DEPTH", defaults.max_depth),
    }

    try:
        return Config(**config_kwargs)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid planview environment configuration: {e.error_count()} error(s)",
            config_key=str(e.errors()[0]["loc"][0]),
        ) from e


def load_config_from_file(path: Path) -> Config:
    """
    Load configuration from a JSON or YAML file.

    A missing file falls back to environment variables. A file that exists
    but cannot be parsed or validated raises ConfigurationError.
    """
    if not path.exists():
        logger.warning("Config file not found: %s, using environment", path)
        return load_config_from_env()

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to read config file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {path} must contain a mapping, got {type(data).__name__}"
        )

    try:
        return Config(**data)
    except ValidationError as e:
        first = e.errors()[0]
        raise ConfigurationError(
            f"Invalid value in {path}: {first['msg']}",
            config_key=".".join(str(x) for x in first["loc"]),
        ) from e


@lru_cache(maxsize=1)
def get_config() -> Config:
    """
    Get the global configuration instance.

    Loads from:
    1. PLANVIEW_CONFIG_FILE environment variable (if set)
    2. Environment variables (default)

    Result is cached for the lifetime of the process.
    """
    config_file = os.environ.get(f"{ENV_PREFIX}CONFIG_FILE")

    if config_file:
        return load_config_from_file(Path(config_file))

    return load_config_from_env()


def reset_config() -> None:
    """Reset the cached configuration (mainly for testing)."""
    get_config.cache_clear()
