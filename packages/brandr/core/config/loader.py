"""Configuration loading utilities with JSON and YAML support."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from brandr.core.config.models import AppConfig
from brandr.core.errors import ConfigurationError
from brandr.core.utils.logging import configure_logging as _configure_logging

logger = logging.getLogger(__name__)

FFMPEG_ENV_VAR = "BRANDR_FFMPEG"


def detect_format(file_path: Path | str) -> str:
    """Detect config file format from extension.

    Args:
        file_path: Path to config file

    Returns:
        Format string: "json" or "yaml"

    Raises:
        ValueError: If format cannot be determined

    Example:
        >>> detect_format("config.json")
        'json'
        >>> detect_format("config.yml")
        'yaml'
    """
    suffix = Path(file_path).suffix.lower()

    if suffix == ".json":
        return "json"
    elif suffix in [".yaml", ".yml"]:
        return "yaml"
    else:
        raise ValueError(f"Unsupported config format: {suffix}")


def load_config(path: str | Path) -> dict[str, Any]:
    """Load and return raw configuration dictionary.

    Args:
        path: Path to config file (.json, .yaml, or .yml)

    Returns:
        Raw configuration dictionary

    Raises:
        FileNotFoundError: If config file does not exist
        ValueError: If format is not supported or file content is invalid
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file does not exist: {path}")

    fmt = detect_format(path)

    if fmt == "json":
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
    else:
        try:
            with path.open("r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
                # safe_load returns None for empty files
                return content if content is not None else {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e


def load_app_config(path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration.

    Missing files fall back to defaults. ``BRANDR_FFMPEG`` overrides the
    configured FFmpeg binary.

    Args:
        path: Path to app config file (.json, .yaml, or .yml).
              Defaults to ``AppConfig.default_path()``.

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigurationError: If the config content is invalid
    """
    if path is None:
        path = AppConfig.default_path()

    try:
        if Path(path).exists():
            config = AppConfig.model_validate(load_config(path))
        else:
            logger.debug(f"Config file {path} not found, using defaults")
            config = AppConfig()
    except (ValueError, ValidationError) as e:
        raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e

    ffmpeg = os.getenv(FFMPEG_ENV_VAR)
    if ffmpeg:
        config = config.model_copy(
            update={"export": config.export.model_copy(update={"ffmpeg_binary": ffmpeg})}
        )

    return config


def configure_logging(config: AppConfig | None = None) -> None:
    """Configure Python logging from app config.

    Args:
        config: AppConfig instance (loads default if None)
    """
    if config is None:
        config = load_app_config()

    _configure_logging(
        level=config.logging.level,
        format_string=config.logging.format,
        filename=config.logging.filename,
        structured=config.logging.structured,
    )
