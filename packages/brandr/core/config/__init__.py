"""Configuration management for Brandr."""

from brandr.core.config.loader import (
    configure_logging,
    detect_format,
    load_app_config,
    load_config,
)
from brandr.core.config.models import (
    AppConfig,
    DownloadConfig,
    ExportConfig,
    LoggingConfig,
    PreviewConfig,
    StorageConfig,
)

__all__ = [
    "AppConfig",
    "DownloadConfig",
    "ExportConfig",
    "LoggingConfig",
    "PreviewConfig",
    "StorageConfig",
    "configure_logging",
    "detect_format",
    "load_app_config",
    "load_config",
]
