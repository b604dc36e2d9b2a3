"""Core pixfetch services: configuration, render cache and logging."""

from .cache import CacheRecord, RenderCache, cache_path, image_fingerprint
from .config import (
    ConfigError,
    RenderConfig,
    Settings,
    config_path,
    load_settings,
    merge_settings,
    validate,
)
from .logging_setup import configure_logging, get_logger

__all__ = [
    "CacheRecord",
    "ConfigError",
    "RenderCache",
    "RenderConfig",
    "Settings",
    "cache_path",
    "config_path",
    "configure_logging",
    "get_logger",
    "image_fingerprint",
    "load_settings",
    "merge_settings",
    "validate",
]
