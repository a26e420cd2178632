"""Query cache configuration."""

from .settings import (
    QueryCacheSettings,
    get_settings,
    DEFAULT_STORE,
    DEFAULT_FOREVER_PREFIX,
    DEFAULT_DUPLICATES_PREFIX,
)
from .logging_config import LoggingConfig, setup_logging, get_logger

__all__ = [
    "QueryCacheSettings",
    "get_settings",
    "DEFAULT_STORE",
    "DEFAULT_FOREVER_PREFIX",
    "DEFAULT_DUPLICATES_PREFIX",
    "LoggingConfig",
    "setup_logging",
    "get_logger",
]
