"""
Configuration and logging helpers for lazy-record.
"""

from .config import (
    _clear_cache,
    get_config_path,
    get_settings,
    load_config,
    reload_config,
)
from .logging_config import (
    PerformanceMonitor,
    get_log_level,
    initialize_logging,
)

__all__ = [
    # Config
    "_clear_cache",
    "load_config",
    "reload_config",
    "get_config_path",
    "get_settings",
    # Logging
    "get_log_level",
    "initialize_logging",
    "PerformanceMonitor",
]
