"""
Configuration loading for lazy-record.

Supports loading configuration from:
- Standalone config (~/.config/lazy-record/config.json)
- Environment variables and .env (LAZY_RECORD_* and LOG_LEVEL)

The core loader never reads configuration; settings drive the demo
clients and the CLI.
"""

import json
import os
from pathlib import Path
import time
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from lazy_record.errors import ConfigurationError
from lazy_record.models import LazyRecordSettings

ENV_PREFIX = "LAZY_RECORD_"

# -------------------- Configuration Cache --------------------


_config_cache: dict[str, Any] | None = None
_cache_timestamp: float = 0
_CACHE_TTL = 300  # 5 minutes cache TTL


def _clear_cache() -> None:
    """Clear configuration cache."""
    global _config_cache, _cache_timestamp
    _config_cache = None
    _cache_timestamp = 0


def _is_cache_valid() -> bool:
    """Check if cache is still valid."""
    return _config_cache is not None and (time.time() - _cache_timestamp) < _CACHE_TTL


# -------------------- Paths --------------------


def get_config_path() -> Path:
    """
    Get the path to the lazy-record config directory.

    Returns:
        Path to ~/.config/lazy-record/
    """
    return Path.home() / ".config" / "lazy-record"


def get_config_file_path() -> Path:
    """Get the path to ~/.config/lazy-record/config.json."""
    return get_config_path() / "config.json"


def load_standalone_config() -> dict[str, Any]:
    """
    Load configuration from the standalone config file.

    Returns:
        Configuration dictionary, or empty dict if missing or unreadable.
    """
    config_path = get_config_file_path()
    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return {}

    return data if isinstance(data, dict) else {}


# -------------------- Loading --------------------


def load_config(
    use_cache: bool = True, load_dotenv_file: bool = True
) -> dict[str, Any]:
    """
    Load configuration from all available sources.

    Priority order:
    1. Environment variables (highest priority)
    2. Standalone config (~/.config/lazy-record/config.json)

    Keys are normalised to lower case without the LAZY_RECORD_ prefix,
    e.g. LAZY_RECORD_API_BASE becomes ``api_base``. LOG_LEVEL is picked up
    unprefixed as well, matching the logging setup.

    Args:
        use_cache: Whether to use cached configuration (default: True)
        load_dotenv_file: Whether to load .env file (default: True, set to False in tests)

    Returns:
        Merged configuration dictionary.
    """
    global _config_cache, _cache_timestamp

    if use_cache and _is_cache_valid():
        assert _config_cache is not None
        return _config_cache

    if load_dotenv_file:
        load_dotenv()

    config: dict[str, Any] = {}
    config.update(load_standalone_config())

    if "LOG_LEVEL" in os.environ:
        config["log_level"] = os.environ["LOG_LEVEL"]

    for key, value in os.environ.items():
        if key.startswith(ENV_PREFIX):
            config[key[len(ENV_PREFIX):].lower()] = value

    _config_cache = config
    _cache_timestamp = time.time()

    return config


def reload_config() -> dict[str, Any]:
    """Force reload configuration, bypassing cache."""
    _clear_cache()
    return load_config(use_cache=False)


def get_settings(config: dict[str, Any] | None = None) -> LazyRecordSettings:
    """
    Validate configuration into settings.

    Args:
        config: Raw configuration (default: load_config())

    Returns:
        Validated settings

    Raises:
        ConfigurationError: If a value fails validation
    """
    if config is None:
        config = load_config()

    try:
        return LazyRecordSettings.model_validate(config)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ConfigurationError(
            f"Invalid configuration for {fields}",
            suggestion=f"Check {ENV_PREFIX}* variables and {get_config_file_path()}",
        ) from e