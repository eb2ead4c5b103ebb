import json
import os
from unittest.mock import patch

import pytest

from lazy_record.errors import ConfigurationError
from lazy_record.models import DEFAULT_API_BASE
from lazy_record.utils.config import (
    _clear_cache,
    get_settings,
    load_config,
    reload_config,
)


@pytest.fixture
def mock_home(tmp_path):
    with patch("pathlib.Path.home", return_value=tmp_path):
        yield tmp_path


@pytest.fixture(autouse=True)
def clear_test_env():
    """Clear lazy-record related environment variables before each test."""
    _clear_cache()
    to_delete = [
        key for key in os.environ if key.startswith("LAZY_RECORD_") or key == "LOG_LEVEL"
    ]
    saved = {key: os.environ.pop(key) for key in to_delete}
    yield
    for key in [k for k in os.environ if k.startswith("LAZY_RECORD_")]:
        del os.environ[key]
    os.environ.update(saved)
    _clear_cache()


def write_config(home, data):
    config_dir = home / ".config" / "lazy-record"
    config_dir.mkdir(parents=True)
    (config_dir / "config.json").write_text(json.dumps(data))


def test_load_config_empty(mock_home):
    config = load_config(load_dotenv_file=False)

    assert config == {}

    settings = get_settings(config)
    assert settings.api_base == DEFAULT_API_BASE
    assert settings.timeout == 30.0
    assert settings.log_level == "INFO"


def test_load_config_env_vars(mock_home):
    env = {"LAZY_RECORD_API_BASE": "http://localhost:3000", "LAZY_RECORD_TIMEOUT": "5"}
    with patch.dict(os.environ, env):
        config = load_config(load_dotenv_file=False)

    assert config == {"api_base": "http://localhost:3000", "timeout": "5"}

    settings = get_settings(config)
    assert settings.api_base == "http://localhost:3000/"
    assert settings.timeout == 5.0


def test_env_overrides_config_file(mock_home):
    write_config(mock_home, {"timeout": 12, "api_base": "http://file/"})

    with patch.dict(os.environ, {"LAZY_RECORD_TIMEOUT": "3"}):
        config = load_config(load_dotenv_file=False)

    assert config["timeout"] == "3"
    assert config["api_base"] == "http://file/"


def test_log_level_is_read_unprefixed(mock_home):
    with patch.dict(os.environ, {"LOG_LEVEL": "debug"}):
        settings = get_settings(load_config(load_dotenv_file=False))

    assert settings.log_level == "DEBUG"


def test_unreadable_config_file_is_ignored(mock_home):
    config_dir = mock_home / ".config" / "lazy-record"
    config_dir.mkdir(parents=True)
    (config_dir / "config.json").write_text("{not json")

    assert load_config(load_dotenv_file=False) == {}


def test_config_is_cached(mock_home):
    first = load_config(load_dotenv_file=False)

    with patch.dict(os.environ, {"LAZY_RECORD_TIMEOUT": "9"}):
        assert load_config(load_dotenv_file=False) is first
        with patch("lazy_record.utils.config.load_dotenv"):
            assert reload_config()["timeout"] == "9"


@pytest.mark.parametrize(
    "config",
    [{"timeout": "-1"}, {"timeout": "soon"}, {"log_level": "LOUD"}],
)
def test_invalid_settings_raise_configuration_error(config):
    with pytest.raises(ConfigurationError) as exc_info:
        get_settings(config)

    assert "Invalid configuration" in str(exc_info.value)
    assert "LAZY_RECORD_" in str(exc_info.value)
