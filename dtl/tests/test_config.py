from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from dtl.config import DEFAULT_ROUNDS_DIR, Settings, get_settings, reset_settings_cache

_ENV_KEYS = (
    "DTL_ROUNDS_DIR",
    "DTL_DIRECTORY_FILE",
    "DTL_RECENT_WINDOW",
    "DTL_TREND_LIMIT",
    "DTL_LOG_LEVEL",
    "DTL_USER",
)


@pytest.fixture
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults(clean_env) -> None:
    settings = Settings(_env_file=None)

    assert settings.rounds_dir == DEFAULT_ROUNDS_DIR
    assert settings.directory_file is None
    assert settings.recent_window == 5
    assert settings.trend_limit == 20
    assert settings.log_level == "WARNING"
    assert settings.user_id == "local"


def test_environment_overrides(clean_env, tmp_path) -> None:
    clean_env.setenv("DTL_ROUNDS_DIR", str(tmp_path / "rounds"))
    clean_env.setenv("DTL_DIRECTORY_FILE", str(tmp_path / "directory.json"))
    clean_env.setenv("DTL_RECENT_WINDOW", "3")
    clean_env.setenv("DTL_LOG_LEVEL", " info ")
    clean_env.setenv("DTL_USER", "club-member")

    settings = Settings(_env_file=None)

    assert settings.rounds_dir == tmp_path / "rounds"
    assert settings.directory_file == Path(tmp_path / "directory.json")
    assert settings.recent_window == 3
    assert settings.log_level == "INFO"
    assert settings.user_id == "club-member"


def test_blank_directory_file_means_none(clean_env) -> None:
    clean_env.setenv("DTL_DIRECTORY_FILE", "  ")
    assert Settings(_env_file=None).directory_file is None


def test_recent_window_must_be_positive(clean_env) -> None:
    clean_env.setenv("DTL_RECENT_WINDOW", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_get_settings_is_cached_until_reset(clean_env) -> None:
    clean_env.setenv("DTL_USER", "first")
    reset_settings_cache()
    assert get_settings().user_id == "first"

    clean_env.setenv("DTL_USER", "second")
    assert get_settings().user_id == "first"

    reset_settings_cache()
    assert get_settings().user_id == "second"
