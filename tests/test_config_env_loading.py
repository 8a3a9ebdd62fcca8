"""
Settings tests: environment precedence and validation.
"""

import os

import pytest
from pydantic import ValidationError

from clinicqueue.core.config import (
    DatabaseSettings,
    ExpirySweeperSettings,
    QueueSettings,
    Settings,
    _load_env_file_if_available,
    get_settings,
    reset_settings,
)
from clinicqueue.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def clean_queue_env(monkeypatch):
    """Removes QUEUE_* values that load_dotenv writes straight into os.environ."""
    names = ("QUEUE_DEFAULT_MAX_TOKENS_PER_DAY", "QUEUE_ALLOCATION_RETRIES")
    for name in names:
        monkeypatch.delenv(name, raising=False)
    yield
    for name in names:
        os.environ.pop(name, None)


def test_dotenv_does_not_override_environment(monkeypatch, tmp_path, clean_queue_env):
    """Already-set environment variables win over values in .env."""
    (tmp_path / ".env").write_text(
        "QUEUE_TIMEZONE=Europe/London\nQUEUE_DEFAULT_MAX_TOKENS_PER_DAY=20\n"
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("QUEUE_TIMEZONE", "Asia/Kolkata")

    settings = get_settings()

    assert settings.queue.timezone == "Asia/Kolkata"
    assert settings.queue.default_max_tokens_per_day == 20


def test_env_file_found_in_parent_directory(monkeypatch, tmp_path, clean_queue_env):
    (tmp_path / ".env").write_text("QUEUE_ALLOCATION_RETRIES=7\n")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)

    _load_env_file_if_available()

    assert QueueSettings().allocation_retries == 7


def test_no_env_files_no_crash(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    _load_env_file_if_available()


def test_memory_backend_from_environment():
    settings = get_settings()
    assert settings.uses_memory_backend
    assert settings.is_testing


def test_queue_defaults(monkeypatch):
    for name in ("QUEUE_TIMEZONE", "QUEUE_DEFAULT_MAX_TOKENS_PER_DAY", "QUEUE_DEFAULT_GEOFENCE_RADIUS_M"):
        monkeypatch.delenv(name, raising=False)
    queue = QueueSettings()
    assert queue.timezone == "UTC"
    assert queue.default_max_tokens_per_day == 50
    assert queue.default_geofence_radius_m == 100.0
    assert queue.tzinfo.key == "UTC"


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        QueueSettings(timezone="Mars/Olympus_Mons")
    with pytest.raises(ValidationError):
        QueueSettings(default_max_tokens_per_day=0)
    with pytest.raises(ValidationError):
        ExpirySweeperSettings(interval_seconds=5)
    with pytest.raises(ValidationError):
        Settings(database_backend="postgres")


def test_mongo_uri_format():
    with pytest.raises(ValidationError):
        DatabaseSettings(uri="postgres://localhost/db")
    assert DatabaseSettings(uri="").uri == ""
    assert DatabaseSettings(uri="mongodb+srv://cluster.example.net").uri.startswith("mongodb+srv")


@pytest.mark.asyncio
async def test_mongo_backend_requires_uri():
    from clinicqueue.app import init_database

    settings = Settings(database=DatabaseSettings(uri=""))
    with pytest.raises(ConfigurationError) as exc_info:
        await init_database(settings)
    assert exc_info.value.error_code == "CONFIG_ERROR"
