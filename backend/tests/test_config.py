from __future__ import annotations

import json
from pathlib import Path

import pytest

from teabooking.core.config import CleanupConfig, Config
from teabooking.core.constants import StorageBackend
from teabooking.core.exceptions import ConfigError

_ENV_VARS = (
    "PORT",
    "ENVIRONMENT",
    "NODE_ENV",
    "DEFAULT_ADMIN_PASSWORD",
    "DB_BACKEND",
    "DB_NAME",
    "MONGODB_URI",
    "ALLOWED_ORIGINS",
    "MAX_LOGIN_ATTEMPTS_PER_MINUTE",
    "MAX_API_REQUESTS_PER_MINUTE",
    "VERCEL",
    "PUBLIC_DIR",
    "LOG_DIR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Recorded by monkeypatch so anything load_dotenv sets is undone.
    for name in _ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def _load(tmp_path: Path) -> Config:
    return Config.from_file(tmp_path / "config.json", tmp_path / ".env")


def test_defaults_without_files(tmp_path: Path) -> None:
    config = _load(tmp_path)
    assert config.server.port == 3000
    assert config.server.environment == "development"
    assert config.database.backend is StorageBackend.SQLITE
    assert config.default_admin_password == "teatime"
    assert config.web_security.login_rate_limit == 5
    assert config.web_security.api_rate_limit == 100
    assert config.cleanup.enabled
    assert config.config_path is None


def test_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("NODE_ENV", "production")
    monkeypatch.setenv("DEFAULT_ADMIN_PASSWORD", "earl-grey")
    monkeypatch.setenv("DB_NAME", "batman-tea.db")
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://tea.example.com, https://admin.example.com")
    monkeypatch.setenv("MAX_LOGIN_ATTEMPTS_PER_MINUTE", "3")
    monkeypatch.setenv("VERCEL", "1")

    config = _load(tmp_path)

    assert config.server.port == 8080
    assert config.is_production
    assert config.default_admin_password == "earl-grey"
    assert config.database.sqlite_path == "batman-tea.db"
    assert config.cors_origins == ["https://tea.example.com", "https://admin.example.com"]
    assert not config.cors_allow_all
    assert config.web_security.login_rate_limit == 3
    assert not config.cleanup.enabled


def test_env_file_is_read(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("ENVIRONMENT=staging\n", encoding="utf-8")
    config = _load(tmp_path)
    assert config.server.environment == "staging"


def test_mongodb_uri_selects_mongo_backend(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MONGODB_URI", "mongodb://db.internal:27017/tea")
    config = _load(tmp_path)
    assert config.database.backend is StorageBackend.MONGO
    assert config.database.mongodb_uri == "mongodb://db.internal:27017/tea"

    monkeypatch.setenv("DB_BACKEND", "sqlite")
    assert _load(tmp_path).database.backend is StorageBackend.SQLITE


def test_config_file_sections(tmp_path: Path) -> None:
    (tmp_path / "config.json").write_text(
        json.dumps(
            {
                "server": {"port": 4000},
                "web_security": {"protect_admin_routes": False},
                "cleanup": {"time": "23:30", "timezone": "UTC"},
            }
        ),
        encoding="utf-8",
    )
    config = _load(tmp_path)
    assert config.server.port == 4000
    assert not config.web_security.protect_admin_routes
    assert (config.cleanup.hour, config.cleanup.minute) == (23, 30)
    assert config.config_path == tmp_path / "config.json"


def test_invalid_config_raises(tmp_path: Path) -> None:
    (tmp_path / "config.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError):
        _load(tmp_path)

    (tmp_path / "config.json").write_text(
        json.dumps({"cleanup": {"time": "25:00"}}), encoding="utf-8"
    )
    with pytest.raises(ConfigError):
        _load(tmp_path)


def test_production_without_origins_allows_all() -> None:
    config = Config()
    config.server.environment = "production"
    assert config.cors_allow_all


def test_unknown_timezone_rejected() -> None:
    with pytest.raises(ValueError):
        CleanupConfig(timezone="Mars/Olympus")
