from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from teabooking.core.constants import (
    DEFAULT_ADMIN_PASSWORD,
    DEFAULT_API_RATE_LIMIT,
    DEFAULT_CLEANUP_TIME,
    DEFAULT_CLEANUP_TIMEZONE,
    DEFAULT_CORS_ORIGINS,
    DEFAULT_DB_NAME,
    DEFAULT_HOST,
    DEFAULT_LOGIN_RATE_LIMIT,
    DEFAULT_MONGODB_URI,
    DEFAULT_PORT,
    DEFAULT_PUBLIC_DIR,
    MAX_REQUEST_BODY_BYTES,
    StorageBackend,
)
from teabooking.core.exceptions import ConfigError

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class ServerConfig(BaseModel):
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    environment: str = "development"
    public_dir: str = DEFAULT_PUBLIC_DIR
    log_dir: str = "logs"


class DatabaseConfig(BaseModel):
    backend: StorageBackend = StorageBackend.SQLITE
    sqlite_path: str = DEFAULT_DB_NAME
    mongodb_uri: str = DEFAULT_MONGODB_URI


class WebSecurityConfig(BaseModel):
    # None means "not configured"; see Config.cors_allow_all.
    cors_allowed_origins: Optional[list[str]] = None
    login_rate_limit: int = Field(default=DEFAULT_LOGIN_RATE_LIMIT, ge=1)
    api_rate_limit: int = Field(default=DEFAULT_API_RATE_LIMIT, ge=1)
    max_body_bytes: int = Field(default=MAX_REQUEST_BODY_BYTES, ge=1)
    trusted_proxies: list[str] = Field(default_factory=list)
    protect_admin_routes: bool = True
    https_enabled: bool = False


class CleanupConfig(BaseModel):
    enabled: bool = True
    time: str = DEFAULT_CLEANUP_TIME
    timezone: str = DEFAULT_CLEANUP_TIMEZONE

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        if not _TIME_RE.match(value):
            raise ValueError("cleanup time must be HH:MM")
        return value

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {value}") from exc
        return value

    @property
    def hour(self) -> int:
        return int(self.time.split(":", 1)[0])

    @property
    def minute(self) -> int:
        return int(self.time.split(":", 1)[1])

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class EnvSettings(BaseSettings):
    """Loads deployment variables and secrets from .env or the environment."""

    port: Optional[int] = None
    environment: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV")
    )
    default_admin_password: str = DEFAULT_ADMIN_PASSWORD
    db_backend: Optional[StorageBackend] = None
    db_name: Optional[str] = None
    mongodb_uri: Optional[str] = None
    allowed_origins: Optional[str] = None
    max_login_attempts_per_minute: Optional[int] = None
    max_api_requests_per_minute: Optional[int] = None
    vercel: Optional[str] = None
    public_dir: Optional[str] = None
    log_dir: Optional[str] = None

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


class Config:
    """Application configuration loaded from an optional config.json + .env.

    Environment variables win over values from the JSON file so the same
    deployment variables as a plain ``.env`` setup keep working.
    """

    def __init__(
        self,
        server: Optional[ServerConfig] = None,
        database: Optional[DatabaseConfig] = None,
        web_security: Optional[WebSecurityConfig] = None,
        cleanup: Optional[CleanupConfig] = None,
        default_admin_password: str = DEFAULT_ADMIN_PASSWORD,
        config_path: Optional[Path] = None,
    ) -> None:
        self.server = server or ServerConfig()
        self.database = database or DatabaseConfig()
        self.web_security = web_security or WebSecurityConfig()
        self.cleanup = cleanup or CleanupConfig()
        self.default_admin_password = default_admin_password
        self.config_path = config_path

    @classmethod
    def from_file(
        cls,
        config_path: Path | str = "config.json",
        env_path: Path | str = ".env",
    ) -> Config:
        config_path = Path(config_path)
        env_path = Path(env_path)

        load_dotenv(dotenv_path=env_path, override=False)
        try:
            env = EnvSettings()
        except Exception as exc:
            raise ConfigError(f"Invalid environment settings: {exc}") from exc

        raw: dict[str, Any] = {}
        if config_path.exists():
            try:
                raw = json.loads(config_path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as exc:
                raise ConfigError(f"Invalid JSON in {config_path}: {exc}") from exc

        try:
            server = ServerConfig(**raw.get("server", {}))
            database = DatabaseConfig(**raw.get("database", {}))
            web_security = WebSecurityConfig(**raw.get("web_security", {}))
            cleanup = CleanupConfig(**raw.get("cleanup", {}))
        except Exception as exc:
            raise ConfigError(f"Config validation failed: {exc}") from exc

        instance = cls(
            server=server,
            database=database,
            web_security=web_security,
            cleanup=cleanup,
            default_admin_password=env.default_admin_password,
            config_path=config_path if config_path.exists() else None,
        )
        instance._apply_env(env)
        return instance

    def _apply_env(self, env: EnvSettings) -> None:
        if env.port is not None:
            self.server.port = env.port
        if env.environment:
            self.server.environment = env.environment
        if env.public_dir:
            self.server.public_dir = env.public_dir
        if env.log_dir:
            self.server.log_dir = env.log_dir

        if env.db_backend is not None:
            self.database.backend = env.db_backend
        elif env.mongodb_uri:
            self.database.backend = StorageBackend.MONGO
        if env.db_name:
            self.database.sqlite_path = env.db_name
        if env.mongodb_uri:
            self.database.mongodb_uri = env.mongodb_uri

        if env.allowed_origins:
            self.web_security.cors_allowed_origins = [
                origin.strip() for origin in env.allowed_origins.split(",") if origin.strip()
            ]
        if env.max_login_attempts_per_minute:
            self.web_security.login_rate_limit = env.max_login_attempts_per_minute
        if env.max_api_requests_per_minute:
            self.web_security.api_rate_limit = env.max_api_requests_per_minute

        # Serverless deployments have no long-lived process to run the job.
        if env.vercel == "1":
            self.cleanup.enabled = False

    # ------------------------------------------------------------------
    # Derived helpers
    # ------------------------------------------------------------------

    @property
    def is_production(self) -> bool:
        return self.server.environment == "production"

    @property
    def cors_allow_all(self) -> bool:
        """Development allows any origin; so does production without a list."""
        if self.server.environment == "development":
            return True
        return self.is_production and self.web_security.cors_allowed_origins is None

    @property
    def cors_origins(self) -> list[str]:
        return self.web_security.cors_allowed_origins or list(DEFAULT_CORS_ORIGINS)
