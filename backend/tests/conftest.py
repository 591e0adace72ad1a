"""Shared fixtures: temporary SQLite storage, a controllable clock, a test app."""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import AsyncGenerator, Generator

import pytest
from fastapi.testclient import TestClient

from teabooking.core.config import (
    CleanupConfig,
    Config,
    DatabaseConfig,
    ServerConfig,
    WebSecurityConfig,
)
from teabooking.core.database import Database
from teabooking.core.storage import Storage
from teabooking.main import create_app
from teabooking.services.credentials import CredentialStore
from teabooking.services.session import SessionService

ADMIN_PASSWORD = "teatime"


class FakeClock:
    """Manually advanced UTC clock for expiry tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)

    def set(self, value: datetime) -> None:
        self.now = value


@pytest.fixture
async def db(tmp_path: Path) -> AsyncGenerator[Database, None]:
    database = await Database.initialize(str(tmp_path / "test.db"))
    await database.run_migrations()
    yield database
    await database.close()


@pytest.fixture
def storage(db: Database) -> Storage:
    return Storage.for_sqlite(db)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def credentials(storage: Storage) -> CredentialStore:
    return CredentialStore(storage.settings)


@pytest.fixture
def session_service(
    credentials: CredentialStore, storage: Storage, clock: FakeClock
) -> SessionService:
    return SessionService(credentials, storage.tokens, clock=clock)


@pytest.fixture
def app_config(tmp_path: Path) -> Config:
    public_dir = tmp_path / "public"
    public_dir.mkdir()
    (public_dir / "index.html").write_text("<h1>Order tea</h1>", encoding="utf-8")
    (public_dir / "dashboard.html").write_text("<h1>Dashboard</h1>", encoding="utf-8")
    return Config(
        server=ServerConfig(
            environment="test",
            public_dir=str(public_dir),
            log_dir=str(tmp_path / "logs"),
        ),
        database=DatabaseConfig(sqlite_path=str(tmp_path / "app.db")),
        web_security=WebSecurityConfig(login_rate_limit=5, api_rate_limit=1000),
        cleanup=CleanupConfig(enabled=False),
        default_admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture
def client(app_config: Config) -> Generator[TestClient, None, None]:
    app = create_app(app_config)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client: TestClient) -> dict[str, str]:
    response = client.post("/api/auth/login", json={"password": ADMIN_PASSWORD})
    token = response.json()["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def mongodb_uri() -> str:
    uri = os.environ.get("TEABOOKING_TEST_MONGODB_URI")
    if not uri:
        pytest.skip("TEABOOKING_TEST_MONGODB_URI not set")
    return uri
