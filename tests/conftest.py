"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides test database, deterministic record factory, service and client
fixtures.

==============================================================================
"""

import itertools
import os

# Application settings are cached on first use; point them at an in-memory
# database before the app is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GOOGLE_SHEETS_URL"] = ""

import pytest
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from imei_scanner.main import app
from imei_scanner.config.settings import Settings
from imei_scanner.db.database import Base, build_engine, get_db
from imei_scanner.db.repository import ScanRepository
from imei_scanner.scanning.record_factory import ScanRecordFactory
from imei_scanner.services.scan_service import ScanService, init_scan_service


# ============================================================================
# CLOCK / FACTORY FIXTURES
# ============================================================================

START_MS = 1_700_000_000_000


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, start: int = START_MS):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    """Deterministic clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def factory(clock: FakeClock) -> ScanRecordFactory:
    """Record factory producing rec-0001, rec-0002, ... ids."""
    counter = itertools.count(1)
    return ScanRecordFactory(id_factory=lambda: f"rec-{next(counter):04d}", clock=clock)


# ============================================================================
# DATABASE FIXTURES
# ============================================================================

@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database for each test."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to the test engine."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Database session for direct queries."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repository(session_factory: sessionmaker) -> ScanRepository:
    """Scan repository on the test database."""
    return ScanRepository(session_factory)


# ============================================================================
# SERVICE FIXTURES
# ============================================================================

@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from the environment, with sync disabled."""
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        google_sheets_url="",
        auto_sync=False,
        export_directory=str(tmp_path / "exports"),
    )


@pytest.fixture
def service(settings: Settings, repository: ScanRepository, factory: ScanRecordFactory) -> ScanService:
    """Scan service without an active session."""
    return ScanService(settings, repository, factory=factory)


@pytest.fixture
def client(
    settings: Settings,
    repository: ScanRepository,
    factory: ScanRecordFactory,
    db: Session
) -> Generator[TestClient, None, None]:
    """Create test client backed by the test database."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        # Startup installs a service on the configured database; replace it
        init_scan_service(settings, repository, factory=factory)
        yield test_client

    app.dependency_overrides.clear()

