"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import StaticPool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from pans_scales.api.deps import get_result_store
from pans_scales.db.base import Base, utc_now
from pans_scales.main import app
from pans_scales.models.scale_result import InstrumentKind, ScaleResult
from pans_scales.scoring import cbi, kovacevic, pandas_scale, pans31, ptec
from pans_scales.services.submissions import ResultStore, ResultStoreError


# Use SQLite for testing (simpler than spinning up postgres)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class InMemoryResultStore(ResultStore):
    """Result store keeping records in a dict."""

    def __init__(self) -> None:
        self.records: dict[str, ScaleResult] = {}

    async def save(
        self,
        instrument: InstrumentKind,
        form_data: dict[str, Any],
        scores: dict[str, Any],
        score_version: str,
        session_id: str | None = None,
    ) -> str:
        now = utc_now()
        record = ScaleResult(
            id=str(uuid4()),
            instrument=instrument.value,
            score_version=score_version,
            session_id=session_id,
            form_data=dict(form_data),
            scores=dict(scores),
            calculated_at=now,
            created_at=now,
        )
        self.records[record.id] = record
        return record.id

    async def get(self, result_id: str) -> ScaleResult | None:
        return self.records.get(result_id)

    async def list_recent(self, instrument: InstrumentKind, limit: int) -> list[ScaleResult]:
        matching = [r for r in self.records.values() if r.instrument == instrument.value]
        matching.sort(key=lambda r: r.calculated_at, reverse=True)
        return matching[:limit]

    async def list_by_session(
        self,
        session_id: str,
        limit: int,
        instrument: InstrumentKind | None = None,
    ) -> list[ScaleResult]:
        matching = [
            r
            for r in self.records.values()
            if r.session_id == session_id
            and (instrument is None or r.instrument == instrument.value)
        ]
        matching.sort(key=lambda r: r.calculated_at, reverse=True)
        return matching[:limit]


class FailingResultStore(ResultStore):
    """Result store whose every operation fails."""

    def __init__(self) -> None:
        self.save_attempts = 0

    async def save(self, instrument, form_data, scores, score_version, session_id=None) -> str:
        self.save_attempts += 1
        raise ResultStoreError("database unavailable")

    async def get(self, result_id: str) -> ScaleResult | None:
        raise ResultStoreError("database unavailable")

    async def list_recent(self, instrument: InstrumentKind, limit: int) -> list[ScaleResult]:
        raise ResultStoreError("database unavailable")

    async def list_by_session(self, session_id, limit, instrument=None) -> list[ScaleResult]:
        raise ResultStoreError("database unavailable")


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture(scope="function")
async def async_engine():
    """Create async test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def async_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for tests."""
    async_session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session


# ---------------------------------------------------------------------------
# API clients
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_store() -> InMemoryResultStore:
    return InMemoryResultStore()


@pytest.fixture
def failing_store() -> FailingResultStore:
    return FailingResultStore()


def _client_with_store(store: ResultStore) -> Generator[TestClient, None, None]:
    async def override_get_result_store() -> ResultStore:
        return store

    app.dependency_overrides[get_result_store] = override_get_result_store

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(memory_store: InMemoryResultStore) -> Generator[TestClient, None, None]:
    """Create FastAPI test client backed by an in-memory result store."""
    yield from _client_with_store(memory_store)


@pytest.fixture(scope="function")
def failing_client(failing_store: FailingResultStore) -> Generator[TestClient, None, None]:
    """Create FastAPI test client whose result store is unavailable."""
    yield from _client_with_store(failing_store)


# ---------------------------------------------------------------------------
# Answer builders
# ---------------------------------------------------------------------------


@pytest.fixture
def make_pandas_answers() -> Callable[..., dict[str, Any]]:
    """Build time-windowed scale answers.

    Every item defaults to the same rating in all windows; overrides map an
    item key to a {"before", "after", "current"} dict.
    """

    def _make(default: int = 0, **overrides: dict[str, int]) -> dict[str, Any]:
        answers: dict[str, Any] = {
            key: {"before": default, "after": default, "current": default}
            for key in pandas_scale.ALL_ITEMS
        }
        answers.update(overrides)
        return answers

    return _make


@pytest.fixture
def make_kovacevic_answers() -> Callable[..., dict[str, Any]]:
    """Build Kovacevic answers.

    mandatory: response used for all three mandatory facts
    core / group1 / group2: number of criteria (in order) answered "yes";
        the rest take the `rest` response
    """

    def _make(
        mandatory: str = "no",
        core: int = 0,
        group1: int = 0,
        group2: int = 0,
        rest: str = "no",
        severity: int = 3,
        antibiotics: str = "unknown",
        steroids: str = "unknown",
        lab_status: str = "not_tested",
    ) -> dict[str, Any]:
        def group(keys: tuple[str, ...], count: int) -> dict[str, Any]:
            return {
                key: (
                    {"present": "yes", "severity": severity}
                    if i < count
                    else {"present": rest, "severity": 0}
                )
                for i, key in enumerate(keys)
            }

        return {
            "mandatory": {key: mandatory for key in kovacevic.MANDATORY_CRITERIA},
            "core": group(kovacevic.CORE_CRITERIA, core),
            "secondary_group1": group(kovacevic.SECONDARY_GROUP1_CRITERIA, group1),
            "secondary_group2": group(kovacevic.SECONDARY_GROUP2_CRITERIA, group2),
            "treatment": {
                "antibiotics_response": antibiotics,
                "steroids_response": steroids,
            },
            "lab_status": lab_status,
        }

    return _make


@pytest.fixture
def make_pans31_answers() -> Callable[..., dict[str, Any]]:
    """Build PANS-31 answers with a default rating and per-item overrides."""

    def _make(default: int = 0, **overrides: int) -> dict[str, Any]:
        answers: dict[str, Any] = {key: default for key in pans31.ITEMS}
        answers.update(overrides)
        return answers

    return _make


@pytest.fixture
def make_ptec_answers() -> Callable[..., dict[str, Any]]:
    """Build nested PTEC answers with a default rating."""

    def _make(default: int = 0) -> dict[str, Any]:
        return {
            category: {item: default for item in items}
            for category, items in ptec.CATEGORIES.items()
        }

    return _make


@pytest.fixture
def make_cbi_answers() -> Callable[..., dict[str, Any]]:
    """Build nested CBI answers with a default rating."""

    def _make(default: int = 0) -> dict[str, Any]:
        return {
            subscale: {item: default for item in items}
            for subscale, items in cbi.SUBSCALES.items()
        }

    return _make
