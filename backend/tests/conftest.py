"""
ListBoard Backend: Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Overview (all function-scoped):
    ├── fake_repository: In-memory stand-in for the MongoDB List collection
    ├── relational_session_factory: aiosqlite in-memory database with the `list` table
    ├── app: FastAPI app wired to the two fixtures above
    └── test_client: HTTPX AsyncClient for API endpoint testing

No live MongoDB or PostgreSQL is needed.
"""

import copy
import os
import re
from typing import Any, Dict, List, Mapping, Optional

# Override settings for testing BEFORE any listboard imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["MONGODB_URL"] = "mongodb://localhost:27017"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from listboard.database import Base, get_db_session
from listboard.exceptions import NotFoundError
from listboard.models.list_row import ListRow  # noqa: F401


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Document Store
# ══════════════════════════════════════════════════════════════════════════

def _matches(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    """Evaluates the filter shapes ListService builds: equality and $regex."""
    for field, condition in query.items():
        value = document.get(field)
        if isinstance(condition, dict) and "$regex" in condition:
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            if not isinstance(value, str) or not re.search(condition["$regex"], value, flags):
                return False
        elif value != condition:
            return False
    return True


class FakeListRepository:
    """
    Dict-backed replacement for ListRepository.

    Same coroutine interface; keeps insertion order as the natural order and
    hands out deep copies so tests cannot mutate stored state by accident.
    """

    def __init__(self):
        self.documents: Dict[ObjectId, Dict[str, Any]] = {}

    async def find(
        self,
        query: Optional[Mapping[str, Any]] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Dict[str, Any]]:
        found = [doc for doc in self.documents.values() if _matches(doc, query or {})]
        found = found[skip:]
        if limit:
            found = found[:limit]
        return copy.deepcopy(found)

    async def count(self, query: Optional[Mapping[str, Any]] = None) -> int:
        return len([doc for doc in self.documents.values() if _matches(doc, query or {})])

    async def find_by_id(self, record_id: ObjectId) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self.documents.get(record_id))

    async def save(self, document: Dict[str, Any]) -> ObjectId:
        if "_id" in document and document["_id"] not in self.documents:
            raise NotFoundError(resource="list", resource_id=str(document["_id"]))
        stored = copy.deepcopy(document)
        stored.setdefault("_id", ObjectId())
        self.documents[stored["_id"]] = stored
        return stored["_id"]

    async def find_by_id_and_remove(self, record_id: ObjectId) -> Optional[Dict[str, Any]]:
        return self.documents.pop(record_id, None)


@pytest.fixture
def fake_repository():
    """Provides an empty in-memory List collection."""
    return FakeListRepository()


# ══════════════════════════════════════════════════════════════════════════
# Relational Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def relational_session_factory():
    """
    Provides a session factory bound to a fresh in-memory SQLite database.

    StaticPool keeps a single connection, so every session sees the same
    in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


# ══════════════════════════════════════════════════════════════════════════
# Application & HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(fake_repository, relational_session_factory):
    """
    Provides a FastAPI app wired to the test storage backends.

    ASGITransport does not run the lifespan, so the repository normally
    created at startup is placed on app.state here.
    """
    from listboard.main import create_app

    application = create_app()
    application.state.list_repository = fake_repository

    async def override_db_session():
        async with relational_session_factory() as session:
            yield session
            await session.commit()

    application.dependency_overrides[get_db_session] = override_db_session
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
