"""
Content Catalog API - Pytest Configuration & Shared Fixtures

Provides reusable fixtures for:
- An in-memory implementation of the persistence gateway
- A gateway that fails on every call (for 500-path tests)
- Sample content records
- A manager and a FastAPI TestClient wired to the in-memory store
- A temporary SQLite database for gateway tests
- Capturing loguru records
"""

import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from loguru import logger

from src.database import Database, init_db
from src.main import app
from src.models import Content, ContentDto
from src.routes.api import get_manager
from src.services.content_manager import ContentsManager


# ---------------------------------------------------------------------------
# Fake gateways
# ---------------------------------------------------------------------------
class InMemoryContentDatabase(Database[Content, ContentDto]):
    """Dict-backed stand-in for ContentDatabase with the same contract."""

    def __init__(self, contents: Optional[List[Content]] = None):
        self.records: Dict[uuid.UUID, Content] = {c.id: c for c in contents or []}
        self.update_calls: List[ContentDto] = []

    async def read_all(self) -> List[Content]:
        return list(self.records.values())

    async def read(self, item_id: uuid.UUID) -> Optional[Content]:
        return self.records.get(item_id)

    async def create(self, dto: ContentDto) -> Optional[Content]:
        fields = dto.changes()
        if not fields.get("title"):
            return None
        content = Content(id=uuid.uuid4(), **fields)
        self.records[content.id] = content
        return content

    async def update(self, item_id: uuid.UUID, dto: ContentDto) -> Optional[Content]:
        existing = self.records.get(item_id)
        if existing is None:
            return None
        self.update_calls.append(dto)
        updated = existing.model_copy(update=dto.changes())
        self.records[item_id] = updated
        return updated

    async def delete(self, item_id: uuid.UUID) -> uuid.UUID:
        self.records.pop(item_id, None)
        return item_id


BROKEN_STORE_MESSAGE = "database is unreachable"


class BrokenContentDatabase(Database[Content, ContentDto]):
    """Gateway whose store is unreachable."""

    async def read_all(self):
        raise RuntimeError(BROKEN_STORE_MESSAGE)

    async def read(self, item_id):
        raise RuntimeError(BROKEN_STORE_MESSAGE)

    async def create(self, dto):
        raise RuntimeError(BROKEN_STORE_MESSAGE)

    async def update(self, item_id, dto):
        raise RuntimeError(BROKEN_STORE_MESSAGE)

    async def delete(self, item_id):
        raise RuntimeError(BROKEN_STORE_MESSAGE)


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------
def make_content(title: str, genres: Optional[List[str]] = None, **overrides) -> Content:
    """Build a Content record with realistic defaults."""
    data = {
        "id": uuid.uuid4(),
        "title": title,
        "subtitle": f"{title} subtitle",
        "description": f"Description of {title}",
        "image_url": "https://image.example.com/1.png",
        "duration": 120,
        "start_time": datetime(2024, 3, 9, 20, 0, tzinfo=timezone.utc),
        "end_time": datetime(2024, 3, 9, 22, 0, tzinfo=timezone.utc),
        "genres": list(genres or []),
    }
    data.update(overrides)
    return Content(**data)


@pytest.fixture
def sample_contents() -> List[Content]:
    return [
        make_content("Title 1", ["Drama", "Thriller"]),
        make_content("Another title", ["Comedy"]),
        make_content("Nature Documentary", ["Documentary", "drama"]),
    ]


@pytest.fixture
def fake_db(sample_contents) -> InMemoryContentDatabase:
    return InMemoryContentDatabase(sample_contents)


@pytest.fixture
def manager(fake_db) -> ContentsManager:
    return ContentsManager(fake_db)


# ---------------------------------------------------------------------------
# HTTP client fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def client(manager):
    """TestClient whose routes use the in-memory manager."""
    app.dependency_overrides[get_manager] = lambda: manager
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def broken_client():
    """TestClient whose manager raises on every call."""
    app.dependency_overrides[get_manager] = lambda: ContentsManager(
        BrokenContentDatabase()
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# SQLite fixture
# ---------------------------------------------------------------------------
@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Initialise a fresh SQLite database in a temporary directory."""
    path = tmp_path / "data" / "content.db"
    init_db(path)
    return path


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
@pytest.fixture
def log_records():
    """Collect loguru records emitted during the test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
