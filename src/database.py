"""
Content Catalog API - Persistence Gateway

``Database`` is the storage contract the manager depends on: single-entity
CRUD keyed by id, generic over the entity type and its transfer object.
``ContentDatabase`` implements it on top of SQLite, using aiosqlite for the
async request path and plain sqlite3 for start-up initialization.

Genres are stored as a JSON array in a TEXT column; timestamps as ISO-8601
text.  Absence is always reported as ``None`` rather than an exception.
"""

import json
import sqlite3
import uuid
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, TypeVar

import aiosqlite
from loguru import logger

from src.config import DB_PATH
from src.models import Content, ContentDto
from src.utils import parse_json_list

E = TypeVar("E")
T = TypeVar("T")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS contents (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    subtitle TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    image_url TEXT NOT NULL DEFAULT '',
    duration INTEGER NOT NULL DEFAULT 0,
    start_time TEXT,
    end_time TEXT,
    genres TEXT NOT NULL DEFAULT '[]',
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_contents_title ON contents(title COLLATE NOCASE);

CREATE TRIGGER IF NOT EXISTS update_contents_timestamp
    AFTER UPDATE ON contents
    FOR EACH ROW
    WHEN NEW.updated_at = OLD.updated_at
BEGIN
    UPDATE contents SET updated_at = CURRENT_TIMESTAMP WHERE id = OLD.id;
END;
"""

# Columns a ContentDto may write
_WRITABLE_COLUMNS = {
    "title",
    "subtitle",
    "description",
    "image_url",
    "duration",
    "start_time",
    "end_time",
    "genres",
}


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------
def init_db(db_path: Optional[Path] = None) -> None:
    """Initialize the SQLite database and create the contents table."""
    path = Path(db_path or DB_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with sqlite3.connect(str(path)) as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()
        logger.success(f"✅ Database initialized at {path}")
    except Exception as e:
        logger.critical(f"❌ Failed to initialize database: {e}")
        raise


# ---------------------------------------------------------------------------
# Async context manager (for use in FastAPI routes)
# ---------------------------------------------------------------------------
@asynccontextmanager
async def get_async_connection(db_path: Optional[Path] = None):
    """Async context manager for an aiosqlite connection with row factory."""
    db = await aiosqlite.connect(str(db_path or DB_PATH))
    db.row_factory = aiosqlite.Row
    try:
        yield db
    finally:
        await db.close()


async def check_database(db_path: Optional[Path] = None) -> bool:
    """Return True if the database file exists and the contents table is queryable."""
    path = Path(db_path or DB_PATH)
    if not path.exists():
        return False
    try:
        async with get_async_connection(path) as db:
            await db.execute("SELECT 1 FROM contents LIMIT 1")
    except sqlite3.Error as e:
        logger.warning(f"⚠️ Database health check failed: {e}")
        return False
    return True


# ---------------------------------------------------------------------------
# Row / column conversion
# ---------------------------------------------------------------------------
def row_to_dict(row) -> Dict[str, Any]:
    """Convert a database row to a plain dictionary."""
    if row is None:
        return {}
    return dict(row)


def row_to_content(row) -> Content:
    data = row_to_dict(row)
    return Content(
        id=data["id"],
        title=data["title"],
        subtitle=data.get("subtitle") or "",
        description=data.get("description") or "",
        image_url=data.get("image_url") or "",
        duration=data.get("duration") or 0,
        start_time=data.get("start_time"),
        end_time=data.get("end_time"),
        genres=parse_json_list(data.get("genres")),
    )


def _to_columns(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Map dto fields onto storable column values."""
    columns: Dict[str, Any] = {}
    for key, value in fields.items():
        if key not in _WRITABLE_COLUMNS:
            continue
        if key == "genres":
            value = json.dumps(list(value or []))
        elif isinstance(value, datetime):
            value = value.isoformat()
        columns[key] = value
    return columns


# ---------------------------------------------------------------------------
# Gateway contract
# ---------------------------------------------------------------------------
class Database(ABC, Generic[E, T]):
    """Single-table CRUD contract keyed by a UUID.

    Implementations return ``None`` for missing records and let genuine
    store failures propagate.
    """

    @abstractmethod
    async def read_all(self) -> List[E]:
        """Return every record; an empty list if there are none."""

    @abstractmethod
    async def read(self, item_id: uuid.UUID) -> Optional[E]:
        """Return the record with *item_id*, or None."""

    @abstractmethod
    async def create(self, dto: T) -> Optional[E]:
        """Persist a new record under a freshly generated id."""

    @abstractmethod
    async def update(self, item_id: uuid.UUID, dto: T) -> Optional[E]:
        """Merge the dto's set fields into an existing record."""

    @abstractmethod
    async def delete(self, item_id: uuid.UUID) -> uuid.UUID:
        """Remove a record; returns *item_id* whether or not it existed."""


# ---------------------------------------------------------------------------
# SQLite implementation
# ---------------------------------------------------------------------------
class ContentDatabase(Database[Content, ContentDto]):
    """aiosqlite-backed store for ``Content`` records."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path or DB_PATH)

    async def _fetch(self, db, content_id: uuid.UUID):
        cursor = await db.execute(
            "SELECT * FROM contents WHERE id = ?", (str(content_id),)
        )
        return await cursor.fetchone()

    async def read_all(self) -> List[Content]:
        async with get_async_connection(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM contents ORDER BY created_at, rowid"
            )
            rows = await cursor.fetchall()
            return [row_to_content(r) for r in rows]

    async def read(self, item_id: uuid.UUID) -> Optional[Content]:
        async with get_async_connection(self.db_path) as db:
            row = await self._fetch(db, item_id)
            return row_to_content(row) if row else None

    async def create(self, dto: ContentDto) -> Optional[Content]:
        """
        Insert a new content row and return it.

        Unset fields fall back to the column defaults.  Returns None when the
        dto carries no title, since a record cannot exist without one.
        """
        fields = dto.changes()
        if not fields.get("title"):
            logger.warning("⚠️ Refusing to create content without a title")
            return None

        content_id = uuid.uuid4()
        columns = {"id": str(content_id), **_to_columns(fields)}
        names = ", ".join(columns)
        placeholders = ", ".join("?" for _ in columns)

        async with get_async_connection(self.db_path) as db:
            await db.execute(
                f"INSERT INTO contents ({names}) VALUES ({placeholders})",
                list(columns.values()),
            )
            await db.commit()
            row = await self._fetch(db, content_id)

        logger.success(f"✅ Content added (id={content_id}): {fields['title']}")
        return row_to_content(row)

    async def update(
        self, item_id: uuid.UUID, dto: ContentDto
    ) -> Optional[Content]:
        """Update the fields set on *dto*. Returns None if the row is missing."""
        columns = _to_columns(dto.changes())

        async with get_async_connection(self.db_path) as db:
            row = await self._fetch(db, item_id)
            if row is None:
                return None
            if not columns:
                return row_to_content(row)

            set_clause = ", ".join(f"{k} = ?" for k in columns)
            await db.execute(
                f"UPDATE contents SET {set_clause} WHERE id = ?",
                list(columns.values()) + [str(item_id)],
            )
            await db.commit()
            row = await self._fetch(db, item_id)

        logger.info(f"✏️ Content id={item_id} updated: {list(columns.keys())}")
        return row_to_content(row)

    async def delete(self, item_id: uuid.UUID) -> uuid.UUID:
        async with get_async_connection(self.db_path) as db:
            cursor = await db.execute(
                "DELETE FROM contents WHERE id = ?", (str(item_id),)
            )
            await db.commit()
            if cursor.rowcount > 0:
                logger.info(f"🗑️ Content id={item_id} deleted from database")
            else:
                logger.warning(f"⚠️ Content id={item_id} not found for deletion")
        return item_id
