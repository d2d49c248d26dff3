"""
Content Catalog API - JSON API Routes

Provides the REST endpoints for:
- Content CRUD (list, filter, get, create, patch, delete)
- Genre add/remove on a single content record
- Health check

Handlers only translate manager results into responses: a ``None`` or
empty result becomes a 404, anything raised becomes a 500.  Outcome logging
for every branch is done by the ``logged_outcome`` decorator so the
handlers stay free of it.
"""

import functools
import time
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel

from src.config import API_PREFIX, APP_VERSION
from src.database import ContentDatabase, check_database
from src.models import Content, ContentInput
from src.services.content_manager import ContentsManager
from src.utils import utc_now

router = APIRouter(prefix=f"{API_PREFIX}/content", tags=["Content"])
health_router = APIRouter(prefix="/api", tags=["Health"])

# Track startup time for health check
_START_TIME = time.time()

NOT_FOUND_DETAIL = "Content not found"
UNEXPECTED_ERROR_DETAIL = "An unexpected error occurred."
CREATE_PROBLEM_DETAIL = "A problem occurred while creating the content."


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------
def get_manager() -> ContentsManager:
    """Build a manager over the configured SQLite store."""
    return ContentsManager(ContentDatabase())


# ---------------------------------------------------------------------------
# Outcome logging
# ---------------------------------------------------------------------------
def _request_payload(kwargs: Dict[str, Any]) -> Any:
    for value in kwargs.values():
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json", exclude_unset=True)
    return None


def logged_outcome(action: str):
    """
    Wrap an endpoint so each outcome is logged and unhandled errors become 500s.

    - success          → info, with the result count for list responses
    - HTTPException 4xx → warning, re-raised
    - HTTPException 5xx → error with the request payload, re-raised
    - anything else    → error with the exception attached, generic 500 body
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            content_id = kwargs.get("content_id")
            ref = f" (id={content_id})" if content_id is not None else ""
            logger.info("📥 {}{} at {}", action, ref, utc_now())

            try:
                result = await func(*args, **kwargs)
            except HTTPException as exc:
                if exc.status_code >= 500:
                    logger.error(
                        "❌ {} failed{} at {}: {} | request: {}",
                        action,
                        ref,
                        utc_now(),
                        exc.detail,
                        _request_payload(kwargs),
                    )
                else:
                    logger.warning(
                        "⚠️ {} returned {}{} at {}: {}",
                        action,
                        exc.status_code,
                        ref,
                        utc_now(),
                        exc.detail,
                    )
                raise
            except Exception as exc:
                logger.opt(exception=exc).error(
                    "❌ Error while {}{} at {} | request: {}",
                    action,
                    ref,
                    utc_now(),
                    _request_payload(kwargs),
                )
                return JSONResponse(
                    status_code=500,
                    content={"detail": UNEXPECTED_ERROR_DETAIL},
                )

            if isinstance(result, list):
                logger.info("✅ {} returned {} items at {}", action, len(result), utc_now())
            else:
                logger.info("✅ {}{} succeeded at {}", action, ref, utc_now())
            return result

        return wrapper

    return decorator


def _found(content: Optional[Content]) -> Content:
    if content is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    return content


def _non_empty(contents: List[Content]) -> List[Content]:
    if not contents:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    return contents


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@health_router.get("/health")
async def health_check():
    """Health check endpoint for the service."""
    uptime = round(time.time() - _START_TIME, 2)
    db_ok = await check_database()

    return {
        "status": "ok" if db_ok else "degraded",
        "database": "ok" if db_ok else "unavailable",
        "uptime_seconds": uptime,
        "version": APP_VERSION,
    }


# ---------------------------------------------------------------------------
# Content CRUD
# ---------------------------------------------------------------------------
@router.get(
    "",
    response_model=List[Content],
    deprecated=True,
    summary="List all contents (use /filter instead)",
)
@logged_outcome("fetching all contents")
async def api_get_many_contents(
    manager: ContentsManager = Depends(get_manager),
):
    """Return every content record. Deprecated in favour of ``GET /filter``."""
    return _non_empty(await manager.get_many_contents())


@router.get("/filter", response_model=List[Content])
@logged_outcome("fetching filtered contents")
async def api_get_filtered_contents(
    title: Optional[str] = Query(None),
    genre: Optional[str] = Query(None),
    manager: ContentsManager = Depends(get_manager),
):
    """Filter by case-insensitive substring on title and/or any genre."""
    logger.debug("🔎 Filters: title={!r} genre={!r}", title, genre)
    return _non_empty(await manager.get_filtered_contents(title=title, genre=genre))


@router.get("/{content_id}", response_model=Content)
@logged_outcome("fetching content")
async def api_get_content(
    content_id: uuid.UUID,
    manager: ContentsManager = Depends(get_manager),
):
    return _found(await manager.get_content(content_id))


@router.post("", response_model=Content)
@logged_outcome("creating content")
async def api_create_content(
    body: ContentInput,
    manager: ContentsManager = Depends(get_manager),
):
    """Create a new content record from the request body."""
    created = await manager.create_content(body.to_dto())
    if created is None:
        raise HTTPException(status_code=500, detail=CREATE_PROBLEM_DETAIL)
    return created


@router.patch("/{content_id}", response_model=Content)
@logged_outcome("updating content")
async def api_update_content(
    content_id: uuid.UUID,
    body: ContentInput,
    manager: ContentsManager = Depends(get_manager),
):
    """Apply the fields present in the body; omitted fields are left unchanged."""
    return _found(await manager.update_content(content_id, body.to_dto()))


@router.delete("/{content_id}", response_model=uuid.UUID)
@logged_outcome("deleting content")
async def api_delete_content(
    content_id: uuid.UUID,
    manager: ContentsManager = Depends(get_manager),
):
    """Delete a content record. Unknown ids are not an error."""
    return await manager.delete_content(content_id)


# ---------------------------------------------------------------------------
# Genres
# ---------------------------------------------------------------------------
@router.post("/{content_id}/genre", response_model=Content)
@logged_outcome("adding genres")
async def api_add_genres(
    content_id: uuid.UUID,
    genres: List[str] = Body(...),
    manager: ContentsManager = Depends(get_manager),
):
    return _found(await manager.add_genres(content_id, genres))


@router.delete("/{content_id}/genre", response_model=Content)
@logged_outcome("removing genres")
async def api_remove_genres(
    content_id: uuid.UUID,
    genres: List[str] = Body(...),
    manager: ContentsManager = Depends(get_manager),
):
    return _found(await manager.remove_genres(content_id, genres))
