"""
Content Catalog API - Data Models

- ``Content``      – the persisted record, as returned to clients
- ``ContentDto``   – partial description of a create/update handed to the
                     manager and the persistence gateway
- ``ContentInput`` – the JSON body accepted by the POST/PATCH endpoints

``ContentDto`` relies on pydantic's ``model_fields_set`` to tell "not sent"
apart from "sent as null": only fields in that set are written on update.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

# Columns that may legitimately be cleared by sending ``null``.
NULLABLE_FIELDS = {"start_time", "end_time"}

# Largest value an SQLite INTEGER column can hold
SQLITE_MAX_INTEGER = 2**63 - 1


class Content(BaseModel):
    id: uuid.UUID
    title: str
    subtitle: str = ""
    description: str = ""
    image_url: str = ""
    duration: int = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    genres: List[str] = Field(default_factory=list)


class ContentDto(BaseModel):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    duration: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    genres: Optional[List[str]] = None

    @classmethod
    def with_genres(cls, genres: Iterable[str]) -> "ContentDto":
        """A dto that only touches the genre list."""
        return cls(genres=list(genres))

    def changes(self) -> Dict[str, Any]:
        """
        Return the fields explicitly set on this dto.

        ``None`` is kept only for nullable columns; for everything else a
        null value means "leave unchanged".
        """
        data = self.model_dump(include=set(self.model_fields_set))
        return {
            key: value
            for key, value in data.items()
            if value is not None or key in NULLABLE_FIELDS
        }


class ContentInput(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    subtitle: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0, le=SQLITE_MAX_INTEGER)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    genres: Optional[List[str]] = None

    def to_dto(self) -> ContentDto:
        """Convert to a transfer object carrying only the fields the client sent."""
        return ContentDto(**self.model_dump(exclude_unset=True))
