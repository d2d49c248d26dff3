"""
Content Catalog API - Content Management Service

Handles:
- Listing and filtering content (title / genre substring search)
- Single-record create / read / update / delete
- Adding and removing genres on an existing record

The manager holds no state between calls; every operation is a round trip
through the persistence gateway it was constructed with.

Genre matching differs by operation: filtering is a case-insensitive
substring match, while add/remove compare genres by exact value.
"""

import uuid
from typing import Iterable, List, Optional

from src.database import Database
from src.models import Content, ContentDto
from src.utils import unique_in_order


def _matches(needle: str, haystack: str) -> bool:
    return needle.casefold() in haystack.casefold()


class ContentsManager:
    def __init__(self, database: Database[Content, ContentDto]):
        self._database = database

    async def get_many_contents(self) -> List[Content]:
        return await self._database.read_all()

    async def get_filtered_contents(
        self,
        title: Optional[str] = None,
        genre: Optional[str] = None,
    ) -> List[Content]:
        """
        Return every record matching the given filters.

        Both filters are optional; empty strings are ignored.  When both are
        supplied a record must satisfy each of them.
        """
        contents = await self._database.read_all()

        if title:
            contents = [c for c in contents if _matches(title, c.title)]

        if genre:
            contents = [
                c for c in contents if any(_matches(genre, g) for g in c.genres)
            ]

        return contents

    async def create_content(self, content: ContentDto) -> Optional[Content]:
        return await self._database.create(content)

    async def get_content(self, content_id: uuid.UUID) -> Optional[Content]:
        return await self._database.read(content_id)

    async def update_content(
        self, content_id: uuid.UUID, content: ContentDto
    ) -> Optional[Content]:
        return await self._database.update(content_id, content)

    async def delete_content(self, content_id: uuid.UUID) -> uuid.UUID:
        return await self._database.delete(content_id)

    async def add_genres(
        self, content_id: uuid.UUID, genres: Iterable[str]
    ) -> Optional[Content]:
        """Append *genres* to the record's list, dropping exact duplicates."""
        content = await self._database.read(content_id)
        if content is None:
            return None

        updated = unique_in_order([*(content.genres or []), *genres])
        return await self._database.update(
            content_id, ContentDto.with_genres(updated)
        )

    async def remove_genres(
        self, content_id: uuid.UUID, genres: Iterable[str]
    ) -> Optional[Content]:
        """Remove every genre exactly equal to one of *genres*."""
        content = await self._database.read(content_id)
        if content is None:
            return None

        removal = set(genres)
        updated = [g for g in (content.genres or []) if g not in removal]
        return await self._database.update(
            content_id, ContentDto.with_genres(updated)
        )
