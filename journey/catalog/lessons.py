"""Lesson counts per course, from the local table or the content service."""

from typing import Protocol

import httpx
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from journey.core.exceptions import StorageUnavailable
from journey.models.progress import Lesson

logger = structlog.get_logger()


class LessonCatalog(Protocol):
    async def total_lessons(self, course_id: str) -> int:
        ...


class DatabaseLessonCatalog:
    """Counts rows of the `lessons` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def total_lessons(self, course_id: str) -> int:
        try:
            result = await self.db.execute(
                select(func.count(Lesson.id)).where(Lesson.course_id == course_id)
            )
        except SQLAlchemyError as e:
            logger.error("Lesson count failed", course_id=course_id, error=str(e))
            raise StorageUnavailable() from e
        return result.scalar_one() or 0


class RemoteLessonCatalog:
    """Asks the content service: GET {base_url}/courses/{id}/lessons/count."""

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        self.client = client
        self.base_url = base_url.rstrip("/")

    async def total_lessons(self, course_id: str) -> int:
        url = f"{self.base_url}/courses/{course_id}/lessons/count"
        try:
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            logger.error("Content service unreachable", url=url, error=str(e))
            raise StorageUnavailable() from e

        if response.status_code == 404:
            return 0
        if response.status_code >= 400:
            logger.error("Content service error", url=url, status=response.status_code)
            raise StorageUnavailable()

        count = response.json().get("count", 0)
        if isinstance(count, bool) or not isinstance(count, int):
            return 0
        return max(count, 0)
