"""Per-lesson progress: merge-only updates and course completion counts."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from journey.catalog.lessons import LessonCatalog
from journey.core.database import dialect_insert, utcnow
from journey.core.exceptions import NotFound, StorageUnavailable, ValidationError
from journey.models.progress import LessonProgress
from journey.schemas.progress import ProgressPatch

logger = structlog.get_logger()


@dataclass
class CourseProgress:
    course_id: str
    total_lessons: int
    completed_lessons: int
    by_lesson_index: Dict[int, Dict[str, Any]] = field(default_factory=dict)


class ProgressTracker:
    """Owns `lesson_progress`; everything else only reads it."""

    def __init__(self, db: AsyncSession, catalog: LessonCatalog):
        self.db = db
        self.catalog = catalog

    async def _query(self, stmt):
        try:
            return await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Progress query failed", error=str(e))
            raise StorageUnavailable() from e

    async def record_progress(
        self,
        user_id: str,
        course_id: str,
        lesson_index: int,
        patch: Optional[ProgressPatch] = None,
    ) -> None:
        """Create the row on first call, then merge only the supplied fields.

        A completed lesson stays completed: ``completed=False`` in a later
        patch is ignored.
        """
        if isinstance(lesson_index, bool) or not isinstance(lesson_index, int) or lesson_index < 0:
            raise ValidationError("lessonIndex must be a non-negative integer", lessonIndex=lesson_index)

        total = await self.catalog.total_lessons(course_id)
        if total == 0:
            logger.warning("Lesson catalog reports no lessons", course_id=course_id)
        if lesson_index >= total:
            raise NotFound(
                "Lesson not found",
                courseId=course_id,
                lessonIndex=lesson_index,
                totalLessons=total,
            )

        fields = (patch or ProgressPatch()).supplied()
        now = utcnow()

        values = {
            "user_id": user_id,
            "course_id": course_id,
            "lesson_index": lesson_index,
            "completed": fields.get("completed", False),
            "quiz_score": fields.get("quiz_score"),
            "reflection": fields.get("reflection"),
            "reflection_updated_at": now if "reflection" in fields else None,
            "updated_at": now,
        }

        stmt = dialect_insert(self.db, LessonProgress).values(**values)
        updates = {"updated_at": stmt.excluded.updated_at}
        if "completed" in fields:
            updates["completed"] = or_(LessonProgress.completed, stmt.excluded.completed)
        if "quiz_score" in fields:
            updates["quiz_score"] = stmt.excluded.quiz_score
        if "reflection" in fields:
            updates["reflection"] = stmt.excluded.reflection
            updates["reflection_updated_at"] = stmt.excluded.reflection_updated_at
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "course_id", "lesson_index"],
            set_=updates,
        )

        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to record progress", user_id=user_id, course_id=course_id, error=str(e))
            await self.db.rollback()
            raise StorageUnavailable() from e

        logger.info(
            "Lesson progress recorded",
            user_id=user_id,
            course_id=course_id,
            lesson_index=lesson_index,
            fields=sorted(fields),
        )

    async def get_lesson(self, user_id: str, course_id: str, lesson_index: int) -> Optional[LessonProgress]:
        result = await self._query(
            select(LessonProgress).where(
                LessonProgress.user_id == user_id,
                LessonProgress.course_id == course_id,
                LessonProgress.lesson_index == lesson_index,
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def completed_count(self, user_id: str, course_id: str, total_lessons: int) -> int:
        """Completed lessons that still exist in the catalog."""
        result = await self._query(
            select(func.count()).select_from(LessonProgress).where(
                LessonProgress.user_id == user_id,
                LessonProgress.course_id == course_id,
                LessonProgress.completed.is_(True),
                LessonProgress.lesson_index < total_lessons,
            )
        )
        return result.scalar_one() or 0

    async def course_progress(self, user_id: str, course_id: str) -> CourseProgress:
        total = await self.catalog.total_lessons(course_id)

        result = await self._query(
            select(LessonProgress)
            .where(LessonProgress.user_id == user_id, LessonProgress.course_id == course_id)
            .order_by(LessonProgress.lesson_index)
            .execution_options(populate_existing=True)
        )
        by_index = {
            row.lesson_index: {"completed": bool(row.completed), "quiz_score": row.quiz_score}
            for row in result.scalars().all()
        }

        return CourseProgress(
            course_id=course_id,
            total_lessons=total,
            completed_lessons=await self.completed_count(user_id, course_id, total),
            by_lesson_index=by_index,
        )
