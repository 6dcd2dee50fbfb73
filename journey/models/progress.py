"""Lesson catalog and per-lesson progress models."""

from sqlalchemy import Column, String, Integer, DateTime, Boolean, Text, UniqueConstraint, Index

from journey.core.database import Base, utcnow


class Lesson(Base):
    """Ordered lessons per course. Content itself is managed elsewhere."""
    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(String(64), nullable=False, index=True)
    lesson_index = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False, default="")

    __table_args__ = (
        UniqueConstraint("course_id", "lesson_index", name="uq_lessons_course_index"),
    )


class LessonProgress(Base):
    """Completion state and reflection for one (user, course, lesson)."""
    __tablename__ = "lesson_progress"

    user_id = Column(String(64), primary_key=True)
    course_id = Column(String(64), primary_key=True)
    lesson_index = Column(Integer, primary_key=True)
    completed = Column(Boolean, nullable=False, default=False)
    quiz_score = Column(Integer)  # 0-100
    reflection = Column(Text)
    reflection_updated_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_lesson_progress_user_course", "user_id", "course_id"),
    )
