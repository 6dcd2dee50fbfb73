"""Exam definition and attempt models."""

from sqlalchemy import Column, String, Integer, DateTime, Boolean, JSON, Index

from journey.core.database import Base, utcnow


class ExamDefinitionRecord(Base):
    """Stored exam per course; one question list per language."""
    __tablename__ = "exam_definitions"

    course_id = Column(String(64), primary_key=True)
    pass_score = Column(Integer, nullable=False, default=70)
    questions_en = Column(JSON, nullable=False, default=list)
    questions_ti = Column(JSON, nullable=False, default=list)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class ExamAttempt(Base):
    """One graded submission. Rows are append-only."""
    __tablename__ = "exam_attempts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False)
    course_id = Column(String(64), nullable=False)
    score = Column(Integer, nullable=False)
    passed = Column(Boolean, nullable=False, default=False)
    results = Column(JSON, nullable=False, default=list)  # per-question breakdown
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_exam_attempts_user_course_created", "user_id", "course_id", "created_at"),
    )
