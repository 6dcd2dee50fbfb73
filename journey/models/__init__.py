"""Data models for the Journey progress service."""

from journey.models.progress import Lesson, LessonProgress
from journey.models.exam import ExamDefinitionRecord, ExamAttempt
from journey.models.certificate import Certificate

__all__ = [
    "Lesson",
    "LessonProgress",
    "ExamDefinitionRecord",
    "ExamAttempt",
    "Certificate",
]
