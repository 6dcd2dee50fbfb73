"""Request/response schemas for lesson progress."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from journey.core.config import settings


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ProgressPatch(CamelModel):
    """Fields a learner may set on a lesson; unset fields are left untouched."""

    completed: Optional[bool] = None
    quiz_score: Optional[int] = Field(default=None, ge=0, le=100, alias="quizScore")
    reflection: Optional[str] = Field(default=None, max_length=settings.REFLECTION_MAX_LENGTH)

    def supplied(self) -> Dict[str, object]:
        """Explicitly provided, non-null fields. An empty reflection counts."""
        return {
            name: getattr(self, name)
            for name in ("completed", "quiz_score", "reflection")
            if name in self.model_fields_set and getattr(self, name) is not None
        }


class ProgressUpdateRequest(ProgressPatch):
    course_id: str = Field(min_length=1, alias="courseId")
    lesson_index: int = Field(ge=0, alias="lessonIndex")


class LessonState(CamelModel):
    completed: bool
    quiz_score: Optional[int] = Field(default=None, serialization_alias="quizScore")


class CourseProgressResponse(CamelModel):
    course_id: str = Field(serialization_alias="courseId")
    total_lessons: int = Field(serialization_alias="totalLessons")
    completed_lessons: int = Field(serialization_alias="completedLessons")
    by_lesson_index: Dict[int, LessonState] = Field(serialization_alias="byLessonIndex")


class CourseStatus(CamelModel):
    course_id: str = Field(serialization_alias="courseId")
    total_lessons: int = Field(serialization_alias="totalLessons")
    completed_lessons: int = Field(serialization_alias="completedLessons")
    has_certificate: bool = Field(serialization_alias="hasCertificate")


class ProgressOverviewResponse(BaseModel):
    status: List[CourseStatus]
