"""Request/response schemas for exams."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExamSubmitRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    answers: List[int]
    lang: str = Field(default="en", pattern="^(en|ti)$")


class QuestionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    index: int
    submitted_choice: int = Field(serialization_alias="submittedChoice")
    correct_choice: int = Field(serialization_alias="correctChoice")
    is_correct: bool = Field(serialization_alias="isCorrect")


class ExamSubmitResponse(BaseModel):
    score: int
    passed: bool
    pass_score: int = Field(serialization_alias="passScore")
    results: List[QuestionResult]


class ExamStatusResponse(BaseModel):
    course_id: str = Field(serialization_alias="courseId")
    attempted: bool
    attempt_count: int = Field(serialization_alias="attemptCount")
    max_attempts: Optional[int] = Field(serialization_alias="maxAttempts")
    score: Optional[int] = None
    passed: bool = False
    updated_at: Optional[datetime] = Field(default=None, serialization_alias="updatedAt")


class PublicQuestion(BaseModel):
    text: str
    options: List[str]


class PublicExam(BaseModel):
    questions: List[PublicQuestion]


class ExamDefinitionResponse(BaseModel):
    course_id: str = Field(serialization_alias="courseId")
    lang: str
    pass_score: int = Field(serialization_alias="passScore")
    exam: PublicExam


class AttemptOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    score: int
    passed: bool
    created_at: datetime = Field(serialization_alias="createdAt")


class AttemptHistoryResponse(BaseModel):
    course_id: str = Field(serialization_alias="courseId")
    attempts: List[AttemptOut]
