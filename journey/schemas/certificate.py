"""Request/response schemas for certificates."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ClaimRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    course_id: str = Field(min_length=1, alias="courseId")


class CertificateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    issued_at: datetime = Field(serialization_alias="issuedAt")


class ClaimResponse(BaseModel):
    ok: bool = True
    certificate: CertificateOut


class CertificateStatusResponse(BaseModel):
    course_id: str = Field(serialization_alias="courseId")
    eligible: bool
    total_lessons: int = Field(serialization_alias="totalLessons")
    completed_lessons: int = Field(serialization_alias="completedLessons")
    exam_passed: bool = Field(serialization_alias="examPassed")
    exam_score: Optional[int] = Field(serialization_alias="examScore")
    issued: bool
    certificate_id: Optional[int] = Field(default=None, serialization_alias="certificateId")
    issued_at: Optional[datetime] = Field(default=None, serialization_alias="issuedAt")
    pdf_url: Optional[str] = Field(default=None, serialization_alias="pdfUrl")
    view_url: Optional[str] = Field(default=None, serialization_alias="viewUrl")
    verify_url: Optional[str] = Field(default=None, serialization_alias="verifyUrl")


class CertificateVerifyResponse(BaseModel):
    ok: bool = True
    certificate_id: int = Field(serialization_alias="certificateId")
    course_id: str = Field(serialization_alias="courseId")
    issued_at: datetime = Field(serialization_alias="issuedAt")
