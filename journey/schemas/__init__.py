from journey.schemas.progress import (
    ProgressPatch,
    ProgressUpdateRequest,
    CourseProgressResponse,
    ProgressOverviewResponse,
)
from journey.schemas.exam import (
    ExamSubmitRequest,
    ExamSubmitResponse,
    ExamStatusResponse,
    ExamDefinitionResponse,
    AttemptHistoryResponse,
)
from journey.schemas.certificate import (
    ClaimRequest,
    ClaimResponse,
    CertificateStatusResponse,
    CertificateVerifyResponse,
)

__all__ = [
    "ProgressPatch",
    "ProgressUpdateRequest",
    "CourseProgressResponse",
    "ProgressOverviewResponse",
    "ExamSubmitRequest",
    "ExamSubmitResponse",
    "ExamStatusResponse",
    "ExamDefinitionResponse",
    "AttemptHistoryResponse",
    "ClaimRequest",
    "ClaimResponse",
    "CertificateStatusResponse",
    "CertificateVerifyResponse",
]
