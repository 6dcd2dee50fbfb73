"""Final exam endpoints."""

from fastapi import APIRouter, Depends, Query

from journey.core.dependencies import (
    get_current_user,
    get_exam_definitions,
    get_exam_engine,
    known_course,
)
from journey.exams.definitions import ExamDefinitionStore
from journey.exams.engine import ExamEngine, results_payload
from journey.schemas.exam import (
    AttemptHistoryResponse,
    AttemptOut,
    ExamDefinitionResponse,
    ExamStatusResponse,
    ExamSubmitRequest,
    ExamSubmitResponse,
)

router = APIRouter(prefix="/exams", tags=["exams"])


@router.get("/status/{course_id}", response_model=ExamStatusResponse)
async def exam_status(
    course_id: str = Depends(known_course),
    current_user: dict = Depends(get_current_user),
    engine: ExamEngine = Depends(get_exam_engine),
):
    """Attempt count and latest result; defaults when not attempted."""
    status = await engine.exam_status(current_user["user_id"], course_id)
    return ExamStatusResponse(
        course_id=course_id,
        attempted=status.attempted,
        attempt_count=status.attempt_count,
        max_attempts=status.max_attempts,
        score=status.latest_score,
        passed=status.latest_passed,
        updated_at=status.latest_at,
    )


@router.get("/{course_id}", response_model=ExamDefinitionResponse)
async def get_exam(
    course_id: str = Depends(known_course),
    lang: str = Query("en"),
    current_user: dict = Depends(get_current_user),
    definitions: ExamDefinitionStore = Depends(get_exam_definitions),
):
    """Exam questions without the answer key."""
    view = await definitions.public_view(course_id, lang)
    return ExamDefinitionResponse(course_id=course_id, **view)


@router.get("/{course_id}/attempts", response_model=AttemptHistoryResponse)
async def attempt_history(
    course_id: str = Depends(known_course),
    current_user: dict = Depends(get_current_user),
    engine: ExamEngine = Depends(get_exam_engine),
):
    """Every recorded attempt, newest first."""
    attempts = await engine.attempt_history(current_user["user_id"], course_id)
    return AttemptHistoryResponse(
        course_id=course_id,
        attempts=[AttemptOut.model_validate(a) for a in attempts],
    )


@router.post("/{course_id}/submit", response_model=ExamSubmitResponse)
async def submit_exam(
    body: ExamSubmitRequest,
    course_id: str = Depends(known_course),
    current_user: dict = Depends(get_current_user),
    engine: ExamEngine = Depends(get_exam_engine),
):
    """Grade answers and record the attempt."""
    graded = await engine.submit_exam(current_user["user_id"], course_id, body.answers, body.lang)
    return ExamSubmitResponse(**results_payload(graded))
