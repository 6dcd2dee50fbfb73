"""Lesson progress endpoints."""

from fastapi import APIRouter, Depends

from journey.certificates.engine import CertificateEngine
from journey.core.config import settings
from journey.core.dependencies import (
    get_current_user,
    get_certificate_engine,
    get_progress_tracker,
    known_course,
    require_known_course,
)
from journey.progress.tracker import ProgressTracker
from journey.schemas.progress import (
    CourseProgressResponse,
    CourseStatus,
    LessonState,
    ProgressOverviewResponse,
    ProgressUpdateRequest,
)

router = APIRouter(prefix="/progress", tags=["progress"])


@router.post("/update")
async def update_progress(
    body: ProgressUpdateRequest,
    current_user: dict = Depends(get_current_user),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    """Merge the supplied lesson fields into the learner's progress."""
    course_id = require_known_course(body.course_id)
    await tracker.record_progress(current_user["user_id"], course_id, body.lesson_index, body)
    return {"ok": True}


@router.get("/status", response_model=ProgressOverviewResponse)
async def progress_overview(
    current_user: dict = Depends(get_current_user),
    tracker: ProgressTracker = Depends(get_progress_tracker),
    certificates: CertificateEngine = Depends(get_certificate_engine),
):
    """Completion summary for every known course."""
    user_id = current_user["user_id"]
    out = []
    for course_id in settings.KNOWN_COURSES:
        progress = await tracker.course_progress(user_id, course_id)
        certificate = await certificates.get_certificate(user_id, course_id)
        out.append(
            CourseStatus(
                course_id=course_id,
                total_lessons=progress.total_lessons,
                completed_lessons=progress.completed_lessons,
                has_certificate=certificate is not None,
            )
        )
    return ProgressOverviewResponse(status=out)


@router.get("/course/{course_id}", response_model=CourseProgressResponse)
async def course_progress(
    course_id: str = Depends(known_course),
    current_user: dict = Depends(get_current_user),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    """Per-lesson progress for one course."""
    progress = await tracker.course_progress(current_user["user_id"], course_id)
    return CourseProgressResponse(
        course_id=progress.course_id,
        total_lessons=progress.total_lessons,
        completed_lessons=progress.completed_lessons,
        by_lesson_index={
            index: LessonState(**state) for index, state in progress.by_lesson_index.items()
        },
    )
