"""Unit tests for ProgressTracker merge semantics and course counts."""
import pytest

from journey.core.exceptions import NotFound, ValidationError
from journey.schemas.progress import ProgressPatch

USER = "user-1"


def snapshot(row):
    return (row.completed, row.quiz_score, row.reflection)


@pytest.mark.unit
class TestRecordProgress:
    @pytest.mark.asyncio
    async def test_first_update_creates_row_not_completed(self, engines):
        tracker, _, _ = engines
        await tracker.record_progress(USER, "foundation", 0, ProgressPatch(quiz_score=55))

        row = await tracker.get_lesson(USER, "foundation", 0)
        assert row is not None
        assert row.completed is False
        assert row.quiz_score == 55
        assert row.reflection is None
        assert row.reflection_updated_at is None

    @pytest.mark.asyncio
    async def test_merge_preserves_fields_not_supplied(self, engines):
        tracker, _, _ = engines
        await tracker.record_progress(USER, "foundation", 0, ProgressPatch(quiz_score=80, reflection="notes"))
        await tracker.record_progress(USER, "foundation", 0, ProgressPatch(completed=True))

        row = await tracker.get_lesson(USER, "foundation", 0)
        assert snapshot(row) == (True, 80, "notes")

    @pytest.mark.asyncio
    async def test_completed_never_reverts(self, engines):
        tracker, _, _ = engines
        await tracker.record_progress(USER, "foundation", 1, ProgressPatch(completed=True))
        await tracker.record_progress(USER, "foundation", 1, ProgressPatch(completed=False, quiz_score=10))

        row = await tracker.get_lesson(USER, "foundation", 1)
        assert row.completed is True
        assert row.quiz_score == 10

    @pytest.mark.asyncio
    async def test_recompleting_is_not_an_error(self, engines):
        tracker, _, _ = engines
        patch = ProgressPatch(completed=True)
        await tracker.record_progress(USER, "foundation", 0, patch)
        await tracker.record_progress(USER, "foundation", 0, patch)

        progress = await tracker.course_progress(USER, "foundation")
        assert progress.completed_lessons == 1

    @pytest.mark.asyncio
    async def test_replaying_patch_is_idempotent(self, engines):
        tracker, _, _ = engines
        patch = ProgressPatch(completed=True, quiz_score=90, reflection="done")
        await tracker.record_progress(USER, "growth", 2, patch)
        first = snapshot(await tracker.get_lesson(USER, "growth", 2))
        await tracker.record_progress(USER, "growth", 2, patch)
        second = snapshot(await tracker.get_lesson(USER, "growth", 2))

        assert first == second == (True, 90, "done")

    @pytest.mark.asyncio
    async def test_empty_reflection_is_distinct_from_omitted(self, engines):
        tracker, _, _ = engines
        await tracker.record_progress(USER, "foundation", 0, ProgressPatch(reflection="first thoughts"))
        row = await tracker.get_lesson(USER, "foundation", 0)
        stamped = row.reflection_updated_at
        assert stamped is not None

        # omitted: reflection and its timestamp untouched
        await tracker.record_progress(USER, "foundation", 0, ProgressPatch(quiz_score=40))
        row = await tracker.get_lesson(USER, "foundation", 0)
        assert row.reflection == "first thoughts"
        assert row.reflection_updated_at == stamped

        # empty string: stored, timestamp refreshed
        await tracker.record_progress(USER, "foundation", 0, ProgressPatch(reflection=""))
        row = await tracker.get_lesson(USER, "foundation", 0)
        assert row.reflection == ""
        assert row.reflection_updated_at >= stamped

    @pytest.mark.asyncio
    async def test_explicit_null_counts_as_omitted(self, engines):
        tracker, _, _ = engines
        await tracker.record_progress(USER, "foundation", 0, ProgressPatch(quiz_score=70))
        await tracker.record_progress(USER, "foundation", 0, ProgressPatch.model_validate({"quizScore": None}))

        row = await tracker.get_lesson(USER, "foundation", 0)
        assert row.quiz_score == 70

    @pytest.mark.asyncio
    @pytest.mark.parametrize("lesson_index", [-1, 1.5, True, "0"])
    async def test_rejects_invalid_lesson_index(self, engines, lesson_index):
        tracker, _, _ = engines
        with pytest.raises(ValidationError):
            await tracker.record_progress(USER, "foundation", lesson_index, ProgressPatch(completed=True))

    @pytest.mark.asyncio
    async def test_rejects_lesson_outside_catalog(self, engines):
        tracker, _, _ = engines
        with pytest.raises(NotFound) as excinfo:
            await tracker.record_progress(USER, "foundation", 2, ProgressPatch(completed=True))
        assert excinfo.value.details["totalLessons"] == 2
        assert await tracker.get_lesson(USER, "foundation", 2) is None

    @pytest.mark.asyncio
    async def test_course_missing_from_catalog_reports_zero_lessons(self, engines):
        tracker, _, _ = engines
        with pytest.raises(NotFound) as excinfo:
            await tracker.record_progress(USER, "excellence", 0, ProgressPatch(completed=True))
        assert excinfo.value.details == {"courseId": "excellence", "lessonIndex": 0, "totalLessons": 0}


@pytest.mark.unit
class TestCourseProgress:
    @pytest.mark.asyncio
    async def test_counts_and_read_model(self, engines):
        tracker, _, _ = engines
        await tracker.record_progress(USER, "growth", 0, ProgressPatch(completed=True, quiz_score=100))
        await tracker.record_progress(USER, "growth", 2, ProgressPatch(quiz_score=30))

        progress = await tracker.course_progress(USER, "growth")
        assert progress.total_lessons == 3
        assert progress.completed_lessons == 1
        assert progress.by_lesson_index == {
            0: {"completed": True, "quiz_score": 100},
            2: {"completed": False, "quiz_score": 30},
        }

    @pytest.mark.asyncio
    async def test_completed_never_exceeds_total(self, engines):
        tracker, _, _ = engines
        for i in range(3):
            await tracker.record_progress(USER, "growth", i, ProgressPatch(completed=True))

        progress = await tracker.course_progress(USER, "growth")
        assert progress.completed_lessons == progress.total_lessons == 3

    @pytest.mark.asyncio
    async def test_other_users_do_not_leak(self, engines):
        tracker, _, _ = engines
        await tracker.record_progress("someone-else", "foundation", 0, ProgressPatch(completed=True))

        progress = await tracker.course_progress(USER, "foundation")
        assert progress.completed_lessons == 0
        assert progress.by_lesson_index == {}

    @pytest.mark.asyncio
    async def test_course_without_lessons(self, engines):
        tracker, _, _ = engines
        progress = await tracker.course_progress(USER, "excellence")
        assert progress.total_lessons == 0
        assert progress.completed_lessons == 0
