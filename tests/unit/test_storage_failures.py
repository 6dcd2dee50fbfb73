"""Unit tests for database failures surfacing as StorageUnavailable."""
import pytest
from sqlalchemy.exc import OperationalError

from journey.core.exceptions import StorageUnavailable
from journey.schemas.progress import ProgressPatch

USER = "user-1"


@pytest.fixture
def broken_db(db, monkeypatch):
    async def execute(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "execute", execute)
    return db


@pytest.mark.unit
class TestStorageFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "engine_index,method,args",
        [
            (0, "get_lesson", (USER, "foundation", 0)),
            (0, "completed_count", (USER, "foundation", 2)),
            (0, "course_progress", (USER, "foundation")),
            (1, "attempt_count", (USER, "foundation")),
            (1, "exam_status", (USER, "foundation")),
            (1, "attempt_history", (USER, "foundation")),
            (2, "get_certificate", (USER, "foundation")),
            (2, "eligibility", (USER, "foundation")),
            (2, "verify", (1,)),
        ],
    )
    async def test_reads_raise_storage_unavailable(self, broken_db, engines, engine_index, method, args):
        target = engines[engine_index]
        with pytest.raises(StorageUnavailable) as excinfo:
            await getattr(target, method)(*args)
        assert excinfo.value.retryable is True
        assert "disk" not in excinfo.value.message

    @pytest.mark.asyncio
    async def test_record_progress(self, broken_db, engines):
        tracker, _, _ = engines
        with pytest.raises(StorageUnavailable):
            await tracker.record_progress(USER, "foundation", 0, ProgressPatch(completed=True))

    @pytest.mark.asyncio
    async def test_submit_exam(self, broken_db, engines):
        _, exams, _ = engines
        with pytest.raises(StorageUnavailable):
            await exams.submit_exam(USER, "foundation", [0])

    @pytest.mark.asyncio
    async def test_claim(self, broken_db, engines):
        _, _, certs = engines
        with pytest.raises(StorageUnavailable):
            await certs.ensure_certificate(USER, "foundation")
