"""Certificate eligibility and idempotent issuance."""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from journey.core.database import dialect_insert, utcnow
from journey.core.exceptions import NotEligible, NotFound, StorageUnavailable
from journey.exams.engine import ExamEngine
from journey.models.certificate import Certificate
from journey.progress.tracker import ProgressTracker

logger = structlog.get_logger()


@dataclass
class Eligibility:
    eligible: bool
    total_lessons: int
    completed_lessons: int
    exam_passed: bool
    exam_score: Optional[int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "eligible": self.eligible,
            "totalLessons": self.total_lessons,
            "completedLessons": self.completed_lessons,
            "examPassed": self.exam_passed,
            "examScore": self.exam_score,
        }


class CertificateEngine:
    """Owns `certificates`; reads progress and exam state, never writes them."""

    def __init__(self, db: AsyncSession, tracker: ProgressTracker, exams: ExamEngine):
        self.db = db
        self.tracker = tracker
        self.exams = exams

    async def _query(self, stmt):
        try:
            return await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Certificate query failed", error=str(e))
            raise StorageUnavailable() from e

    async def eligibility(self, user_id: str, course_id: str) -> Eligibility:
        """All lessons completed and the latest exam attempt passed.

        A course with no lessons is never eligible.
        """
        progress = await self.tracker.course_progress(user_id, course_id)
        status = await self.exams.exam_status(user_id, course_id)

        eligible = (
            progress.total_lessons > 0
            and progress.completed_lessons >= progress.total_lessons
            and status.latest_passed
        )
        return Eligibility(
            eligible=eligible,
            total_lessons=progress.total_lessons,
            completed_lessons=progress.completed_lessons,
            exam_passed=status.latest_passed,
            exam_score=status.latest_score,
        )

    async def get_certificate(self, user_id: str, course_id: str) -> Optional[Certificate]:
        result = await self._query(
            select(Certificate)
            .where(Certificate.user_id == user_id, Certificate.course_id == course_id)
            .order_by(Certificate.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def ensure_certificate(self, user_id: str, course_id: str) -> Certificate:
        """Return the certificate for (user, course), issuing it if eligible.

        An existing certificate is returned as-is, without re-checking
        eligibility. Creation is an insert that ignores a conflicting row, so
        concurrent claims converge on the same certificate.
        """
        existing = await self.get_certificate(user_id, course_id)
        if existing is not None:
            return existing

        snapshot = await self.eligibility(user_id, course_id)
        if not snapshot.eligible:
            logger.info("Certificate claim not eligible", user_id=user_id, course_id=course_id, **asdict(snapshot))
            raise NotEligible(snapshot.to_dict())

        stmt = (
            dialect_insert(self.db, Certificate)
            .values(user_id=user_id, course_id=course_id, issued_at=utcnow())
            .on_conflict_do_nothing(index_elements=["user_id", "course_id"])
        )
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to issue certificate", user_id=user_id, course_id=course_id, error=str(e))
            await self.db.rollback()
            raise StorageUnavailable() from e

        certificate = await self.get_certificate(user_id, course_id)
        if certificate is None:
            logger.error("Certificate missing after insert", user_id=user_id, course_id=course_id)
            raise StorageUnavailable()

        if result.rowcount:
            logger.info(
                "Certificate issued",
                user_id=user_id,
                course_id=course_id,
                certificate_id=certificate.id,
            )
        return certificate

    async def verify(self, certificate_id: int) -> Certificate:
        result = await self._query(select(Certificate).where(Certificate.id == certificate_id))
        certificate = result.scalar_one_or_none()
        if certificate is None:
            raise NotFound("Certificate not found", certificateId=certificate_id)
        return certificate
