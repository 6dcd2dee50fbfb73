"""Exam scoring, attempt limits and attempt history."""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from journey.core.exceptions import (
    AttemptLimitExceeded,
    ExamUnscoreable,
    StorageUnavailable,
    ValidationError,
)
from journey.exams.definitions import ExamDefinition, ExamDefinitionStore
from journey.models.exam import ExamAttempt

logger = structlog.get_logger()


@dataclass
class QuestionResult:
    index: int
    submitted_choice: int
    correct_choice: int
    is_correct: bool


@dataclass
class ExamScore:
    score: int
    passed: bool
    pass_score: int
    correct_count: int
    scored_count: int
    results: List[QuestionResult] = field(default_factory=list)


@dataclass
class ExamStatus:
    attempt_count: int
    max_attempts: Optional[int]
    latest_score: Optional[int] = None
    latest_passed: bool = False
    latest_at: Optional[datetime] = None

    @property
    def attempted(self) -> bool:
        return self.attempt_count > 0


def percent(correct: int, total: int) -> int:
    """100 * correct / total rounded half up, in integer arithmetic."""
    return (200 * correct + total) // (2 * total)


def score_answers(definition: ExamDefinition, answers: Sequence[int]) -> ExamScore:
    """Grade answers position by position.

    Only the first ``min(len(questions), len(answers))`` positions count.
    Questions without a resolvable answer key are left out of both the
    numerator and the denominator.

    Raises ExamUnscoreable when the definition itself has no resolvable
    question, and ValidationError when the answers reach none of them.
    """
    if definition.resolvable_count == 0:
        raise ExamUnscoreable(definition.course_id, definition.lang)

    results = []
    correct = 0
    for index, (question, choice) in enumerate(zip(definition.questions, answers)):
        if not question.resolvable:
            continue
        is_correct = choice == question.correct_index
        correct += is_correct
        results.append(QuestionResult(index, choice, question.correct_index, is_correct))

    if not results:
        raise ValidationError(
            "answers must cover at least one scored question",
            answered=len(answers),
            scoredQuestions=definition.resolvable_count,
        )

    score = percent(correct, len(results))
    return ExamScore(
        score=score,
        passed=score >= definition.pass_score,
        pass_score=definition.pass_score,
        correct_count=correct,
        scored_count=len(results),
        results=results,
    )


class ExamEngine:
    """Owns `exam_attempts`. One row is appended per graded submission."""

    def __init__(self, db: AsyncSession, definitions: ExamDefinitionStore, max_attempts: Optional[int] = 3):
        self.db = db
        self.definitions = definitions
        self.max_attempts = max_attempts

    async def _query(self, stmt):
        try:
            return await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Exam attempt query failed", error=str(e))
            raise StorageUnavailable() from e

    async def attempt_count(self, user_id: str, course_id: str) -> int:
        result = await self._query(
            select(func.count(ExamAttempt.id)).where(
                ExamAttempt.user_id == user_id,
                ExamAttempt.course_id == course_id,
            )
        )
        return result.scalar_one() or 0

    async def latest_attempt(self, user_id: str, course_id: str) -> Optional[ExamAttempt]:
        result = await self._query(
            select(ExamAttempt)
            .where(ExamAttempt.user_id == user_id, ExamAttempt.course_id == course_id)
            .order_by(ExamAttempt.created_at.desc(), ExamAttempt.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def submit_exam(
        self,
        user_id: str,
        course_id: str,
        answers: Sequence[int],
        lang: str = "en",
    ) -> ExamScore:
        """Score a submission and append it to the attempt history.

        The limit check and the insert are separate statements; two
        simultaneous submissions at the limit can both be recorded.
        """
        if not isinstance(answers, (list, tuple)) or any(
            isinstance(a, bool) or not isinstance(a, int) for a in answers
        ):
            raise ValidationError("answers must be a list of option indexes")

        count = await self.attempt_count(user_id, course_id)
        if self.max_attempts is not None and count >= self.max_attempts:
            logger.info(
                "Exam attempt rejected",
                user_id=user_id,
                course_id=course_id,
                attempt_count=count,
                max_attempts=self.max_attempts,
            )
            raise AttemptLimitExceeded(count, self.max_attempts)

        definition = await self.definitions.get(course_id, lang)
        try:
            graded = score_answers(definition, answers)
        except ExamUnscoreable:
            logger.error(
                "Exam definition has no scoreable questions",
                course_id=course_id,
                lang=definition.lang,
                questions=len(definition.questions),
                answers=len(answers),
            )
            raise

        self.db.add(
            ExamAttempt(
                user_id=user_id,
                course_id=course_id,
                score=graded.score,
                passed=graded.passed,
                results=[asdict(r) for r in graded.results],
            )
        )
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to record exam attempt", user_id=user_id, course_id=course_id, error=str(e))
            await self.db.rollback()
            raise StorageUnavailable() from e

        logger.info(
            "Exam attempt recorded",
            user_id=user_id,
            course_id=course_id,
            score=graded.score,
            passed=graded.passed,
            attempt=count + 1,
        )
        return graded

    async def exam_status(self, user_id: str, course_id: str) -> ExamStatus:
        """Attempt count and latest result; defaults when never attempted."""
        count = await self.attempt_count(user_id, course_id)
        status = ExamStatus(attempt_count=count, max_attempts=self.max_attempts)
        if count:
            latest = await self.latest_attempt(user_id, course_id)
            if latest is not None:
                status.latest_score = latest.score
                status.latest_passed = bool(latest.passed)
                status.latest_at = latest.created_at
        return status

    async def attempt_history(self, user_id: str, course_id: str) -> List[ExamAttempt]:
        result = await self._query(
            select(ExamAttempt)
            .where(ExamAttempt.user_id == user_id, ExamAttempt.course_id == course_id)
            .order_by(ExamAttempt.created_at.desc(), ExamAttempt.id.desc())
        )
        return list(result.scalars().all())


def results_payload(graded: ExamScore) -> Dict[str, Any]:
    return {
        "score": graded.score,
        "passed": graded.passed,
        "pass_score": graded.pass_score,
        "results": [asdict(r) for r in graded.results],
    }
