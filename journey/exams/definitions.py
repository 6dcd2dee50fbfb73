"""Exam definitions: answer-key normalization, write-time validation, caching.

Question payloads have accumulated several ways of marking the correct
option over time::

    {"options": ["a", "b"], "correctIndex": 1}
    {"options": [{"text": "a"}, {"text": "b", "correct": true}]}
    {"options": ["a", "b"], "answer": "1"}

``normalize_correct_index`` maps all of them to a single integer index (or
``None`` when nothing usable is present). Definitions are normalized once
when loaded and the result is cached, so scoring never looks at raw JSON.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from aiocache import Cache
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from journey.core.config import settings
from journey.core.database import dialect_insert, utcnow
from journey.core.exceptions import InvalidExamDefinition, NotFound, StorageUnavailable
from journey.models.exam import ExamDefinitionRecord

logger = structlog.get_logger()

LANGUAGES = ("en", "ti")

INDEX_FIELDS = ("correctIndex", "correct_index", "answerIndex", "answer_index")
OPTION_FLAGS = ("correct", "isCorrect", "is_correct")
STRING_INDEX_FIELDS = INDEX_FIELDS + ("answer", "correct")


def _explicit_index(question: Dict[str, Any]) -> Optional[int]:
    for name in INDEX_FIELDS:
        value = question.get(name)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _flagged_option(question: Dict[str, Any]) -> Optional[int]:
    for i, option in enumerate(question.get("options") or []):
        if isinstance(option, dict) and any(option.get(flag) is True for flag in OPTION_FLAGS):
            return i
    return None


def _string_index(question: Dict[str, Any]) -> Optional[int]:
    for name in STRING_INDEX_FIELDS:
        value = question.get(name)
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
    return None


# Tried in order; first non-None wins
RESOLVERS: Tuple[Callable[[Dict[str, Any]], Optional[int]], ...] = (
    _explicit_index,
    _flagged_option,
    _string_index,
)


def option_text(option: Any) -> str:
    if isinstance(option, dict):
        return str(option.get("text", ""))
    return str(option)


def normalize_correct_index(question: Dict[str, Any]) -> Optional[int]:
    """Resolve the correct option of a raw question to an index within its options."""
    if not isinstance(question, dict):
        return None
    options = question.get("options") or []
    for resolver in RESOLVERS:
        index = resolver(question)
        if index is not None:
            return index if 0 <= index < len(options) else None
    return None


@dataclass(frozen=True)
class ExamQuestion:
    text: str
    options: Tuple[str, ...]
    correct_index: Optional[int]

    @property
    def resolvable(self) -> bool:
        return self.correct_index is not None

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "ExamQuestion":
        raw = raw if isinstance(raw, dict) else {}
        return cls(
            text=str(raw.get("text", "")),
            options=tuple(option_text(o) for o in raw.get("options") or []),
            correct_index=normalize_correct_index(raw),
        )


@dataclass(frozen=True)
class ExamDefinition:
    course_id: str
    lang: str
    pass_score: int
    questions: Tuple[ExamQuestion, ...]

    @property
    def resolvable_count(self) -> int:
        return sum(1 for q in self.questions if q.resolvable)

    def public_questions(self) -> List[Dict[str, Any]]:
        """Questions without their answer key."""
        return [{"text": q.text, "options": list(q.options)} for q in self.questions]


def validate_questions(questions: Any, lang: str) -> None:
    """Raise InvalidExamDefinition unless every question is scoreable."""
    if not isinstance(questions, list) or not questions:
        raise InvalidExamDefinition(f"{lang}: at least one question is required", lang=lang)

    for i, raw in enumerate(questions, start=1):
        if not isinstance(raw, dict) or not str(raw.get("text", "")).strip():
            raise InvalidExamDefinition(f"{lang} question {i}: text is required", lang=lang, question=i)
        options = raw.get("options") or []
        if len(options) < 2 or not all(option_text(o).strip() for o in options):
            raise InvalidExamDefinition(
                f"{lang} question {i}: at least two non-empty options are required",
                lang=lang,
                question=i,
            )
        if normalize_correct_index(raw) is None:
            raise InvalidExamDefinition(
                f"{lang} question {i}: correct answer missing or out of range",
                lang=lang,
                question=i,
            )


class ExamDefinitionStore:
    """Reads and writes `exam_definitions`, caching normalized definitions."""

    def __init__(self, db: AsyncSession, cache: Cache, ttl: int = None):
        self.db = db
        self.cache = cache
        self.ttl = settings.EXAM_DEFINITION_CACHE_TTL if ttl is None else ttl

    @staticmethod
    def cache_key(course_id: str, lang: str) -> str:
        return f"exam-def:{course_id}:{lang}"

    async def get(self, course_id: str, lang: str = "en") -> ExamDefinition:
        lang = lang if lang in LANGUAGES else "en"
        key = self.cache_key(course_id, lang)

        definition = await self.cache.get(key)
        if definition is not None:
            return definition

        try:
            result = await self.db.execute(
                select(ExamDefinitionRecord)
                .where(ExamDefinitionRecord.course_id == course_id)
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as e:
            logger.error("Failed to load exam definition", course_id=course_id, error=str(e))
            raise StorageUnavailable() from e
        record = result.scalar_one_or_none()

        if record is None:
            raise NotFound("Exam not found", courseId=course_id)

        raw = record.questions_ti if lang == "ti" else record.questions_en
        definition = ExamDefinition(
            course_id=course_id,
            lang=lang,
            pass_score=record.pass_score,
            questions=tuple(ExamQuestion.from_raw(q) for q in raw or []),
        )
        await self.cache.set(key, definition, ttl=self.ttl)
        return definition

    async def public_view(self, course_id: str, lang: str = "en") -> Dict[str, Any]:
        """What a learner sees before answering: no answer key."""
        definition = await self.get(course_id, lang)
        return {
            "lang": definition.lang,
            "pass_score": definition.pass_score,
            "exam": {"questions": definition.public_questions()},
        }

    async def save(
        self,
        course_id: str,
        pass_score: int,
        questions_en: List[Dict[str, Any]],
        questions_ti: List[Dict[str, Any]],
    ) -> None:
        """Validate and upsert a definition; invalid payloads are never stored."""
        if isinstance(pass_score, bool) or not isinstance(pass_score, int) or not 0 <= pass_score <= 100:
            raise InvalidExamDefinition("passScore must be an integer between 0 and 100", passScore=pass_score)
        validate_questions(questions_en, "en")
        validate_questions(questions_ti, "ti")

        stmt = dialect_insert(self.db, ExamDefinitionRecord).values(
            course_id=course_id,
            pass_score=pass_score,
            questions_en=questions_en,
            questions_ti=questions_ti,
            updated_at=utcnow(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["course_id"],
            set_={
                "pass_score": stmt.excluded.pass_score,
                "questions_en": stmt.excluded.questions_en,
                "questions_ti": stmt.excluded.questions_ti,
                "updated_at": stmt.excluded.updated_at,
            },
        )

        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to save exam definition", course_id=course_id, error=str(e))
            await self.db.rollback()
            raise StorageUnavailable() from e

        for lang in LANGUAGES:
            await self.cache.delete(self.cache_key(course_id, lang))
        logger.info("Exam definition saved", course_id=course_id, pass_score=pass_score)
