"""
Pytest configuration and shared fixtures.
Every test gets its own in-memory SQLite database and exam-definition cache.
"""
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from aiocache import Cache
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from journey.catalog.lessons import DatabaseLessonCatalog  # noqa: E402
from journey.certificates.engine import CertificateEngine  # noqa: E402
from journey.core.database import init_db  # noqa: E402
from journey.exams.definitions import ExamDefinitionStore  # noqa: E402
from journey.exams.engine import ExamEngine  # noqa: E402
from journey.models.progress import Lesson  # noqa: E402
from journey.progress.tracker import ProgressTracker  # noqa: E402


# correct answers: [0, 1, 1, 2, 0]
FOUNDATION_QUESTIONS = [
    {"text": "What is a goal?", "options": ["A target", "A habit", "A mood"], "correctIndex": 0},
    {"text": "Best time to plan?", "options": ["Never", "Daily", "Yearly"], "correctIndex": 1},
    {"text": "Saving means?", "options": [{"text": "Spending"}, {"text": "Keeping", "correct": True}]},
    {"text": "Pick the habit", "options": ["Sleep late", "Skip", "Read daily"], "answer": "2"},
    {"text": "Discipline is?", "options": ["Consistency", "Luck"], "correct_index": 0},
]
FOUNDATION_CORRECT = [0, 1, 1, 2, 0]

LESSON_COUNTS = {"foundation": 2, "growth": 3}


def make_engines(db: AsyncSession, cache: Cache = None, max_attempts=3):
    """Wire the three engines the way the request dependencies do."""
    tracker = ProgressTracker(db, DatabaseLessonCatalog(db))
    definitions = ExamDefinitionStore(db, cache or Cache(Cache.MEMORY))
    exams = ExamEngine(db, definitions, max_attempts=max_attempts)
    return tracker, exams, CertificateEngine(db, tracker, exams)


async def seed(db: AsyncSession):
    for course_id, count in LESSON_COUNTS.items():
        for i in range(count):
            db.add(Lesson(course_id=course_id, lesson_index=i, title=f"{course_id} lesson {i + 1}"))
    await db.commit()

    store = ExamDefinitionStore(db, Cache(Cache.MEMORY))
    await store.save("foundation", 70, FOUNDATION_QUESTIONS, FOUNDATION_QUESTIONS)


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        await seed(session)
        yield session


@pytest.fixture
def definition_cache():
    return Cache(Cache.MEMORY)


@pytest.fixture
def engines(db, definition_cache):
    return make_engines(db, definition_cache)
