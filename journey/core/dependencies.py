"""Shared dependencies: auth, course guard, HTTP client, cache and engines."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx
from aiocache import Cache
import structlog
from jose import jwt, JWTError
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from journey.catalog.lessons import DatabaseLessonCatalog, LessonCatalog, RemoteLessonCatalog
from journey.certificates.engine import CertificateEngine
from journey.core.config import settings
from journey.core.database import get_db
from journey.core.exceptions import NotFound, Unauthorized
from journey.exams.definitions import ExamDefinitionStore
from journey.exams.engine import ExamEngine
from journey.progress.tracker import ProgressTracker

logger = structlog.get_logger()

# Global instances
_definition_cache: Optional[Cache] = None
_http_client: Optional[httpx.AsyncClient] = None

# Security
security = HTTPBearer(auto_error=False)


def get_definition_cache() -> Cache:
    """Process-local cache for normalized exam definitions."""
    global _definition_cache

    if _definition_cache is None:
        _definition_cache = Cache(Cache.MEMORY)

    return _definition_cache


async def get_http_client() -> httpx.AsyncClient:
    """Get HTTP client for service communication."""
    global _http_client

    if _http_client is None:
        _http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.LESSON_CATALOG_TIMEOUT),
            headers={
                "Content-Type": "application/json",
                "User-Agent": f"{settings.SERVICE_NAME}/{settings.APP_VERSION}",
            },
        )

    return _http_client


async def close_http_client():
    global _http_client

    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.JWT_EXPIRATION_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """Get current user from JWT token."""
    if credentials is None:
        raise Unauthorized("Not logged in")

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        raise Unauthorized("Invalid authentication credentials")

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Invalid authentication credentials")
    return {"user_id": str(user_id), "role": payload.get("role", "student")}


def require_known_course(course_id: str) -> str:
    """Reject course ids outside the configured set."""
    if course_id not in settings.KNOWN_COURSES:
        raise NotFound("Unknown course", courseId=course_id)
    return course_id


async def known_course(course_id: str) -> str:
    """Path-parameter flavour of require_known_course."""
    return require_known_course(course_id)


async def get_lesson_catalog(db: AsyncSession = Depends(get_db)) -> LessonCatalog:
    if settings.LESSON_CATALOG_URL:
        return RemoteLessonCatalog(await get_http_client(), settings.LESSON_CATALOG_URL)
    return DatabaseLessonCatalog(db)


async def get_progress_tracker(
    db: AsyncSession = Depends(get_db),
    catalog: LessonCatalog = Depends(get_lesson_catalog),
) -> ProgressTracker:
    return ProgressTracker(db, catalog)


async def get_exam_definitions(
    db: AsyncSession = Depends(get_db),
    cache: Cache = Depends(get_definition_cache),
) -> ExamDefinitionStore:
    return ExamDefinitionStore(db, cache)


async def get_exam_engine(
    db: AsyncSession = Depends(get_db),
    definitions: ExamDefinitionStore = Depends(get_exam_definitions),
) -> ExamEngine:
    return ExamEngine(db, definitions, max_attempts=settings.EXAM_MAX_ATTEMPTS)


async def get_certificate_engine(
    db: AsyncSession = Depends(get_db),
    tracker: ProgressTracker = Depends(get_progress_tracker),
    exams: ExamEngine = Depends(get_exam_engine),
) -> CertificateEngine:
    return CertificateEngine(db, tracker, exams)
