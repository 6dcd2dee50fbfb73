"""Async database engine, session factory and dialect helpers."""

from datetime import datetime, timezone
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
import structlog

from journey.core.config import settings

logger = structlog.get_logger()


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_engine(url: str = None, **kwargs) -> AsyncEngine:
    """Create an async engine; pool sizing only applies to server databases."""
    url = url or settings.DATABASE_URL
    options = {"echo": settings.DATABASE_ECHO, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
        )
    options.update(kwargs)
    return create_async_engine(url, **options)


engine = build_engine()

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db(bind: AsyncEngine = None):
    """Create tables for every registered model."""
    # Register models on Base.metadata
    import journey.models  # noqa: F401

    bind = bind or engine
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized", dialect=bind.dialect.name)


async def ping(session: AsyncSession) -> None:
    await session.execute(text("SELECT 1"))


def dialect_insert(session: AsyncSession, model):
    """Return an INSERT construct supporting ON CONFLICT for the session's dialect."""
    name = session.get_bind().dialect.name
    if name == "postgresql":
        return postgresql.insert(model)
    if name == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"ON CONFLICT inserts are not supported on {name}")
