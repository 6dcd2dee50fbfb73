"""Main FastAPI application for the Journey progress service."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import structlog
from prometheus_fastapi_instrumentator import Instrumentator

from journey.core.config import settings
from journey.core.logging import setup_logging
from journey.core.database import AsyncSessionLocal, init_db, ping
from journey.core.dependencies import close_http_client
from journey.core.exceptions import JourneyError, StorageUnavailable
from journey.routers import certificates, exams, progress

# Setup structured logging
setup_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle manager."""
    logger.info("Starting Journey progress service", version=settings.APP_VERSION)

    await init_db()

    logger.info("Progress service initialized successfully")

    yield

    await close_http_client()
    logger.info("Shutting down Journey progress service")


app = FastAPI(
    title="Journey Progress Service",
    description="Lesson progress, final exams and certificate eligibility",
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production() else None,
    redoc_url="/redoc" if not settings.is_production() else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.ENABLE_METRICS:
    Instrumentator().instrument(app).expose(app, endpoint="/metrics")

app.include_router(progress.router)
app.include_router(exams.router)
app.include_router(certificates.router)


@app.exception_handler(JourneyError)
async def journey_error_handler(request: Request, exc: JourneyError):
    if isinstance(exc, StorageUnavailable):
        logger.warning("Storage unavailable", path=request.url.path)
    elif exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.error, **exc.details)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error", path=request.url.path, error=str(exc))
    return await journey_error_handler(request, StorageUnavailable())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "invalid_input", "details": jsonable_encoder(exc.errors())},
    )


@app.get("/", tags=["root"])
async def root():
    """Root endpoint."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "status": "operational",
    }


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint."""
    health_status = {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "version": settings.APP_VERSION,
        "checks": {},
    }

    try:
        async with AsyncSessionLocal() as db:
            await ping(db)
        health_status["checks"]["database"] = "healthy"
    except SQLAlchemyError as e:
        logger.warning("Database health check failed", error=str(e))
        health_status["checks"]["database"] = "unhealthy"
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(content=health_status, status_code=status_code)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "journey.main:app",
        host="0.0.0.0",
        port=settings.SERVICE_PORT,
        reload=settings.ENVIRONMENT == "development",
        log_config=None,  # Use structlog instead
    )
