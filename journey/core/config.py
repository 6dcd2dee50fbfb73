"""Configuration management for the Journey progress service."""

from typing import List, Optional
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
import json


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Journey Progress Service"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development", pattern="^(development|staging|production|test)$")
    SERVICE_NAME: str = "journey-progress-service"
    SERVICE_PORT: int = 8004

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./journey.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 40
    DATABASE_ECHO: bool = False

    # JWT
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 60 * 24 * 7  # 7 days

    # Courses
    KNOWN_COURSES: List[str] = Field(default_factory=lambda: ["foundation", "growth", "excellence"])

    # Exams
    EXAM_MAX_ATTEMPTS: Optional[int] = Field(default=3, ge=1)
    DEFAULT_PASS_SCORE: int = Field(default=70, ge=0, le=100)
    EXAM_DEFINITION_CACHE_TTL: int = 300  # 5 minutes

    # Progress
    REFLECTION_MAX_LENGTH: int = 2000

    # Lesson catalog; local `lessons` table when unset
    LESSON_CATALOG_URL: Optional[str] = None
    LESSON_CATALOG_TIMEOUT: float = 10.0

    # Certificates
    PUBLIC_SITE_BASE_URL: Optional[str] = None

    # Logging
    LOG_LEVEL: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    LOG_FORMAT: str = Field(default="json", pattern="^(json|plain)$")

    # CORS
    CORS_ORIGINS: List[str] = Field(default_factory=list)

    @field_validator("CORS_ORIGINS", "KNOWN_COURSES", mode="before")
    def parse_string_list(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [item.strip() for item in v.split(",") if item.strip()]
        return v

    # Monitoring
    ENABLE_METRICS: bool = True

    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
