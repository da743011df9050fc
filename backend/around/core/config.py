"""
Configuration management using Pydantic Settings.
All environment variables are loaded and validated here.
"""

from typing import List, Literal, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # ================================
    # Application Configuration
    # ================================
    APP_NAME: str = "Around"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = True

    # Routes are served at the root by default (/post, /search, ...)
    API_PREFIX: str = ""
    ALLOWED_ORIGINS: str = "*"

    @field_validator("ALLOWED_ORIGINS")
    @classmethod
    def parse_origins(cls, v: str) -> List[str]:
        """Parse comma-separated origins into list."""
        return [origin.strip() for origin in v.split(",")]

    # ================================
    # JWT Configuration
    # ================================
    # Read once at startup; the settings object is frozen.
    JWT_SECRET_KEY: str = Field(..., min_length=32)
    JWT_ALGORITHM: str = "HS256"
    JWT_TOKEN_EXPIRE_HOURS: int = 24

    # ================================
    # Record Store (OpenSearch / Elasticsearch)
    # ================================
    OPENSEARCH_URL: str = "http://localhost:9200"
    OPENSEARCH_USERNAME: Optional[str] = None
    OPENSEARCH_PASSWORD: Optional[str] = None
    OPENSEARCH_VERIFY_SSL: bool = False
    POST_INDEX: str = "post"
    USER_INDEX: str = "user"
    RECORD_STORE_TIMEOUT_SECONDS: float = 10.0
    # "true", "false" or "wait_for"; controls when a put becomes searchable
    RECORD_STORE_REFRESH: Literal["true", "false", "wait_for"] = "wait_for"

    # ================================
    # Blob Store (MinIO / S3)
    # ================================
    MINIO_ENDPOINT: str = "localhost:9000"
    MINIO_ACCESS_KEY: str = "minioadmin"
    MINIO_SECRET_KEY: str = "minioadmin"
    MINIO_SECURE: bool = False
    MEDIA_BUCKET: str = "around-media"
    # Base URL used to build public locators; defaults to the endpoint
    MEDIA_PUBLIC_BASE_URL: Optional[str] = None
    BLOB_STORE_TIMEOUT_SECONDS: float = 30.0

    # ================================
    # Quality Scoring (Cloud Vision face detection)
    # ================================
    VISION_API_KEY: Optional[str] = None
    SCORING_TIMEOUT_SECONDS: float = 15.0

    # ================================
    # Search Configuration
    # ================================
    SEARCH_DEFAULT_RANGE_KM: float = 200
    SEARCH_THRESHOLD: float = 0.9
    # Unset: the store's default hit cap applies
    SEARCH_RESULT_SIZE: Optional[int] = None

    # ================================
    # Logging Configuration
    # ================================
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"

    @property
    def default_search_range(self) -> str:
        """Default radius in the store's distance syntax."""
        return f"{self.SEARCH_DEFAULT_RANGE_KM:g}km"

    @property
    def media_public_base_url(self) -> str:
        """Base URL for public media locators."""
        if self.MEDIA_PUBLIC_BASE_URL:
            return self.MEDIA_PUBLIC_BASE_URL.rstrip("/")
        scheme = "https" if self.MINIO_SECURE else "http"
        return f"{scheme}://{self.MINIO_ENDPOINT}"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.APP_ENV == "production"


# Global settings instance
settings = Settings()
