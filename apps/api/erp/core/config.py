"""Application configuration."""

from typing import Any

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    # API Settings
    API_V1_STR: str = "/v1"
    PROJECT_NAME: str = "Dicel ERP"

    # CORS
    ALLOWED_HOSTS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Logging
    LOG_LEVEL: str = "INFO"

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "dicel_erp"
    POSTGRES_PORT: int = 5432
    DATABASE_URL: str | None = Field(default=None, validate_default=True)
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 5

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: str | None, info: ValidationInfo) -> Any:
        """Assemble database URL from components."""
        if isinstance(v, str):
            return v
        values = info.data
        return (
            f"postgresql+asyncpg://{values.get('POSTGRES_USER')}:{values.get('POSTGRES_PASSWORD')}"
            f"@{values.get('POSTGRES_SERVER')}:{values.get('POSTGRES_PORT')}"
            f"/{values.get('POSTGRES_DB') or ''}"
        )

    # Exports
    EXPORT_DEFAULT_THEME: str = "default"
    EXPORT_DEFAULT_PAGE_SIZE: str = "A4"
    EXPORT_CACHE_TTL_SECONDS: float = 300.0
    EXPORT_CACHE_MAX_SIZE: int = 256
    EXPORT_CHART_WIDTH: int = 800
    EXPORT_CHART_HEIGHT: int = 400


settings = Settings()
