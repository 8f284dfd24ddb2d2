"""
Configuration and settings for the Proco backend.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api")

    # HTTP server
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=5000, validation_alias="PORT")
    max_port_attempts: int = Field(
        default=10, validation_alias="PROCO_MAX_PORT_ATTEMPTS"
    )

    # Document store (MongoDB)
    mongodb_uri: str = Field(
        default="mongodb://localhost:27017/proco", validation_alias="MONGODB_URI"
    )
    mongodb_database: str = Field(default="proco", validation_alias="MONGODB_DATABASE")
    mongodb_timeout_ms: int = Field(default=5000, validation_alias="MONGODB_TIMEOUT_MS")

    # Cross-origin policy: a JSON list, a comma-separated list or one origin.
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=["*"], validation_alias="CORS_ORIGINS"
    )

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="PROCO_USE_IN_MEMORY_BACKENDS"
    )
    log_level: str = Field(default="INFO", validation_alias="PROCO_LOG_LEVEL")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        value = value.strip()
        if value.startswith("["):
            return json.loads(value)
        return [origin.strip() for origin in value.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
