"""
Settings for the Dynamic Recipes service.

Values come from the process environment (case-insensitive) or a ``.env``
file. ``MONGODB_URI_STRING`` and ``LOCAL_CORS_URLS`` are accepted as aliases
for ``MONGO_URI`` and ``CORS_ORIGINS``.
"""

from enum import Enum
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field, field_validator


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Service settings, validated once at import time."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Service
    app_name: str = Field(default="DynamicRecipes")
    app_version: str = Field(default="1.0.0")
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    debug: bool = False
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=42069, ge=1, le=65535, description="Listen port")

    # Document store
    mongo_uri: str = Field(
        default="mongodb://localhost:27017",
        validation_alias=AliasChoices("mongo_uri", "mongodb_uri_string"),
    )
    mongo_db_name: str = Field(default="Recipe_Service")
    ingredients_collection: str = Field(default="Ingredients")
    recipes_collection: str = Field(default="recipes")
    db_init_attempts: int = Field(
        default=8, ge=1, description="Connection attempts at startup"
    )
    db_init_delay_sec: float = Field(
        default=2.0, ge=0, description="Pause between connection attempts"
    )

    # Recipe aggregation
    aggregation_timeout_sec: Optional[float] = Field(
        default=10.0,
        gt=0,
        description="Deadline for building the expanded recipe listing; None disables it",
    )

    # Realtime chat
    relay_buffer_size: int = Field(
        default=64, ge=1, description="Commands the broadcast inbox holds before senders wait"
    )
    send_timeout_sec: Optional[float] = Field(
        default=5.0,
        gt=0,
        description="Deadline for one frame to one client; slower clients are dropped",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # HTTP surface
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        validation_alias=AliasChoices("cors_origins", "local_cors_urls"),
        description="Comma separated list of allowed origins",
    )
    cors_allow_credentials: bool = True
    api_prefix: str = Field(default="", description="Prefix for every route")
    api_title: str = Field(default="Dynamic Recipes API")
    api_description: str = Field(
        default="Recipe and ingredient catalog with a realtime chat channel"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def normalize_environment(cls, v):
        if isinstance(v, str):
            return Environment(v.strip().lower())
        return v

    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT


settings = Settings()
