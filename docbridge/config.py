from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DocBridgeSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DOCBRIDGE_", env_file=".env", env_ignore_empty=True, extra="ignore"
    )

    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "docbridge"

    # Documents sampled per collection when no explicit column list is given.
    SCHEMA_SAMPLE_SIZE: int = Field(default=1000, ge=1)
    # Disable to force every query through the in-memory path.
    PUSHDOWN_ENABLED: bool = True

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


@lru_cache
def get_settings() -> DocBridgeSettings:
    return DocBridgeSettings()


settings = get_settings()
