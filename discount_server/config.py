"""
Settings for the discount code server, read from the environment
(optionally a `.env` file) via pydantic-settings.

    DISCOUNT_STORAGE_PATH   (str, default "Storage/discount_codes.json")
    DISCOUNT_HOST           (str, default "127.0.0.1")
    DISCOUNT_PORT           (int, default 8000)
    DISCOUNT_LOG_LEVEL      (str, default "INFO")
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STORAGE_PATH = "Storage/discount_codes.json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DISCOUNT_", env_file=".env", case_sensitive=False, extra="ignore"
    )

    storage_path: str = DEFAULT_STORAGE_PATH
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = "INFO"

    @field_validator("storage_path", mode="before")
    @classmethod
    def _default_if_blank(cls, v):
        if v is None or not str(v).strip():
            return DEFAULT_STORAGE_PATH
        return v

    @field_validator("log_level")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
