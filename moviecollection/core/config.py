"""Application configuration loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from moviecollection.services.models import Role


class Settings(BaseSettings):
    database_url: str = Field(default="sqlite:///./moviecollection.db", alias="DATABASE_URL")
    sql_echo: bool = Field(default=False, alias="SQL_ECHO")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    default_role: Role = Field(default=Role.USER, alias="DEFAULT_ROLE")
    cast_delimiter: str = Field(default=",", alias="CAST_DELIMITER")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
