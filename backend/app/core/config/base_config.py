from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppConfig(BaseSettings):
  """Base config that every settings group inherits to share .env loading."""

  model_config = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    env_ignore_empty=True,
    extra="ignore",
  )

  # Needed by several groups for production-only validation
  ENVIRONMENT: Literal["local", "staging", "production"] = "local"
