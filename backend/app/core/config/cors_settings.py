import warnings
from typing import Annotated, Any, List, Self

from pydantic import BeforeValidator, model_validator

from app.core.config.base_config import BaseAppConfig


def parse_origins(v: Any) -> list[str]:
  """Parse CORS origins from a comma-separated string or a list."""

  if isinstance(v, str) and not v.startswith("["):
    return [origin.strip().rstrip("/") for origin in v.split(",") if origin.strip()]

  if isinstance(v, list):
    return [str(origin).rstrip("/") for origin in v]

  raise ValueError(v)


class CorsSettings(BaseAppConfig):
  # Images are embedded by arbitrary pages, so any origin may read them
  CORS_ORIGINS: Annotated[List[str] | str, BeforeValidator(parse_origins)] = ["*"]

  CORS_ENABLED: bool = True

  CORS_ALLOW_CREDENTIALS: bool = False
  CORS_ALLOW_METHODS: List[str] = ["GET", "POST"]
  CORS_ALLOW_HEADERS: List[str] = ["*"]
  CORS_EXPOSE_HEADERS: List[str] = []
  CORS_MAX_AGE: int = 600

  @model_validator(mode="after")
  def _validate_credentials(self) -> Self:
    if self.CORS_ALLOW_CREDENTIALS and "*" in self.CORS_ORIGINS:
      raise ValueError("Wildcard CORS (*) cannot be combined with credentials.")

    if self.ENVIRONMENT == "production" and not self.CORS_ORIGINS:
      warnings.warn("No CORS origins configured for production.", stacklevel=1)

    return self
