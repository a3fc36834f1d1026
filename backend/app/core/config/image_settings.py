from pathlib import Path
from typing import Literal, Optional, Self

from pydantic import Field, model_validator

from app.core.config.base_config import BaseAppConfig


class ImageSettings(BaseAppConfig):
  # Canonical size every upload is normalized to
  IMAGE_STORE_WIDTH: int = Field(default=1920, gt=0)
  IMAGE_STORE_HEIGHT: int = Field(default=1920, gt=0)

  # Size served when a GET carries no size segment
  IMAGE_DEFAULT_WIDTH: int = Field(default=640, gt=0)
  IMAGE_DEFAULT_HEIGHT: int = Field(default=640, gt=0)

  # JPEG quality for upload-time and serve-time encoding
  IMAGE_STORE_QUALITY: int = Field(default=90, ge=1, le=95)
  IMAGE_READ_QUALITY: int = Field(default=80, ge=1, le=95)

  IMAGE_MAX_DIMENSION: int = Field(default=4096, gt=0)
  IMAGE_MAX_UPLOAD_BYTES: int = 10 << 20

  # Number of transforms allowed to run at the same time
  IMAGE_PROCESS_PAR: int = Field(default=4, ge=1)

  IMAGE_CACHE_BACKEND: Literal["filesystem", "redis"] = "filesystem"
  IMAGE_CACHE_DIR: Path = Path("cache/images")
  REDIS_URL: Optional[str] = None

  @model_validator(mode="after")
  def _check_cache_backend(self) -> Self:
    if self.IMAGE_CACHE_BACKEND == "redis" and not self.REDIS_URL:
      raise ValueError("IMAGE_CACHE_BACKEND is 'redis' but REDIS_URL is not set.")

    return self
