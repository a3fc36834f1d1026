from typing import List, Optional

from pydantic import computed_field

from app.core.config.base_config import BaseAppConfig


class RateLimitSettings(BaseAppConfig):
  RATE_LIMIT_ENABLED: bool = True
  RATE_LIMIT_READ: str = "600/minute"
  RATE_LIMIT_UPLOAD: str = "30/minute"

  RATE_LIMIT_STORAGE_URL: Optional[str] = None
  RATE_LIMIT_HEADERS_ENABLED: bool = False
  RATE_LIMIT_EXEMPT_IPS: List[str] = []

  @computed_field
  @property
  def storage_uri(self) -> str:
    """
    Get the storage URI for rate limiting.
    Falls back to in-process memory if not explicitly set.
    """

    if self.RATE_LIMIT_STORAGE_URL:
      return self.RATE_LIMIT_STORAGE_URL

    return "memory://"
