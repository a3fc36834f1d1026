from app.core.config.base_config import BaseAppConfig
from app.core.config.cors_settings import CorsSettings
from app.core.config.db_settings import DatabaseSettings
from app.core.config.http_settings import HttpSettings
from app.core.config.image_settings import ImageSettings
from app.core.config.rate_limit_settings import RateLimitSettings


class Settings(BaseAppConfig):
  """
  Main entry point for application settings.
  Composes the other settings classes.
  """

  PROJECT_NAME: str = "Image Cache Service"

  # Composition of sub-settings
  cors: CorsSettings = CorsSettings()
  db: DatabaseSettings = DatabaseSettings()
  http: HttpSettings = HttpSettings()
  image: ImageSettings = ImageSettings()
  rate_limit: RateLimitSettings = RateLimitSettings()


# Instantiate
settings = Settings()
