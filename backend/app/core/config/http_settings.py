from app.core.config.base_config import BaseAppConfig


class HttpSettings(BaseAppConfig):
  HTTP_HOST: str = "0.0.0.0"
  HTTP_PORT: int = 8000
