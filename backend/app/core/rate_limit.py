import logging

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

logger = logging.getLogger(__name__)


def get_rate_limit_key(request: Request) -> str:
  """
  Key requests by client IP address.

  Exempt addresses get their own bucket so they never share a counter
  with regular clients.
  """

  ip_address = get_remote_address(request)
  if ip_address in settings.rate_limit.RATE_LIMIT_EXEMPT_IPS:
    logger.debug("IP %s is exempt from rate limiting", ip_address)
    return f"exempt:{ip_address}"

  return ip_address


def rate_limit_exceeded_handler(request: Request, exc: Exception) -> Response:
  """
  Custom handler for rate limit exceeded errors.

  Args:
    request: The request that exceeded the rate limit
    exc: The rate limit exception

  Returns:
    JSON response with rate limit error details
  """

  logger.warning(
    "Rate limit exceeded for %s on %s %s",
    get_rate_limit_key(request),
    request.method,
    request.url.path,
  )

  return JSONResponse(
    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
    content={
      "error": "rate_limit_exceeded",
      "message": "Too many requests. Please slow down and try again later.",
      "detail": str(exc),
    },
    headers={
      "Retry-After": "60",
    },
  )


limiter = Limiter(
  key_func=get_rate_limit_key,
  storage_uri=settings.rate_limit.storage_uri,
  headers_enabled=settings.rate_limit.RATE_LIMIT_HEADERS_ENABLED,
  enabled=settings.rate_limit.RATE_LIMIT_ENABLED,
  swallow_errors=False,
)

rate_limit_read = limiter.limit(settings.rate_limit.RATE_LIMIT_READ)
rate_limit_upload = limiter.limit(settings.rate_limit.RATE_LIMIT_UPLOAD)
