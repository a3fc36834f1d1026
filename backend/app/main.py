import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.routing import APIRoute
from redis.asyncio import Redis, from_url
from redis.exceptions import RedisError
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.cors import CORSMiddleware

from app.api.main import api_router
from app.core.config import settings
from app.core.config.image_settings import ImageSettings
from app.core.db import async_engine
from app.core.rate_limit import limiter, rate_limit_exceeded_handler
from app.service import (
  CacheStore,
  ConcurrencyLimiter,
  FileCacheStore,
  ImagePipeline,
  RedisCacheStore,
)

load_dotenv()

logging.basicConfig(
  level=logging.INFO,
  format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def custom_generate_unique_id(route: APIRoute) -> str:
  """Generate unique IDs for OpenAPI operations."""

  return f"{route.tags[0]}-{route.name}"


def build_cache_store(
  image_settings: ImageSettings,
  redis_client: Redis | None = None,
) -> CacheStore:
  """Create the cache backend selected by IMAGE_CACHE_BACKEND."""

  if image_settings.IMAGE_CACHE_BACKEND == "redis":
    if redis_client is None:
      raise ValueError("A Redis client is required for the redis cache backend")

    return RedisCacheStore(redis_client)

  return FileCacheStore(image_settings.IMAGE_CACHE_DIR)


@asynccontextmanager
async def lifespan(app: FastAPI):
  """Create the shared image pipeline and release resources on shutdown."""

  image_settings = settings.image

  logger.info("=" * 80)
  logger.info("Starting %s", settings.PROJECT_NAME)
  logger.info("Environment: %s", settings.ENVIRONMENT)
  logger.info("=" * 80)

  redis_client: Redis | None = None

  try:
    if image_settings.IMAGE_CACHE_BACKEND == "redis":
      logger.info("Connecting to Redis at %s...", image_settings.REDIS_URL)
      redis_client = from_url(image_settings.REDIS_URL, decode_responses=False)
      await redis_client.ping()
      logger.info("✓ Redis connection established and verified")

    cache_store = build_cache_store(image_settings, redis_client)

    app.state.image_pipeline = ImagePipeline(
      cache=cache_store,
      limiter=ConcurrencyLimiter(image_settings.IMAGE_PROCESS_PAR),
      image_settings=image_settings,
    )

    logger.info("Image settings:")
    logger.info(
      "  Store size: %dx%d (quality %d)",
      image_settings.IMAGE_STORE_WIDTH,
      image_settings.IMAGE_STORE_HEIGHT,
      image_settings.IMAGE_STORE_QUALITY,
    )
    logger.info(
      "  Default size: %dx%d (quality %d)",
      image_settings.IMAGE_DEFAULT_WIDTH,
      image_settings.IMAGE_DEFAULT_HEIGHT,
      image_settings.IMAGE_READ_QUALITY,
    )
    logger.info("  Cache backend: %s", image_settings.IMAGE_CACHE_BACKEND)
    if image_settings.IMAGE_CACHE_BACKEND == "filesystem":
      logger.info("  Cache dir: %s", image_settings.IMAGE_CACHE_DIR)
    logger.info("  Parallel transforms: %d", image_settings.IMAGE_PROCESS_PAR)

    logger.info("=" * 80)
    logger.info("✓ Application startup complete - Ready to accept requests")
    logger.info("=" * 80)

  except (ValueError, RedisError) as e:
    logger.error("=" * 80)
    logger.error("✗ Application startup failed!")
    logger.error("Error: %s", str(e))
    logger.error("=" * 80)
    raise

  yield

  logger.info("=" * 80)
  logger.info("Shutting down %s", settings.PROJECT_NAME)
  logger.info("=" * 80)

  try:
    if redis_client:
      await redis_client.aclose()
      logger.info("✓ Redis connection closed successfully")

    await async_engine.dispose()

    logger.info("=" * 80)
    logger.info("✓ Application shutdown complete")
    logger.info("=" * 80)

  except RedisError as e:
    logger.error("Error during shutdown: %s", str(e))


# Initialize FastAPI application
app = FastAPI(
  title=settings.PROJECT_NAME,
  openapi_url="/openapi.json",
  generate_unique_id_function=custom_generate_unique_id,
  lifespan=lifespan,
  description=(f"{settings.PROJECT_NAME} API - Environment: {settings.ENVIRONMENT}"),
  version="1.0.0",
  docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
  redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
)

app.state.limiter = limiter

if settings.rate_limit.RATE_LIMIT_ENABLED:
  app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
  app.add_middleware(SlowAPIMiddleware)
  logger.info("✓ Rate limiting middleware enabled")

if settings.cors.CORS_ENABLED:
  app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.CORS_ORIGINS,
    allow_credentials=settings.cors.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.cors.CORS_ALLOW_METHODS,
    allow_headers=settings.cors.CORS_ALLOW_HEADERS,
    expose_headers=settings.cors.CORS_EXPOSE_HEADERS,
    max_age=settings.cors.CORS_MAX_AGE,
  )

app.include_router(api_router)
