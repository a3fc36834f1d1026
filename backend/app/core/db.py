from sqlalchemy.ext.asyncio import (
  AsyncEngine,
  async_sessionmaker,
  create_async_engine,
)
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.models import Asset  # noqa: F401


def _engine_options() -> dict:
  uri = settings.db.SQLALCHEMY_DATABASE_URI
  if uri.startswith("sqlite"):
    return {}

  return {
    "pool_size": settings.db.DB_NUM_CONNS,
    "pool_timeout": settings.db.DB_TIMEOUT,
    "connect_args": {"connect_timeout": settings.db.DB_TIMEOUT},
  }


async_engine = create_async_engine(
  settings.db.SQLALCHEMY_DATABASE_URI,
  echo=False,
  **_engine_options(),
)

async_session = async_sessionmaker(
  async_engine,
  class_=AsyncSession,
  expire_on_commit=False,
)


async def init_db(engine: AsyncEngine = async_engine) -> None:
  """Create the asset tables if they do not exist yet."""

  async with engine.begin() as conn:
    await conn.run_sync(SQLModel.metadata.create_all)
