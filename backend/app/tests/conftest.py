import os
import threading
import time
from io import BytesIO
from typing import AsyncGenerator, Dict, List, Optional
from uuid import UUID

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from app.api.deps import get_db_async
from app.core.config.image_settings import ImageSettings
from app.core.db import init_db
from app.main import app
from app.models import Asset
from app.schemas import CropMode
from app.service import (
  AssetStore,
  ConcurrencyLimiter,
  FileCacheStore,
  ImagePipeline,
)
from app.service.transform import transform


def make_image(
  width: int = 800,
  height: int = 400,
  fmt: str = "PNG",
  color=(200, 30, 30),
) -> bytes:
  """Encode a solid-color test image."""

  img = Image.new("RGB", (width, height), color)
  if fmt == "GIF":
    img = img.convert("P")

  buf = BytesIO()
  img.save(buf, format=fmt)
  return buf.getvalue()


def image_size(data: bytes) -> tuple[int, int]:
  with Image.open(BytesIO(data)) as img:
    return img.size


class CountingTransformer:
  """Wraps the real transform, recording calls and peak parallelism."""

  def __init__(self, delay: float = 0.0):
    self.delay = delay
    self.calls = 0
    self.active = 0
    self.peak = 0
    self._lock = threading.Lock()

  def __call__(
    self,
    data: bytes,
    mode: CropMode,
    width: int,
    height: int,
    quality: int,
  ) -> bytes:
    with self._lock:
      self.calls += 1
      self.active += 1
      self.peak = max(self.peak, self.active)

    try:
      if self.delay:
        time.sleep(self.delay)

      return transform(data, mode, width, height, quality)

    finally:
      with self._lock:
        self.active -= 1


class FakeAssetStore(AssetStore):
  """In-memory asset store that records saves."""

  def __init__(self, assets: Optional[List[Asset]] = None):
    self.assets: Dict[UUID, Asset] = {asset.id: asset for asset in assets or []}
    self.saved: List[Asset] = []

  async def find_by_id(self, asset_id: UUID) -> Optional[Asset]:
    return self.assets.get(asset_id)

  async def find_by_path_prefix(self, path: List[str]) -> List[Asset]:
    return [
      asset for asset in self.assets.values() if asset.path[: len(path)] == path
    ]

  async def save(self, asset: Asset) -> Asset:
    self.saved.append(asset)
    self.assets[asset.id] = asset
    return asset


@pytest.fixture
def image_settings() -> ImageSettings:
  return ImageSettings(
    IMAGE_STORE_WIDTH=400,
    IMAGE_STORE_HEIGHT=400,
    IMAGE_DEFAULT_WIDTH=120,
    IMAGE_DEFAULT_HEIGHT=90,
    IMAGE_STORE_QUALITY=90,
    IMAGE_READ_QUALITY=80,
    IMAGE_MAX_DIMENSION=2000,
    IMAGE_PROCESS_PAR=2,
  )


@pytest.fixture
def transformer() -> CountingTransformer:
  return CountingTransformer()


@pytest.fixture
def cache_store(tmp_path) -> FileCacheStore:
  return FileCacheStore(tmp_path / "cache")


@pytest.fixture
def pipeline(
  cache_store: FileCacheStore,
  image_settings: ImageSettings,
  transformer: CountingTransformer,
) -> ImagePipeline:
  return ImagePipeline(
    cache=cache_store,
    limiter=ConcurrencyLimiter(image_settings.IMAGE_PROCESS_PAR),
    image_settings=image_settings,
    transformer=transformer,
  )


@pytest.fixture
def stored_asset() -> Asset:
  binary = transform(make_image(800, 400, "PNG"), CropMode.fit, 400, 400, 90)

  return Asset(
    name="photo.jpg",
    path=["users", "42"],
    path_key="users/42",
    binary=binary,
  )


@pytest.fixture
def asset_store(stored_asset: Asset) -> FakeAssetStore:
  return FakeAssetStore([stored_asset])


@pytest.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
  engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'assets.db'}")
  await init_db(engine)

  yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

  await engine.dispose()


@pytest.fixture
async def client(
  session_factory: async_sessionmaker,
  pipeline: ImagePipeline,
) -> AsyncGenerator[AsyncClient, None]:
  async def override_get_db_async() -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
      yield session

  app.dependency_overrides[get_db_async] = override_get_db_async
  app.state.image_pipeline = pipeline

  async with AsyncClient(
    transport=ASGITransport(app=app),
    base_url="http://test",
  ) as ac:
    yield ac

  app.dependency_overrides.clear()
  del app.state.image_pipeline
