import asyncio
import logging
import time
from typing import Callable, List, Optional
from urllib.parse import unquote_plus
from uuid import UUID

from app.core.config.image_settings import ImageSettings
from app.models import JPEG_CONTENT_TYPE, Asset
from app.schemas import CropMode, SizeSpec
from app.service.asset_store import AssetStore
from app.service.cache_store import CacheStore
from app.service.errors import CacheWriteError, ClientInputError, NotFound
from app.service.image_paths import parse_size_spec, split_asset_path
from app.service.limiter import ConcurrencyLimiter
from app.service.transform import transform

logger = logging.getLogger(__name__)

Transformer = Callable[[bytes, CropMode, int, int, int], bytes]


class ImagePipeline:
  """
  Serves resized variants through the cache and normalizes uploads.

  Every transform goes through the limiter, so at most
  `limiter.capacity` run at once across all requests sharing this
  pipeline.
  """

  def __init__(
    self,
    cache: CacheStore,
    limiter: ConcurrencyLimiter,
    image_settings: ImageSettings,
    transformer: Transformer = transform,
  ):
    self.cache = cache
    self.limiter = limiter
    self.image_settings = image_settings
    self.transformer = transformer

  @staticmethod
  def cache_key(path: str) -> str:
    return path.lstrip("/")

  def size_spec_for(self, path: str) -> SizeSpec:
    return parse_size_spec(
      path,
      default_width=self.image_settings.IMAGE_DEFAULT_WIDTH,
      default_height=self.image_settings.IMAGE_DEFAULT_HEIGHT,
      max_dimension=self.image_settings.IMAGE_MAX_DIMENSION,
    )

  async def get_variant(
    self,
    path: str,
    asset_id: str,
    assets: AssetStore,
  ) -> bytes:
    """
    Return the JPEG variant addressed by path, rendering it on a miss.

    A rendered variant is written to the cache from the same buffer
    that is returned. Cache write failures are logged and ignored.

    Raises:
      MalformedSizeSpec: If the size segment is invalid
      NotFound: If no asset has the given id
      DecodeError: If the stored binary cannot be decoded
      StoreError: If the asset store fails
    """

    key = self.cache_key(path)

    cached = await self.cache.get(key)
    if cached is not None:
      logger.debug("Cache hit: %s", key)
      return cached

    logger.debug("Cache miss: %s", key)
    size = self.size_spec_for(path)

    asset = await assets.find_by_id(UUID(asset_id))
    if asset is None:
      raise NotFound(f"Asset {asset_id} not found")

    # Finish rendering and caching even if the client goes away
    return await asyncio.shield(self._render_and_cache(key, asset.binary, size))

  async def _render_and_cache(self, key: str, binary: bytes, size: SizeSpec) -> bytes:
    started = time.perf_counter()
    data = await self.limiter.run(
      self.transformer,
      binary,
      size.mode,
      size.width,
      size.height,
      self.image_settings.IMAGE_READ_QUALITY,
    )
    logger.debug(
      "Rendered %s (%dx%d %s) in %.3fs",
      key,
      size.width,
      size.height,
      size.mode.name,
      time.perf_counter() - started,
    )

    try:
      await self.cache.put(key, data)

    except CacheWriteError as e:
      logger.warning("Could not cache %s: %s", key, e)

    return data

  async def list_assets(self, path: str, assets: AssetStore) -> List[Asset]:
    """List the assets placed at or below path."""

    return await assets.find_by_path_prefix(split_asset_path(path))

  async def upload(
    self,
    path: str,
    filename: Optional[str],
    data: Optional[bytes],
    assets: AssetStore,
  ) -> Asset:
    """
    Normalize an uploaded image to the store size as JPEG and save it.

    Raises:
      ClientInputError: If path is empty, the file is missing or too large
      DecodeError: If the upload is not a supported image
      StoreError: If saving fails
    """

    segments = split_asset_path(path)
    if not segments:
      raise ClientInputError("please specify the path")

    if data is None or filename is None:
      raise ClientInputError("missing file field")

    if len(data) > self.image_settings.IMAGE_MAX_UPLOAD_BYTES:
      raise ClientInputError(
        f"file exceeds {self.image_settings.IMAGE_MAX_UPLOAD_BYTES} bytes"
      )

    name = unquote_plus(filename)
    logger.info("Received upload: %s", name)

    binary = await self.limiter.run(
      self.transformer,
      data,
      CropMode.fit,
      self.image_settings.IMAGE_STORE_WIDTH,
      self.image_settings.IMAGE_STORE_HEIGHT,
      self.image_settings.IMAGE_STORE_QUALITY,
    )
    logger.info("Resized: %s", name)

    asset = Asset(
      name=name,
      path=segments,
      path_key="/".join(segments),
      content_type=JPEG_CONTENT_TYPE,
      binary=binary,
    )

    saved = await assets.save(asset)
    logger.info("Saved: %s (%s)", name, saved.id)

    return saved
