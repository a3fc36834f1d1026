import logging
import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

import aiofiles
import aiofiles.os
from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.service.errors import CacheWriteError

logger = logging.getLogger(__name__)


class CacheStore(ABC):
  """
  Key-value store for rendered variants, keyed by request path.

  Entries never expire.
  """

  @abstractmethod
  async def get(self, key: str) -> Optional[bytes]:
    """Return the cached bytes, or None on any kind of miss."""

  @abstractmethod
  async def put(self, key: str, data: bytes) -> None:
    """
    Store bytes under key.

    Raises:
      CacheWriteError: If the entry could not be written
    """


class FileCacheStore(CacheStore):
  """Stores each variant as a file below `root`, mirroring the request path."""

  def __init__(self, root: Path | str):
    self.root = Path(root).resolve()

  def _path_for(self, key: str) -> Optional[Path]:
    path = (self.root / key.lstrip("/")).resolve()

    if path == self.root or not path.is_relative_to(self.root):
      return None

    return path

  async def get(self, key: str) -> Optional[bytes]:
    path = self._path_for(key)
    if path is None:
      return None

    try:
      async with aiofiles.open(path, "rb") as f:
        return await f.read()

    except OSError as e:
      logger.debug("Cache miss for %s: %s", key, e)
      return None

  async def put(self, key: str, data: bytes) -> None:
    path = self._path_for(key)
    if path is None:
      raise CacheWriteError(f"Cache key escapes the cache root: {key}")

    # Write to a sibling first so readers never see a partial file
    tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")

    try:
      await aiofiles.os.makedirs(path.parent, exist_ok=True)

      async with aiofiles.open(tmp_path, "wb") as f:
        await f.write(data)

      await aiofiles.os.replace(tmp_path, path)

    except OSError as e:
      if os.path.exists(tmp_path):
        os.remove(tmp_path)

      raise CacheWriteError(f"Failed to write cache entry {key}: {e}") from e


class RedisCacheStore(CacheStore):
  """Stores variants in redis under `prefix + key`."""

  def __init__(self, client: Redis, prefix: str = "variants:"):
    self.client = client
    self.prefix = prefix

  async def get(self, key: str) -> Optional[bytes]:
    try:
      return await self.client.get(self.prefix + key)

    except RedisError as e:
      logger.warning("Redis cache read failed for %s: %s", key, e)
      return None

  async def put(self, key: str, data: bytes) -> None:
    try:
      await self.client.set(self.prefix + key, data)

    except RedisError as e:
      raise CacheWriteError(f"Failed to write cache entry {key}: {e}") from e


class MemoryCacheStore(CacheStore):
  """In-process cache, useful for tests and single-worker deployments."""

  def __init__(self):
    self.entries: Dict[str, bytes] = {}

  async def get(self, key: str) -> Optional[bytes]:
    return self.entries.get(key)

  async def put(self, key: str, data: bytes) -> None:
    self.entries[key] = data
