from .asset_store import AssetStore, SqlAssetStore
from .cache_store import CacheStore, FileCacheStore, MemoryCacheStore, RedisCacheStore
from .image_pipeline import ImagePipeline
from .limiter import ConcurrencyLimiter

__all__ = [
  "AssetStore",
  "CacheStore",
  "ConcurrencyLimiter",
  "FileCacheStore",
  "ImagePipeline",
  "MemoryCacheStore",
  "RedisCacheStore",
  "SqlAssetStore",
]
