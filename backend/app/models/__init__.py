from .asset import JPEG_CONTENT_TYPE, Asset

__all__ = [
  "Asset",
  "JPEG_CONTENT_TYPE",
]
