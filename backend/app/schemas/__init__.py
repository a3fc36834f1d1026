from .asset import AssetPublic
from .image import CropMode, SizeSpec

__all__ = [
  "AssetPublic",
  "CropMode",
  "SizeSpec",
]
