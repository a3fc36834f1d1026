import uuid
from datetime import datetime
from typing import List

from sqlmodel import SQLModel


class AssetPublic(SQLModel):
  """
  Public schema for an asset.

  The encoded image is never part of the JSON form; fetch it through
  the asset URL instead.
  """

  id: uuid.UUID
  name: str
  path: List[str]
  content_type: str
  created_at: datetime
