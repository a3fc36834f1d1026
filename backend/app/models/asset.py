import uuid
from datetime import datetime
from typing import List

from sqlalchemy import JSON, TIMESTAMP, Column, LargeBinary, Text
from sqlmodel import Field, SQLModel

from app.utils.utc_now import utc_now

JPEG_CONTENT_TYPE = "image/jpeg"


class Asset(SQLModel, table=True):
  """An uploaded original image, normalized to JPEG at the store size."""

  __tablename__ = "assets"  # type: ignore

  id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
  name: str = Field(sa_column=Column(Text, nullable=False))
  path: List[str] = Field(
    default_factory=list,
    sa_column=Column(JSON, nullable=False),
  )
  # Segments joined by "/", used for prefix listing
  path_key: str = Field(default="", index=True)
  content_type: str = Field(default=JPEG_CONTENT_TYPE)
  created_at: datetime = Field(
    default_factory=utc_now,
    sa_column=Column(TIMESTAMP(timezone=True), nullable=False),
  )
  binary: bytes = Field(sa_column=Column(LargeBinary, nullable=False))

  def __repr__(self):
    return f"<Asset(id={self.id}, name='{self.name}', path='{self.path_key}')>"
