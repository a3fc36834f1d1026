from typing import List, Optional
from uuid import UUID

from sqlmodel import col, or_, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.models import Asset


async def get_asset_by_id(
  session: AsyncSession,
  asset_id: UUID,
) -> Optional[Asset]:
  """Get an asset by its ID."""

  stmt = select(Asset).where(Asset.id == asset_id)

  result = await session.exec(stmt)
  return result.one_or_none()


async def get_assets_by_path_prefix(
  session: AsyncSession,
  path: List[str],
) -> List[Asset]:
  """
  Fetch every asset placed at or below the given path segments.

  An empty path matches all assets.
  """

  stmt = select(Asset)

  if path:
    path_key = "/".join(path)
    like_pattern = (
      path_key.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") + "/%"
    )
    stmt = stmt.where(
      or_(
        Asset.path_key == path_key,
        col(Asset.path_key).like(like_pattern, escape="\\"),
      )
    )

  stmt = stmt.order_by(col(Asset.created_at))

  result = await session.exec(stmt)
  return list(result.all())


async def create_asset(
  session: AsyncSession,
  asset: Asset,
) -> Asset:
  """Insert a new asset record into the database."""

  session.add(asset)
  await session.commit()
  await session.refresh(asset)

  return asset
