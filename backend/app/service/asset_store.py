from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from app.data import asset as asset_repo
from app.models import Asset
from app.service.errors import StoreError


class AssetStore(ABC):
  """Persistent storage of original uploads."""

  @abstractmethod
  async def find_by_id(self, asset_id: UUID) -> Optional[Asset]: ...

  @abstractmethod
  async def find_by_path_prefix(self, path: List[str]) -> List[Asset]: ...

  @abstractmethod
  async def save(self, asset: Asset) -> Asset: ...


class SqlAssetStore(AssetStore):
  """Asset store bound to one request-scoped database session."""

  def __init__(self, session: AsyncSession):
    self.session = session

  async def find_by_id(self, asset_id: UUID) -> Optional[Asset]:
    try:
      return await asset_repo.get_asset_by_id(
        session=self.session,
        asset_id=asset_id,
      )

    except SQLAlchemyError as e:
      raise StoreError(f"Failed to load asset {asset_id}: {e}") from e

  async def find_by_path_prefix(self, path: List[str]) -> List[Asset]:
    try:
      return await asset_repo.get_assets_by_path_prefix(
        session=self.session,
        path=path,
      )

    except SQLAlchemyError as e:
      raise StoreError(f"Failed to list assets under {path}: {e}") from e

  async def save(self, asset: Asset) -> Asset:
    try:
      return await asset_repo.create_asset(session=self.session, asset=asset)

    except SQLAlchemyError as e:
      await self.session.rollback()
      raise StoreError(f"Failed to save asset {asset.name}: {e}") from e
