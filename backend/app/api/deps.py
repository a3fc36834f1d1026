from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import async_session
from app.service import AssetStore, ImagePipeline, SqlAssetStore


async def get_db_async() -> AsyncGenerator[AsyncSession, None]:
  """Get an async database session, closed when the request ends."""

  async with async_session() as session:
    yield session


AsyncSessionDep = Annotated[AsyncSession, Depends(get_db_async)]


def get_asset_store(session: AsyncSessionDep) -> AssetStore:
  """Get the asset store for this request's session."""

  return SqlAssetStore(session=session)


AssetStoreDep = Annotated[AssetStore, Depends(get_asset_store)]


def get_image_pipeline(request: Request) -> ImagePipeline:
  """
  Get the image pipeline shared by all requests.

  Raises:
    RuntimeError: If the application lifespan has not created it
  """

  pipeline = getattr(request.app.state, "image_pipeline", None)
  if pipeline is None:
    raise RuntimeError("Image pipeline has not been initialized.")

  return pipeline


ImagePipelineDep = Annotated[ImagePipeline, Depends(get_image_pipeline)]
