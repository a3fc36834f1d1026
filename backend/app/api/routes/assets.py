import logging
from typing import List, Optional

from fastapi import (
  APIRouter,
  File,
  HTTPException,
  Request,
  Response,
  UploadFile,
  status,
)
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.api.deps import AssetStoreDep, ImagePipelineDep
from app.core.rate_limit import rate_limit_read, rate_limit_upload
from app.models import JPEG_CONTENT_TYPE
from app.schemas import AssetPublic
from app.service.errors import (
  ClientInputError,
  DecodeError,
  ImagePipelineError,
  MalformedSizeSpec,
  NotFound,
  StoreError,
)
from app.service.image_paths import extract_asset_id

logger = logging.getLogger(__name__)

ERROR_STATUS = {
  MalformedSizeSpec: status.HTTP_400_BAD_REQUEST,
  ClientInputError: status.HTTP_400_BAD_REQUEST,
  NotFound: status.HTTP_404_NOT_FOUND,
  DecodeError: status.HTTP_500_INTERNAL_SERVER_ERROR,
  StoreError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

router = APIRouter(tags=["assets"])


def to_http_exception(e: ImagePipelineError) -> HTTPException:
  status_code = ERROR_STATUS.get(type(e), status.HTTP_500_INTERNAL_SERVER_ERROR)

  if status_code >= 500:
    logger.error("%s: %s", type(e).__name__, e)

  return HTTPException(status_code=status_code, detail=str(e))


@router.get(
  "/{path:path}",
  responses={200: {"content": {JPEG_CONTENT_TYPE: {}}}},
)
@rate_limit_read
async def get_assets(
  request: Request,
  *,
  image_pipeline: ImagePipelineDep,
  asset_store: AssetStoreDep,
  path: str,
) -> Response:
  """
  Serve a resized variant when the path names an asset, e.g.
  `/users/42/<id>__300x200`, otherwise list the assets under the path.
  """

  asset_id = extract_asset_id(path)

  try:
    if asset_id is None:
      assets = await image_pipeline.list_assets(path, asset_store)
      content: List[AssetPublic] = [
        AssetPublic.model_validate(asset, from_attributes=True) for asset in assets
      ]

      return JSONResponse(content=jsonable_encoder(content))

    data = await image_pipeline.get_variant(path, asset_id, asset_store)

  except ImagePipelineError as e:
    raise to_http_exception(e) from e

  except Exception as e:
    logger.exception("Unexpected error while serving %s", path)

    raise HTTPException(
      status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
      detail="Internal server error",
    ) from e

  return Response(content=data, media_type=JPEG_CONTENT_TYPE)


@router.post("/{path:path}", response_model=AssetPublic)
@rate_limit_upload
async def upload_asset(
  request: Request,
  *,
  image_pipeline: ImagePipelineDep,
  asset_store: AssetStoreDep,
  path: str,
  file: Optional[UploadFile] = File(None),
) -> JSONResponse:
  """Store an uploaded image under the path, normalized to JPEG."""

  data: Optional[bytes] = None
  filename: Optional[str] = None

  if file is not None:
    # One byte past the limit is enough to reject oversized uploads
    data = await file.read(image_pipeline.image_settings.IMAGE_MAX_UPLOAD_BYTES + 1)
    filename = file.filename or ""

  try:
    asset = await image_pipeline.upload(path, filename, data, asset_store)

  except ImagePipelineError as e:
    raise to_http_exception(e) from e

  except Exception as e:
    logger.exception("Unexpected error while storing upload under %s", path)

    raise HTTPException(
      status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
      detail="Internal server error",
    ) from e

  asset_public = AssetPublic.model_validate(asset, from_attributes=True)

  return JSONResponse(content=jsonable_encoder(asset_public))
