import logging
import warnings
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from app.schemas import CropMode
from app.service.errors import DecodeError

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("JPEG", "PNG", "GIF")


def decode_image(data: bytes) -> Image.Image:
  """
  Decode JPEG, PNG or GIF bytes into an RGB image.

  Only the first frame of an animated GIF is used.

  Raises:
    DecodeError: If the bytes are corrupt or in any other format.
  """

  try:
    with warnings.catch_warnings():
      warnings.simplefilter("error", Image.DecompressionBombWarning)

      with Image.open(BytesIO(data), formats=SUPPORTED_FORMATS) as img:
        img.load()
        return img.convert("RGB")

  except (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    Image.DecompressionBombWarning,
    OSError,
    SyntaxError,
    ValueError,
  ) as e:
    raise DecodeError(f"Unable to decode image: {e}") from e


def resize_image(
  img: Image.Image,
  mode: CropMode,
  width: int,
  height: int,
) -> Image.Image:
  """
  Fit scales to the largest size that fits inside the box, keeping the
  aspect ratio. Fill scales and center-crops to exactly width x height.
  """

  if mode == CropMode.fill:
    return ImageOps.fit(
      img,
      (width, height),
      method=Image.Resampling.LANCZOS,
      centering=(0.5, 0.5),
    )

  ratio = min(width / img.width, height / img.height)
  # Very thin images would otherwise round a side down to zero
  size = (
    min(width, max(1, round(img.width * ratio))),
    min(height, max(1, round(img.height * ratio))),
  )

  return img.resize(size, Image.Resampling.LANCZOS)


def encode_jpeg(img: Image.Image, quality: int) -> bytes:
  buf = BytesIO()
  img.save(buf, format="JPEG", quality=quality)
  return buf.getvalue()


def transform(
  data: bytes,
  mode: CropMode,
  width: int,
  height: int,
  quality: int,
) -> bytes:
  """
  Decode, resize and re-encode an image as JPEG.

  This is CPU-bound and touches no shared state; callers run it in a
  worker thread behind a ConcurrencyLimiter.

  Args:
    data: Encoded JPEG, PNG or GIF bytes
    mode: Resize strategy
    width: Target box width
    height: Target box height
    quality: JPEG quality for the output

  Returns:
    The encoded JPEG bytes

  Raises:
    DecodeError: If the input cannot be decoded
  """

  img = decode_image(data)
  resized = resize_image(img, mode, width, height)

  logger.debug(
    "Resized %dx%d -> %dx%d (%s)",
    img.width,
    img.height,
    resized.width,
    resized.height,
    mode.name,
  )

  return encode_jpeg(resized, quality)
