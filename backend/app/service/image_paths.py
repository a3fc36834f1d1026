import re
from typing import List, Optional

from app.schemas import CropMode, SizeSpec
from app.service.errors import MalformedSizeSpec

SIZE_DELIMITER = "__"

ASSET_ID_PATTERN = re.compile(
  r"[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[0-9a-f]{4}-[0-9a-f]{12}"
)
SIZE_TOKEN_PATTERN = re.compile(r"(?P<width>[0-9]+)(?P<mode>[zx])(?P<height>[0-9]+)")


def extract_asset_id(path: str) -> Optional[str]:
  """
  Return the first UUID (versions 1-5) found anywhere in the path.

  None means the path names no single asset and should be treated as a
  listing request.
  """

  match = ASSET_ID_PATTERN.search(path)
  if match:
    return match.group(0)

  return None


def parse_size_spec(
  path: str,
  default_width: int,
  default_height: int,
  max_dimension: Optional[int] = None,
) -> SizeSpec:
  """
  Read the target size and crop mode from a request path.

  The size token follows the first "__" and runs up to the next "/",
  e.g. "users/42/<id>__300x200". Without a token the defaults are used
  in fit mode. When exactly one dimension is zero the other is used for
  both; when both are zero the defaults apply with the requested mode.

  Raises:
    MalformedSizeSpec: If the token is not `<digits><z|x><digits>` or a
      dimension exceeds max_dimension.
  """

  segments = path.split(SIZE_DELIMITER)
  if len(segments) < 2:
    return SizeSpec(width=default_width, height=default_height, mode=CropMode.fit)

  token = segments[1].split("/", 1)[0]
  match = SIZE_TOKEN_PATTERN.fullmatch(token)
  if not match:
    raise MalformedSizeSpec(f"Malformed size segment: {token!r}")

  width = int(match.group("width"))
  height = int(match.group("height"))
  mode = CropMode(match.group("mode"))

  if width == 0 and height == 0:
    width, height = default_width, default_height

  elif width == 0:
    width = height

  elif height == 0:
    height = width

  if max_dimension is not None and max(width, height) > max_dimension:
    raise MalformedSizeSpec(
      f"Requested size {width}x{height} exceeds the maximum of {max_dimension}"
    )

  return SizeSpec(width=width, height=height, mode=mode)


def split_asset_path(path: str) -> List[str]:
  """Split a request path into its non-empty segments."""

  return [segment for segment in path.strip("/").split("/") if segment]
