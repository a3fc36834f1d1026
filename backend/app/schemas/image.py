from enum import Enum

from pydantic import BaseModel, ConfigDict, PositiveInt


class CropMode(str, Enum):
  """Resize strategy, keyed by the character used in request paths."""

  fit = "z"
  fill = "x"


class SizeSpec(BaseModel):
  """Target box and strategy for one rendered variant."""

  model_config = ConfigDict(frozen=True)

  width: PositiveInt
  height: PositiveInt
  mode: CropMode = CropMode.fit
