import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConcurrencyLimiter:
  """
  Fixed-capacity admission gate for CPU-heavy work.

  Acquiring waits (without timeout) until one of `capacity` slots is
  free. The slot is released on every exit path.
  """

  def __init__(self, capacity: int):
    if capacity < 1:
      raise ValueError(f"Limiter capacity must be at least 1, got {capacity}")

    self.capacity = capacity
    self._semaphore = asyncio.Semaphore(capacity)
    self._in_flight = 0

  @property
  def in_flight(self) -> int:
    """Number of slots currently held."""

    return self._in_flight

  @asynccontextmanager
  async def slot(self) -> AsyncIterator[None]:
    async with self._semaphore:
      self._in_flight += 1
      try:
        yield
      finally:
        self._in_flight -= 1

  async def run(self, func: Callable[..., T], *args) -> T:
    """
    Run a blocking callable in a worker thread while holding a slot.

    Cancelling the caller does not cancel the work; the slot stays held
    until the callable returns.
    """

    return await asyncio.shield(self._run(func, *args))

  async def _run(self, func: Callable[..., T], *args) -> T:
    async with self.slot():
      logger.debug("Slot acquired (%d/%d in use)", self._in_flight, self.capacity)
      return await asyncio.to_thread(func, *args)
