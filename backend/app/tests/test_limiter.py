import asyncio
import threading
import time

import pytest

from app.service.limiter import ConcurrencyLimiter


def test_capacity_must_be_positive():
  with pytest.raises(ValueError):
    ConcurrencyLimiter(0)


@pytest.mark.asyncio
async def test_never_exceeds_capacity():
  limiter = ConcurrencyLimiter(2)
  lock = threading.Lock()
  state = {"active": 0, "peak": 0}

  def work(n: int) -> int:
    with lock:
      state["active"] += 1
      state["peak"] = max(state["peak"], state["active"])

    time.sleep(0.05)

    with lock:
      state["active"] -= 1

    return n * 2

  results = await asyncio.gather(*(limiter.run(work, n) for n in range(8)))

  assert results == [n * 2 for n in range(8)]
  assert state["peak"] <= 2
  assert limiter.in_flight == 0


@pytest.mark.asyncio
async def test_slot_released_when_work_fails():
  limiter = ConcurrencyLimiter(1)

  def boom():
    raise RuntimeError("boom")

  with pytest.raises(RuntimeError):
    await limiter.run(boom)

  assert limiter.in_flight == 0

  # The single slot is free again
  assert await asyncio.wait_for(limiter.run(lambda: "ok"), timeout=1) == "ok"


@pytest.mark.asyncio
async def test_waiters_block_until_slot_frees():
  limiter = ConcurrencyLimiter(1)
  release = asyncio.Event()
  order = []

  async def holder():
    async with limiter.slot():
      order.append("holder")
      await release.wait()

  async def waiter():
    async with limiter.slot():
      order.append("waiter")

  holder_task = asyncio.create_task(holder())
  await asyncio.sleep(0)
  waiter_task = asyncio.create_task(waiter())
  await asyncio.sleep(0.05)

  assert order == ["holder"]
  assert not waiter_task.done()

  release.set()
  await asyncio.gather(holder_task, waiter_task)

  assert order == ["holder", "waiter"]


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_cancel_work():
  limiter = ConcurrencyLimiter(1)
  finished = threading.Event()

  def slow():
    time.sleep(0.1)
    finished.set()

  task = asyncio.create_task(limiter.run(slow))
  await asyncio.sleep(0.02)
  task.cancel()

  with pytest.raises(asyncio.CancelledError):
    await task

  # The slot stays held until the work returns
  await asyncio.wait_for(limiter.run(lambda: None), timeout=1)

  assert finished.is_set()
