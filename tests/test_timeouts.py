import asyncio

import pytest

from catnip.fail import Timeout
from catnip.timeouts import with_timeout


@pytest.mark.asyncio
async def test_returns_result_when_future_finishes_first():
    async def work():
        return "done"

    assert await with_timeout(work(), asyncio.sleep(1)) == "done"


@pytest.mark.asyncio
async def test_raises_timeout_when_timer_finishes_first():
    async def slow():
        await asyncio.sleep(10)
        return "late"

    with pytest.raises(Timeout):
        await with_timeout(slow(), asyncio.sleep(0))


@pytest.mark.asyncio
async def test_owned_coroutine_is_cancelled_on_timeout():
    cancelled = []

    async def slow():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise

    with pytest.raises(Timeout):
        await with_timeout(slow(), asyncio.sleep(0))
    assert cancelled == [True]


@pytest.mark.asyncio
async def test_shared_future_survives_timeout_and_can_be_retried():
    pending = asyncio.get_running_loop().create_future()
    with pytest.raises(Timeout):
        await with_timeout(pending, asyncio.sleep(0))
    assert not pending.cancelled()
    pending.set_result("answer")
    assert await with_timeout(pending, asyncio.sleep(1)) == "answer"


@pytest.mark.asyncio
async def test_errors_from_future_propagate():
    async def broken():
        raise KeyError("missing")

    with pytest.raises(KeyError):
        await with_timeout(broken(), asyncio.sleep(1))