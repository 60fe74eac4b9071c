import asyncio
import threading

import pytest

from core.async_runner import AsyncRunner


@pytest.fixture
def runner():
    loop_runner = AsyncRunner("test-loop")
    assert loop_runner.start()
    yield loop_runner
    loop_runner.stop()


def test_submit_runs_in_background_thread(runner):
    async def where():
        await asyncio.sleep(0)
        return threading.current_thread().name

    assert runner.submit(where()).result(timeout=5) == "test-loop"


def test_submit_propagates_errors(runner):
    async def broken():
        raise KeyError("missing")

    with pytest.raises(KeyError):
        runner.submit(broken()).result(timeout=5)


def test_call_soon_runs_callback(runner):
    done = threading.Event()
    runner.call_soon(done.set)
    assert done.wait(5)


def test_stop_then_submit_raises():
    loop_runner = AsyncRunner()
    loop_runner.start()
    loop_runner.stop()

    async def noop():
        pass

    assert not loop_runner.is_running
    with pytest.raises(RuntimeError):
        loop_runner.submit(noop())
