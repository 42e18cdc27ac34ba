from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from canteen.client.scheduler import RepeatingTask


def test_task_repeats_until_cancelled() -> None:
    async def scenario() -> int:
        runs = 0

        async def callback() -> None:
            nonlocal runs
            runs += 1

        task = RepeatingTask("counter", 0.01, callback)
        task.start()
        await asyncio.sleep(0.05)
        await task.cancel()
        seen = runs
        await asyncio.sleep(0.03)
        assert runs == seen
        assert not task.running
        return runs

    assert asyncio.run(scenario()) >= 2


def test_failing_run_does_not_stop_the_schedule() -> None:
    async def scenario() -> int:
        runs = 0

        async def callback() -> None:
            nonlocal runs
            runs += 1
            if runs == 1:
                raise RuntimeError("boom")

        task = RepeatingTask("flaky", 0.01, callback)
        task.start()
        await asyncio.sleep(0.05)
        await task.cancel()
        return runs

    assert asyncio.run(scenario()) >= 2


def test_stop_from_callback_ends_loop() -> None:
    async def scenario() -> int:
        runs = 0
        task: RepeatingTask

        async def callback() -> None:
            nonlocal runs
            runs += 1
            task.stop()

        task = RepeatingTask("once", 0.01, callback)
        task.start()
        await asyncio.sleep(0.05)
        assert not task.running
        return runs

    assert asyncio.run(scenario()) == 1


def test_start_twice_is_an_error() -> None:
    async def scenario() -> None:
        async def callback() -> None:
            return None

        task = RepeatingTask("dup", 1.0, callback)
        task.start()
        with pytest.raises(RuntimeError):
            task.start()
        await task.cancel()

    asyncio.run(scenario())


def test_interval_must_be_positive() -> None:
    async def callback() -> None:
        return None

    with pytest.raises(ValueError):
        RepeatingTask("bad", 0, callback)
