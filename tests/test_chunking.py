from __future__ import annotations

import asyncio

import pytest

from bytespark.utils.chunking import ChunkedScheduler, ChunkMode, chunked


def test_chunked_preserves_order_and_sizes() -> None:
    assert chunked(list(range(7)), 3) == [[0, 1, 2], [3, 4, 5], [6]]
    assert chunked([], 3) == []


def test_chunked_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        chunked([1, 2], 0)
    with pytest.raises(ValueError):
        ChunkedScheduler(0)


@pytest.mark.asyncio
async def test_sequential_mode_hands_whole_chunks_and_sleeps_between() -> None:
    sleeps: list[float] = []
    received: list[list[int]] = []

    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    async def worker(chunk: list[int]) -> int:
        received.append(chunk)
        return sum(chunk)

    scheduler = ChunkedScheduler(2, mode=ChunkMode.SEQUENTIAL, delay=1.5, sleep=fake_sleep)
    outcomes = await scheduler.run([1, 2, 3, 4, 5], worker)

    assert received == [[1, 2], [3, 4], [5]]
    assert [outcome.value for outcome in outcomes] == [3, 7, 5]
    assert sleeps == [1.5, 1.5]


@pytest.mark.asyncio
async def test_sequential_failure_does_not_stop_later_chunks() -> None:
    async def worker(chunk: list[str]) -> str:
        if "boom" in chunk:
            raise RuntimeError("remote failure")
        return ",".join(chunk)

    scheduler = ChunkedScheduler(2, mode=ChunkMode.SEQUENTIAL)
    outcomes = await scheduler.run(["a", "b", "boom", "c", "d"], worker)

    assert [outcome.succeeded for outcome in outcomes] == [True, False, True]
    assert str(outcomes[1].error) == "remote failure"
    assert outcomes[2].value == "d"


@pytest.mark.asyncio
async def test_parallel_mode_runs_chunk_concurrently_in_submission_order() -> None:
    active = 0
    peak = 0
    started: list[int] = []

    async def worker(item: int) -> int:
        nonlocal active, peak
        started.append(item)
        active += 1
        peak = max(peak, active)
        # Later items finish first so ordering relies on the scheduler.
        await asyncio.sleep(0.001 * (10 - item))
        active -= 1
        if item == 3:
            raise ValueError("bad keyword")
        return item * 10

    scheduler = ChunkedScheduler(4, mode=ChunkMode.PARALLEL)
    outcomes = await scheduler.run(list(range(10)), worker)

    assert peak == 4
    assert [outcome.item for outcome in outcomes] == list(range(10))
    assert [outcome.chunk_index for outcome in outcomes] == [0] * 4 + [1] * 4 + [2] * 2
    assert outcomes[3].succeeded is False
    assert outcomes[9].value == 90
    assert sum(1 for outcome in outcomes if outcome.succeeded) == 9


@pytest.mark.parametrize("size", [1, 2, 3, 5, 7, 10])
def test_chunked_concatenates_back_to_the_input(size: int) -> None:
    keys = [f"key.{index}" for index in range(7)]

    batches = chunked(keys, size)

    assert [key for batch in batches for key in batch] == keys
    assert all(len(batch) == size for batch in batches[:-1])
    assert 1 <= len(batches[-1]) <= size
    if size >= len(keys):
        assert batches == [keys]
