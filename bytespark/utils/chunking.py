"""Chunked execution of remote work units.

Both AI pipelines push work through :class:`ChunkedScheduler`. Chunks always
run one after another; ``mode`` only decides what happens inside a chunk:

* ``SEQUENTIAL`` hands the whole chunk to the worker as a single unit, which
  is how translation batches reach the shared, rate limited model.
* ``PARALLEL`` hands every item to the worker and keeps all of them in flight
  together, which is how independent article keywords are generated.

A failing unit never aborts its siblings; it is recorded on its
:class:`ChunkOutcome` instead.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    """Split ``items`` into contiguous, order-preserving slices of ``size``."""
    if size < 1:
        raise ValueError("Chunk size must be at least 1.")
    return [list(items[index : index + size]) for index in range(0, len(items), size)]


class ChunkMode(str, Enum):
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


@dataclass(slots=True)
class ChunkOutcome(Generic[R]):
    """Settled result of one unit of work."""

    item: Any
    value: R | None = None
    error: Exception | None = None
    chunk_index: int = 0

    @property
    def succeeded(self) -> bool:
        return self.error is None


class ChunkedScheduler:
    """Run work in fixed-size chunks, one chunk at a time."""

    def __init__(
        self,
        size: int,
        *,
        mode: ChunkMode = ChunkMode.SEQUENTIAL,
        delay: float = 0.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if size < 1:
            raise ValueError("Chunk size must be at least 1.")
        self._size = size
        self._mode = mode
        self._delay = max(delay, 0.0)
        self._sleep = sleep

    @property
    def size(self) -> int:
        return self._size

    @property
    def mode(self) -> ChunkMode:
        return self._mode

    async def run(
        self,
        items: Sequence[Any],
        worker: Callable[[Any], Awaitable[R]],
    ) -> list[ChunkOutcome[R]]:
        """Execute ``worker`` over ``items`` and return outcomes in submission order.

        In ``SEQUENTIAL`` mode ``worker`` receives each chunk (a list); in
        ``PARALLEL`` mode it receives individual items.
        """
        chunks = chunked(items, self._size)
        outcomes: list[ChunkOutcome[R]] = []

        for index, chunk in enumerate(chunks):
            logger.info(
                "Processing chunk %d/%d (%d item(s), %s)",
                index + 1,
                len(chunks),
                len(chunk),
                self._mode.value,
            )
            if self._mode is ChunkMode.SEQUENTIAL:
                outcomes.append(await self._run_unit(chunk, worker, index))
            else:
                outcomes.extend(await self._run_parallel(chunk, worker, index))

            if self._delay and index < len(chunks) - 1:
                await self._sleep(self._delay)

        return outcomes

    async def _run_unit(
        self,
        unit: Any,
        worker: Callable[[Any], Awaitable[R]],
        chunk_index: int,
    ) -> ChunkOutcome[R]:
        try:
            value = await worker(unit)
        except Exception as exc:
            logger.warning("Chunk %d failed: %s", chunk_index + 1, exc, exc_info=exc)
            return ChunkOutcome(item=unit, error=exc, chunk_index=chunk_index)
        return ChunkOutcome(item=unit, value=value, chunk_index=chunk_index)

    async def _run_parallel(
        self,
        chunk: list[Any],
        worker: Callable[[Any], Awaitable[R]],
        chunk_index: int,
    ) -> list[ChunkOutcome[R]]:
        settled = await asyncio.gather(
            *(worker(item) for item in chunk),
            return_exceptions=True,
        )
        outcomes: list[ChunkOutcome[R]] = []
        for item, result in zip(chunk, settled):
            if isinstance(result, Exception):
                logger.warning("Work item %r failed: %s", item, result)
                outcomes.append(ChunkOutcome(item=item, error=result, chunk_index=chunk_index))
            elif isinstance(result, BaseException):
                raise result
            else:
                outcomes.append(ChunkOutcome(item=item, value=result, chunk_index=chunk_index))
        return outcomes
