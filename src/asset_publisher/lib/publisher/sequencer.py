"""Ordered, phase-by-phase publish job.

Runs each phase in its own worker task.  A worker pulls records lazily
from its phase, keeps up to ``max_concurrency`` publishes in flight, and
pushes outcomes onto a shared channel.  The worker for phase ``i + 1`` is
only spawned after phase ``i`` has drained and every in-flight publish has
finished, so no entry point is uploaded before the hashed assets it
references.
"""

import asyncio
import dataclasses
from collections.abc import AsyncIterator, Callable, Iterable, Sequence

from loguru import logger

from asset_publisher.lib.publisher.publisher import Publisher
from asset_publisher.lib.publisher.types import FileRecord, JobState, PublishOutcome

DEFAULT_MAX_CONCURRENCY = 8

_END = object()


class PhaseSequencer:
    """Drives a Publisher over ordered phases.

    Args:
        max_concurrency: Maximum publishes in flight within one phase.
        on_phase_complete: Called with the 1-based phase number after each
            phase has drained.
    """

    def __init__(
        self,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        on_phase_complete: Callable[[int], None] | None = None,
    ) -> None:
        if max_concurrency < 1:
            msg = "max_concurrency must be at least 1"
            raise ValueError(msg)
        self._max_concurrency = max_concurrency
        self._on_phase_complete = on_phase_complete
        self._state = JobState.IDLE
        self._active_phase: int | None = None

    @property
    def state(self) -> JobState:
        return self._state

    @property
    def active_phase(self) -> int | None:
        """1-based number of the running phase, or None when not running."""
        return self._active_phase

    async def run_job(
        self,
        phases: Sequence[Iterable[FileRecord]],
        publisher: Publisher,
    ) -> AsyncIterator[PublishOutcome]:
        """Publish ``phases`` in order and yield outcomes as they complete.

        Within a phase, outcomes arrive in completion order. Every outcome of
        phase ``i`` is yielded before any outcome of phase ``i + 1``.

        Args:
            phases: Record streams, in publish order.
            publisher: Publisher used for every record.

        Yields:
            One PublishOutcome per record.

        Raises:
            Exception: Whatever halted the job (e.g. FatalTransportError);
                later phases are not started.
        """
        if self._state is not JobState.IDLE:
            msg = f"Sequencer already used (state={self._state})"
            raise RuntimeError(msg)

        channel: asyncio.Queue[object] = asyncio.Queue()
        driver = asyncio.create_task(self._drive(phases, publisher, channel))
        try:
            while True:
                item = await channel.get()
                if item is _END:
                    break
                yield item  # type: ignore[misc]
            await driver
        finally:
            if not driver.done():
                driver.cancel()
                await asyncio.gather(driver, return_exceptions=True)

    async def _drive(
        self,
        phases: Sequence[Iterable[FileRecord]],
        publisher: Publisher,
        channel: asyncio.Queue[object],
    ) -> None:
        try:
            for number, records in enumerate(phases, start=1):
                self._state = JobState.RUNNING
                self._active_phase = number
                logger.info("Starting phase {}/{}", number, len(phases))
                worker = asyncio.create_task(self._run_phase(number, records, publisher, channel))
                await worker
                if self._on_phase_complete is not None:
                    self._on_phase_complete(number)
            self._state = JobState.DONE
        except BaseException:
            self._state = JobState.ERROR
            raise
        finally:
            self._active_phase = None
            channel.put_nowait(_END)

    async def _run_phase(
        self,
        number: int,
        records: Iterable[FileRecord],
        publisher: Publisher,
        channel: asyncio.Queue[object],
    ) -> None:
        semaphore = asyncio.Semaphore(self._max_concurrency)
        in_flight: list[asyncio.Task[None]] = []

        async def _publish_one(record: FileRecord) -> None:
            try:
                outcome = await publisher.publish(record)
            finally:
                semaphore.release()
            channel.put_nowait(dataclasses.replace(outcome, phase=number))

        try:
            for record in records:
                await semaphore.acquire()
                _raise_first_failure(in_flight)
                in_flight.append(asyncio.create_task(_publish_one(record)))
            await asyncio.gather(*in_flight)
        except BaseException:
            for task in in_flight:
                task.cancel()
            await asyncio.gather(*in_flight, return_exceptions=True)
            raise
        logger.debug("Phase {} drained ({} records)", number, len(in_flight))


def _raise_first_failure(tasks: list[asyncio.Task[None]]) -> None:
    for task in tasks:
        if task.done() and not task.cancelled():
            exc = task.exception()
            if exc is not None:
                raise exc
