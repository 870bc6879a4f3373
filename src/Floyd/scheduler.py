"""Simulated worker-pool scheduler.

Partitions one iteration's operation list, in order, into consecutive
batches of ``worker_count`` operations. Within a batch the operation at
position ``p`` runs on worker ``p``. All operations of an iteration read the
same pre-iteration snapshot, so batch order carries no data dependency;
batches are replayed in sequence only so progress can be followed.

The replay is cosmetic: distances are already committed by the stepper, so a
driver may abandon a ``BatchSchedule.frames()`` generator at any point.
"""

import logging
import time
from typing import Iterator, List, Sequence

from .datastructures import Batch, BatchFrame, ThreadAssignment, UpdateOperation
from .errors import InvalidConfigError

log = logging.getLogger(__name__)


# ============================================================================
# Pacing
# ============================================================================


class NullPacer:
    """No delay between ticks (default; keeps replay synchronous)."""

    def wait(self) -> None:
        pass


class SleepPacer:
    """Sleep a fixed interval between ticks."""

    def __init__(self, tick_seconds: float):
        if tick_seconds < 0:
            raise InvalidConfigError(f"tick_seconds must be >= 0, got {tick_seconds}")
        self.tick_seconds = tick_seconds

    def wait(self) -> None:
        time.sleep(self.tick_seconds)


# ============================================================================
# Partition
# ============================================================================


def partition(operations: Sequence[UpdateOperation], worker_count: int) -> List[Batch]:
    """Split ``operations`` into consecutive batches of ``worker_count``.

    Batch ``b`` holds operations ``[b*W, min((b+1)*W, len))``.
    """
    if worker_count < 1:
        raise InvalidConfigError(f"worker_count must be >= 1, got {worker_count}")
    return [
        Batch(index=b, start=start, operations=tuple(operations[start:start + worker_count]))
        for b, start in enumerate(range(0, len(operations), worker_count))
    ]


class BatchSchedule:
    """Restartable, finite sequence of batches for one iteration.

    Iterating yields ``Batch`` objects; ``frames()`` yields the progress
    replay. Both can be restarted any number of times.

    Parameters
    ----------
    operations : sequence of UpdateOperation
        The iteration's operation list.
    worker_count : int
        Pool size ``W``.
    parallel : bool
        If False, the whole list is a single completed batch on worker 0.
    ticks_per_batch : int
        Number of progress ticks per batch (5 -> 20% steps).
    pacer : object with ``wait()``, optional
        Called between ticks. Defaults to ``NullPacer``.
    """

    def __init__(
        self,
        operations: Sequence[UpdateOperation],
        worker_count: int,
        parallel: bool = True,
        ticks_per_batch: int = 5,
        pacer=None,
    ):
        self.operations = list(operations)
        self.worker_count = worker_count
        self.parallel = parallel
        self.ticks_per_batch = ticks_per_batch
        self.pacer = pacer if pacer is not None else NullPacer()

        if parallel:
            self._batches = partition(self.operations, worker_count)
        elif self.operations:
            self._batches = [Batch(index=0, start=0, operations=tuple(self.operations))]
        else:
            self._batches = []

    def __iter__(self) -> Iterator[Batch]:
        return iter(self._batches)

    def __len__(self) -> int:
        return len(self._batches)

    def __getitem__(self, index: int) -> Batch:
        return self._batches[index]

    @property
    def batches(self) -> List[Batch]:
        return list(self._batches)

    def frames(self) -> Iterator[BatchFrame]:
        """Yield progress frames batch by batch.

        Parallel mode: per batch, one frame at progress 0 then one per tick up
        to 100 (the last marks the batch completed). Sequential mode: a single
        frame with every operation completed on worker 0.
        """
        if not self.parallel:
            if self.operations:
                yield BatchFrame(
                    batch_index=0,
                    progress=100,
                    assignments=tuple(
                        ThreadAssignment(thread_id=0, operation=op, progress=100, status="completed")
                        for op in self.operations
                    ),
                )
            return

        step = 100 // self.ticks_per_batch
        for batch in self._batches:
            yield BatchFrame(batch.index, 0, tuple(batch.assignments(0, "running")))
            for tick in range(1, self.ticks_per_batch + 1):
                self.pacer.wait()
                progress = 100 if tick == self.ticks_per_batch else tick * step
                status = "completed" if progress == 100 else "running"
                yield BatchFrame(batch.index, progress, tuple(batch.assignments(progress, status)))


class BatchScheduler:
    """Builds a ``BatchSchedule`` for each iteration's operations."""

    def __init__(self, worker_count: int = 4, parallel_enabled: bool = True, ticks_per_batch: int = 5, pacer=None):
        if worker_count < 1:
            raise InvalidConfigError(f"worker_count must be >= 1, got {worker_count}")
        self.worker_count = worker_count
        self.parallel_enabled = parallel_enabled
        self.ticks_per_batch = ticks_per_batch
        self.pacer = pacer

    def schedule(self, operations: Sequence[UpdateOperation]) -> BatchSchedule:
        schedule = BatchSchedule(
            operations,
            worker_count=self.worker_count,
            parallel=self.parallel_enabled,
            ticks_per_batch=self.ticks_per_batch,
            pacer=self.pacer,
        )
        log.debug(
            f"Scheduled {len(schedule.operations)} operations into {len(schedule)} batches "
            f"(W={self.worker_count}, parallel={self.parallel_enabled})"
        )
        return schedule
