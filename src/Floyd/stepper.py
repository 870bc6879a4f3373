"""Floyd-Warshall stepper: one pivot vertex per ``step()`` call.

State machine::

    NOT_STARTED (k = -1) --step--> RUNNING (0 <= k < n-1) --step--> COMPLETE (k = n-1)

Each step reads a single snapshot of the working matrix, builds the full
operation list from it, and only then commits the improved cells to the
store. ``step()`` from COMPLETE is a no-op.
"""

import logging
from enum import Enum
from typing import List

from .datastructures import StepResult, UpdateOperation
from .kernels import NumPyKernel
from .store import DistanceStore

log = logging.getLogger(__name__)


class StepperState(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETE = "complete"


class FloydStepper:
    """Owns the iteration cursor ``k`` and the single-iteration relaxation pass.

    Parameters
    ----------
    store : DistanceStore
        Initialized distance store; the stepper is its only writer.
    kernel : NumPyKernel or NumbaKernel, optional
        Candidate kernel. Defaults to ``NumPyKernel``.
    """

    def __init__(self, store: DistanceStore, kernel=None):
        self.store = store
        self.kernel = kernel if kernel is not None else NumPyKernel(inf=store.inf)
        self.k = -1

    @property
    def state(self) -> StepperState:
        if self.k < 0 or not self.store.initialized:
            return StepperState.NOT_STARTED
        if self.k >= self.store.n - 1:
            return StepperState.COMPLETE
        return StepperState.RUNNING

    @property
    def complete(self) -> bool:
        return self.state is StepperState.COMPLETE

    @property
    def iteration(self) -> int:
        """Number of completed iterations."""
        return self.k + 1

    def reset(self) -> None:
        """Return to NOT_STARTED (distances are restored by the store)."""
        self.k = -1

    def step(self) -> StepResult:
        """Advance one pivot vertex.

        Returns
        -------
        StepResult
            All ``n² - n`` operations of the pass in row-major order, or an
            empty terminal result if the algorithm was already complete.
        """
        if not self.store.initialized:
            raise RuntimeError("Distance store not initialized.")

        if self.complete:
            return StepResult(iteration=self.iteration, pivot=self.k, operations=[], complete=True)

        next_k = self.k + 1
        n = self.store.n

        # Read phase: everything comes from one snapshot
        dist = self.store.snapshot()
        candidates = self.kernel.candidates(dist, next_k)

        operations: List[UpdateOperation] = []
        for i in range(n):
            for j in range(n):
                if i == j:
                    continue
                old_dist = int(dist[i, j])
                new_dist = int(candidates[i, j])
                operations.append(
                    UpdateOperation(
                        i=i, j=j, k=next_k,
                        old_dist=old_dist,
                        new_dist=new_dist,
                        updated=new_dist < old_dist,
                    )
                )

        # Commit phase
        self.store.apply_updates((op.i, op.j, op.new_dist) for op in operations if op.updated)
        self.k = next_k

        result = StepResult(
            iteration=self.iteration,
            pivot=next_k,
            operations=operations,
            complete=self.complete,
        )
        log.debug(
            f"k={next_k}: {len(operations)} operations, {len(result.updates)} updates"
            + (" (complete)" if result.complete else "")
        )
        return result
