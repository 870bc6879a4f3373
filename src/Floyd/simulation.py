"""Floyd-Warshall simulation with a modelled parallel worker pool.

Ties the distance store, stepper, scheduler and performance model together
behind one interface. A driver calls ``step()`` (or ``run()``), then reads the
step's operations, ``schedule`` and ``get_metrics_snapshot()`` for display.
"""

import logging
from dataclasses import asdict, replace
from typing import List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .datastructures import MetricsSnapshot, SimulationParams, StepResult
from .kernels import NumbaKernel, NumPyKernel
from .performance import PerformanceModel
from .scheduler import BatchSchedule, BatchScheduler
from .stepper import FloydStepper, StepperState
from .store import INF, DistanceStore, Matrix

log = logging.getLogger(__name__)


class FloydWarshallSimulation:
    """Step-by-step Floyd-Warshall with simulated batch scheduling.

    Parameters
    ----------
    pacer : object with ``wait()``, optional
        Pacing strategy used when replaying batch frames.
    inf : int
        Sentinel for unreachable pairs.
    **kwargs
        ``SimulationParams`` fields: worker_count, parallel_enabled,
        unit_cost, use_numba, ticks_per_batch, min_vertices, max_vertices...

    Examples
    --------
    >>> sim = FloydWarshallSimulation(worker_count=2)
    >>> sim.initialize([[0, 1, 999], [999, 0, 1], [1, 999, 0]])
    >>> results = sim.run()
    >>> sim.distances.tolist()
    [[0, 1, 2], [2, 0, 1], [1, 2, 0]]
    """

    def __init__(self, pacer=None, inf: int = INF, **kwargs):
        self.config = SimulationParams(**kwargs)
        self.pacer = pacer

        if self.config.use_numba:
            self.kernel = NumbaKernel(inf=inf, specified_numba_threads=self.config.numba_threads)
        else:
            self.kernel = NumPyKernel(inf=inf)

        self.store = DistanceStore(self.config.min_vertices, self.config.max_vertices, inf=inf)
        self.stepper = FloydStepper(self.store, self.kernel)
        self.scheduler = self._make_scheduler(self.config)
        self.performance = PerformanceModel(self.config.worker_count, self.config.unit_cost)

        self.schedule: Optional[BatchSchedule] = None

    def _make_scheduler(self, config: SimulationParams) -> BatchScheduler:
        return BatchScheduler(
            worker_count=config.worker_count,
            parallel_enabled=config.parallel_enabled,
            ticks_per_batch=config.ticks_per_batch,
            pacer=self.pacer,
        )

    # ========================================================================
    # Setup
    # ========================================================================

    def initialize(self, matrix: Matrix) -> None:
        """Load a validated matrix and restart from NOT_STARTED."""
        self.store.initialize(matrix)
        self._restart()

    def initialize_random(
        self,
        n: int,
        edge_probability: float = 0.7,
        weight_range: Tuple[int, int] = (1, 15),
        rng: Union[np.random.Generator, int, None] = None,
    ) -> List[List[int]]:
        """Load a random matrix (see ``random_matrix``) and return it."""
        matrix = self.store.initialize_random(n, edge_probability, weight_range, rng)
        self._restart()
        return matrix

    def reset(self) -> None:
        """Restore the last initialized matrix and clear all metrics."""
        self.store.reset()
        self._restart()

    def configure(
        self,
        worker_count: Optional[int] = None,
        parallel_enabled: Optional[bool] = None,
        unit_cost: Optional[int] = None,
    ) -> SimulationParams:
        """Update the worker pool model.

        The new parameters are validated as a whole before anything changes.
        Recorded history is kept; later iterations use the new values.
        """
        changes = {
            k: v
            for k, v in dict(
                worker_count=worker_count,
                parallel_enabled=parallel_enabled,
                unit_cost=unit_cost,
            ).items()
            if v is not None
        }
        config = replace(self.config, **changes)  # raises InvalidConfigError

        self.config = config
        self.scheduler = self._make_scheduler(config)
        self.performance.worker_count = config.worker_count
        self.performance.unit_cost = config.unit_cost
        log.info(
            f"Configured: W={config.worker_count}, parallel={config.parallel_enabled}, "
            f"unit_cost={config.unit_cost}"
        )
        return config

    def _restart(self):
        self.stepper.reset()
        self.performance.clear()
        self.schedule = None

    # ========================================================================
    # Step interface
    # ========================================================================

    def step(self) -> StepResult:
        """Advance one pivot, record its cost and build its batch schedule.

        A call after completion returns the terminal result and records
        nothing.
        """
        if not self.store.initialized:
            raise RuntimeError("Simulation not initialized.")

        if self.stepper.complete:
            return self.stepper.step()

        result = self.stepper.step()
        cost = self.performance.record(len(result.operations), result.pivot, len(result.updates))
        self.schedule = self.scheduler.schedule(result.operations)

        log.debug(
            f"Iteration {cost.iteration}: seq={cost.sequential_cost}, par={cost.parallel_cost}, "
            f"speedup={cost.speedup}"
        )
        if result.complete:
            log.info(f"Floyd-Warshall complete after {result.iteration} iterations (n={self.n})")
        return result

    def run(self) -> List[StepResult]:
        """Step until complete; returns each step's result."""
        results = []
        while not self.complete:
            results.append(self.step())
        return results

    def warmup(self, warmup_size: int = 10):
        """Warmup kernel (trigger Numba JIT)."""
        self.kernel.warmup(warmup_size=warmup_size)

    # ========================================================================
    # Query
    # ========================================================================

    @property
    def n(self) -> int:
        return self.store.n

    @property
    def k(self) -> int:
        return self.stepper.k

    @property
    def state(self) -> StepperState:
        return self.stepper.state

    @property
    def complete(self) -> bool:
        return self.store.initialized and self.stepper.complete

    @property
    def distances(self) -> np.ndarray:
        return self.store.distances

    @property
    def original(self) -> np.ndarray:
        return self.store.original

    def get_metrics_snapshot(self) -> MetricsSnapshot:
        return self.performance.snapshot()

    def to_dataframe(self) -> pd.DataFrame:
        return self.performance.to_dataframe()

    # ========================================================================
    # Export
    # ========================================================================

    def save_hdf5(self, path) -> None:
        """Save config, summary metrics, and per-iteration history to HDF5."""
        import warnings

        row = {**asdict(self.config), **self.get_metrics_snapshot().to_mlflow(), "n": self.n}
        df_results = pd.DataFrame([row])

        # Convert string columns to avoid PyTables pickle warning
        for col in df_results.select_dtypes(include=["object"]).columns:
            df_results[col] = df_results[col].astype(str)

        with warnings.catch_warnings():
            warnings.simplefilter("ignore", pd.errors.PerformanceWarning)
            df_results.to_hdf(path, key="results", mode="w", format="table")

            history = self.to_dataframe()
            if not history.empty:
                history.astype(float).to_hdf(path, key="timeseries", mode="a", format="table")
