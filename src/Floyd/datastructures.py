"""Data structures for simulation configuration, step output and metrics.

Architecture: Params vs per-step records vs Metrics

                 Params (input/config)         Per-step (ephemeral)          Metrics (output/results)
                 ─────────────────────         ────────────────────          ────────────────────────
                 SimulationParams              UpdateOperation, StepResult   IterationCost
                 worker_count, unit_cost,      Batch, ThreadAssignment,      MetricsSnapshot
                 parallel_enabled...           BatchFrame                    cumulative costs, speedup...
"""

from __future__ import annotations

from dataclasses import dataclass, field
from numbers import Integral, Real
from typing import List, Optional, Tuple

from .errors import InvalidConfigError


# ============================================================================
# Configuration
# ============================================================================


def _require_int(name: str, value, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidConfigError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidConfigError(f"{name} must be >= {minimum}, got {value}")


@dataclass
class SimulationParams:
    """Run configuration - validated on construction, logged to MLflow as params.

    Rebuilt (never mutated in place) by ``FloydWarshallSimulation.configure``
    so that an invalid update leaves the previous configuration intact.
    """

    # Worker pool model
    worker_count: int = 4
    parallel_enabled: bool = True
    unit_cost: int = 10  # Modelled cost of one relaxation check

    # Progress replay
    ticks_per_batch: int = 5  # 5 ticks -> 20% per tick

    # Kernel
    use_numba: bool = False
    numba_threads: Optional[int] = None  # None keeps Numba's default

    # Supported vertex range for initialize()
    min_vertices: int = 1
    max_vertices: int = 10

    # Experiment tracking
    experiment_name: str = "default"

    def __post_init__(self):
        """Validate types and ranges."""
        _require_int("worker_count", self.worker_count, 1)
        _require_int("ticks_per_batch", self.ticks_per_batch, 1)
        _require_int("min_vertices", self.min_vertices, 1)
        _require_int("max_vertices", self.max_vertices, self.min_vertices)
        if self.numba_threads is not None:
            _require_int("numba_threads", self.numba_threads, 1)
        if isinstance(self.unit_cost, bool) or not isinstance(self.unit_cost, Real):
            raise InvalidConfigError(f"unit_cost must be a number, got {self.unit_cost!r}")
        if self.unit_cost <= 0:
            raise InvalidConfigError(f"unit_cost must be > 0, got {self.unit_cost}")
        self.worker_count = int(self.worker_count)

    def to_mlflow(self) -> dict:
        """Convert to MLflow-compatible params dict (bools as int, None dropped)."""
        return {
            k: (int(v) if isinstance(v, bool) else v)
            for k, v in self.__dict__.items()
            if v is not None
        }


# ============================================================================
# Stepper output
# ============================================================================


@dataclass(frozen=True)
class UpdateOperation:
    """One candidate relaxation of ``dist[i][j]`` through pivot ``k``."""

    i: int
    j: int
    k: int
    old_dist: int
    new_dist: int
    updated: bool

    @property
    def cell(self) -> Tuple[int, int]:
        return (self.i, self.j)


@dataclass
class StepResult:
    """Output of one ``step()`` call.

    ``iteration`` is the number of completed iterations (``k + 1``).
    A call made after completion returns ``operations=[]`` and
    ``complete=True`` without touching any state.
    """

    iteration: int
    pivot: int
    operations: List[UpdateOperation] = field(default_factory=list)
    complete: bool = False

    @property
    def updates(self) -> List[UpdateOperation]:
        """Operations that improved a distance."""
        return [op for op in self.operations if op.updated]


# ============================================================================
# Scheduler
# ============================================================================


@dataclass(frozen=True)
class ThreadAssignment:
    """An operation placed on a logical worker at some progress tick."""

    thread_id: int
    operation: UpdateOperation
    progress: int = 0  # 0..100
    status: str = "pending"  # "pending" | "running" | "completed"


@dataclass(frozen=True)
class Batch:
    """Non-owning slice of up to ``worker_count`` consecutive operations.

    Batch ``index`` covers operations ``[start, start + len(operations))``
    of the iteration's operation list.
    """

    index: int
    start: int
    operations: Tuple[UpdateOperation, ...]

    def __len__(self) -> int:
        return len(self.operations)

    @property
    def thread_ids(self) -> List[int]:
        return list(range(len(self.operations)))

    def assignments(self, progress: int = 0, status: str = "pending") -> List[ThreadAssignment]:
        """Operations paired with their worker (position within the batch)."""
        return [
            ThreadAssignment(thread_id=pos, operation=op, progress=progress, status=status)
            for pos, op in enumerate(self.operations)
        ]


@dataclass(frozen=True)
class BatchFrame:
    """One replay tick: the batch on the worker pool and its progress."""

    batch_index: int
    progress: int
    assignments: Tuple[ThreadAssignment, ...]

    @property
    def done(self) -> bool:
        return self.progress >= 100


# ============================================================================
# Performance model
# ============================================================================


@dataclass
class IterationCost:
    """Modelled cost of one iteration.

    ``speedup`` and ``efficiency`` are None when the iteration had no
    operations (n = 1).
    """

    iteration: int  # 1-based (pivot + 1)
    pivot: int
    threads: int  # operation count
    updates: int
    worker_count: int
    sequential_cost: int
    parallel_cost: int
    speedup: Optional[float] = None
    efficiency: Optional[float] = None  # percent

    def to_mlflow(self) -> dict:
        """Convert to MLflow-compatible dict (no None)."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


@dataclass
class MetricsSnapshot:
    """Aggregated results - logged to MLflow as metrics."""

    per_iteration_history: List[IterationCost] = field(default_factory=list)
    cumulative_sequential: int = 0
    cumulative_parallel: int = 0
    overall_speedup: Optional[float] = None
    overall_efficiency: Optional[float] = None

    @property
    def iterations(self) -> int:
        return len(self.per_iteration_history)

    def to_mlflow(self) -> dict:
        """Scalar summary for MLflow (no None, history excluded)."""
        summary = {
            "iterations": self.iterations,
            "cumulative_sequential": self.cumulative_sequential,
            "cumulative_parallel": self.cumulative_parallel,
            "overall_speedup": self.overall_speedup,
            "overall_efficiency": self.overall_efficiency,
        }
        return {k: v for k, v in summary.items() if v is not None}
