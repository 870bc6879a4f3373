"""Floyd-Warshall parallel simulation package.

Steps the Floyd-Warshall all-pairs shortest path algorithm one pivot vertex
at a time and models how each iteration's independent relaxation checks
would be spread over a fixed pool of workers. Speedup and efficiency come
from a deterministic cost model over operation counts; nothing runs
concurrently.

Components
----------
- DistanceStore: original and working distance matrices
- FloydStepper: iteration cursor and single-pivot relaxation pass
- BatchScheduler / BatchSchedule: fixed-size batch partition and replay
- PerformanceModel: sequential vs parallel cost, speedup, efficiency
- FloydWarshallSimulation: all of the above behind one interface
"""

from pathlib import Path

from .datastructures import (
    SimulationParams,
    UpdateOperation,
    StepResult,
    ThreadAssignment,
    Batch,
    BatchFrame,
    IterationCost,
    MetricsSnapshot,
)
from .errors import (
    SimulationError,
    InvalidShapeError,
    InvalidSizeError,
    InvalidDiagonalError,
    InvalidWeightError,
    InvalidConfigError,
    ShapeError,
    SizeError,
    DiagonalError,
    ConfigError,
)
from .kernels import NumPyKernel, NumbaKernel
from .store import INF, DistanceStore, random_matrix, validate_matrix
from .stepper import FloydStepper, StepperState
from .scheduler import BatchSchedule, BatchScheduler, NullPacer, SleepPacer, partition
from .performance import PerformanceModel, iteration_cost
from .simulation import FloydWarshallSimulation

__all__ = [
    # Data structures
    "SimulationParams",
    "UpdateOperation",
    "StepResult",
    "ThreadAssignment",
    "Batch",
    "BatchFrame",
    "IterationCost",
    "MetricsSnapshot",
    # Errors
    "SimulationError",
    "InvalidShapeError",
    "InvalidSizeError",
    "InvalidDiagonalError",
    "InvalidWeightError",
    "InvalidConfigError",
    "ShapeError",
    "SizeError",
    "DiagonalError",
    "ConfigError",
    # Kernels
    "NumPyKernel",
    "NumbaKernel",
    # Store
    "INF",
    "DistanceStore",
    "random_matrix",
    "validate_matrix",
    # Stepper
    "FloydStepper",
    "StepperState",
    # Scheduler
    "BatchSchedule",
    "BatchScheduler",
    "NullPacer",
    "SleepPacer",
    "partition",
    # Performance
    "PerformanceModel",
    "iteration_cost",
    # Simulation
    "FloydWarshallSimulation",
    # Utilities
    "get_project_root",
]


def get_project_root() -> Path:
    """Get project root directory.

    Returns
    -------
    Path
        Project root directory (contains pyproject.toml).
    """
    current = Path(__file__).resolve().parent
    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent

    # Fallback: assume standard src layout
    return Path(__file__).resolve().parent.parent.parent
