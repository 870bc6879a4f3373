"""Deterministic cost model for the simulated worker pool.

For an iteration with ``count`` operations on ``W`` workers::

    sequential_cost = count * unit_cost
    parallel_cost   = ceil(count / W) * unit_cost
    speedup         = sequential_cost / parallel_cost
    efficiency      = 100 * speedup / W

Costs are modelled units, not measured time. With no operations (n = 1)
costs are 0 and speedup/efficiency are None.
"""

import math
from typing import List, Optional

import pandas as pd

from .datastructures import IterationCost, MetricsSnapshot
from .errors import InvalidConfigError


def iteration_cost(
    count: int,
    worker_count: int,
    unit_cost: int,
    pivot: int,
    updates: int = 0,
) -> IterationCost:
    """Model the cost of one iteration of ``count`` independent operations."""
    if worker_count < 1:
        raise InvalidConfigError(f"worker_count must be >= 1, got {worker_count}")

    sequential = count * unit_cost
    parallel = math.ceil(count / worker_count) * unit_cost

    speedup: Optional[float] = None
    efficiency: Optional[float] = None
    if parallel > 0:
        speedup = sequential / parallel
        efficiency = 100.0 * speedup / worker_count

    return IterationCost(
        iteration=pivot + 1,
        pivot=pivot,
        threads=count,
        updates=updates,
        worker_count=worker_count,
        sequential_cost=sequential,
        parallel_cost=parallel,
        speedup=speedup,
        efficiency=efficiency,
    )


class PerformanceModel:
    """Accumulates per-iteration costs and running totals."""

    def __init__(self, worker_count: int = 4, unit_cost: int = 10):
        self.worker_count = worker_count
        self.unit_cost = unit_cost
        self.history: List[IterationCost] = []
        self.sequential_time = 0
        self.parallel_time = 0

    def record(self, count: int, pivot: int, updates: int = 0) -> IterationCost:
        """Model one iteration and add it to the history and totals."""
        cost = iteration_cost(count, self.worker_count, self.unit_cost, pivot, updates)
        self.history.append(cost)
        self.sequential_time += cost.sequential_cost
        self.parallel_time += cost.parallel_cost
        return cost

    def clear(self):
        """Clear history and totals."""
        self.history.clear()
        self.sequential_time = 0
        self.parallel_time = 0

    @property
    def overall_speedup(self) -> Optional[float]:
        if self.parallel_time <= 0:
            return None
        return self.sequential_time / self.parallel_time

    @property
    def overall_efficiency(self) -> Optional[float]:
        speedup = self.overall_speedup
        if speedup is None:
            return None
        return 100.0 * speedup / self.worker_count

    def snapshot(self) -> MetricsSnapshot:
        return MetricsSnapshot(
            per_iteration_history=list(self.history),
            cumulative_sequential=self.sequential_time,
            cumulative_parallel=self.parallel_time,
            overall_speedup=self.overall_speedup,
            overall_efficiency=self.overall_efficiency,
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Per-iteration history as a DataFrame (one row per iteration)."""
        columns = list(IterationCost.__dataclass_fields__)
        return pd.DataFrame([cost.__dict__ for cost in self.history], columns=columns)
