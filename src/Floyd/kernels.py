"""Relaxation kernels.

A kernel computes, for one pivot ``k``, the full matrix of candidate
distances ``dist[i][k] + dist[k][j]`` with saturating addition: if either
operand is the ``inf`` sentinel, or the sum reaches it, the candidate is
``inf``. Kernels only read; committing updates is handled by the stepper.
"""

from typing import Optional

import numpy as np
import numba
from numba import njit, prange


@njit(parallel=True)
def _candidates_numba(dist: np.ndarray, k: int, inf: int, out: np.ndarray) -> None:
    """Numba JIT implementation of the saturating candidate matrix."""
    n = dist.shape[0]
    for i in prange(n):
        dik = dist[i, k]
        for j in range(n):
            dkj = dist[k, j]
            if dik >= inf or dkj >= inf:
                out[i, j] = inf
            else:
                s = dik + dkj
                out[i, j] = inf if s >= inf else s


class NumPyKernel:
    """NumPy-based relaxation kernel."""

    def __init__(self, inf: int):
        self.inf = inf
        self.observed_numba_threads = None  # Not applicable for NumPy

    def candidates(self, dist: np.ndarray, k: int) -> np.ndarray:
        """Return the candidate matrix for pivot ``k``."""
        col = dist[:, k][:, None]
        row = dist[k, :][None, :]
        total = col + row
        blocked = (col >= self.inf) | (row >= self.inf) | (total >= self.inf)
        return np.where(blocked, self.inf, total).astype(np.int64)

    def warmup(self, warmup_size: int = 10):
        """No-op for NumPy kernel."""
        pass


class NumbaKernel:
    """Numba JIT-compiled relaxation kernel."""

    def __init__(self, inf: int, specified_numba_threads: Optional[int] = None):
        self.inf = inf

        # Set requested threads (may be clamped by NUMBA_NUM_THREADS env var)
        if specified_numba_threads is not None:
            numba.set_num_threads(min(specified_numba_threads, numba.config.NUMBA_NUM_THREADS))

        # Record what Numba actually reports
        self.observed_numba_threads = numba.get_num_threads()

    def candidates(self, dist: np.ndarray, k: int) -> np.ndarray:
        """Return the candidate matrix for pivot ``k``."""
        dist = np.ascontiguousarray(dist, dtype=np.int64)
        out = np.empty_like(dist)
        _candidates_numba(dist, k, self.inf, out)
        return out

    def warmup(self, warmup_size: int = 10):
        """Trigger JIT compilation with a small problem."""
        rng = np.random.default_rng(0)
        dist = rng.integers(0, self.inf, size=(warmup_size, warmup_size), endpoint=True)
        np.fill_diagonal(dist, 0)
        self.candidates(dist, 0)
