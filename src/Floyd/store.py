"""Distance store: the original graph and the working distance matrix.

The store is the only place distances are written. The original matrix is
kept read-only so "was this cell ever improved" can be answered at any time.
"""

import logging
import math
from numbers import Real
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import (
    InvalidConfigError,
    InvalidDiagonalError,
    InvalidShapeError,
    InvalidSizeError,
    InvalidWeightError,
)

log = logging.getLogger(__name__)

INF = 999  # Sentinel for "no path"

Matrix = Sequence[Sequence[Union[int, float, None]]]


def _normalize_entry(value, i: int, j: int, inf: int) -> int:
    """Map one input entry to an integer distance, saturating at ``inf``."""
    if value is None:
        return inf
    if isinstance(value, bool) or not isinstance(value, (Real, np.integer, np.floating)):
        raise InvalidWeightError(f"Invalid value at [{i}][{j}]: {value!r}")
    if math.isnan(value):
        raise InvalidWeightError(f"Invalid value at [{i}][{j}]: NaN")
    if value < 0:
        raise InvalidWeightError(f"Negative weight at [{i}][{j}]: {value}")
    if math.isinf(value) or value >= inf:
        return inf
    if value != int(value):
        raise InvalidWeightError(f"Non-integer weight at [{i}][{j}]: {value}")
    return int(value)


def validate_matrix(matrix: Matrix, min_n: int = 1, max_n: int = 10, inf: int = INF) -> np.ndarray:
    """Validate a square distance matrix and return it as an int64 array.

    Checks run in order shape, size, diagonal, weights.

    Raises
    ------
    InvalidShapeError
        Ragged rows or row count != column count.
    InvalidSizeError
        Vertex count outside ``[min_n, max_n]``.
    InvalidDiagonalError
        Any diagonal entry is non-zero.
    InvalidWeightError
        Negative, non-numeric or non-integral off-diagonal entry, or finite
        weights whose n - 1 largest sum to ``inf`` or more (such a path
        would be indistinguishable from "unreachable").
    """
    try:
        rows = [list(row) for row in matrix]
    except TypeError as e:
        raise InvalidShapeError("Matrix must be a sequence of rows") from e

    n = len(rows)
    if any(len(row) != n for row in rows):
        raise InvalidShapeError("Matrix must be square (same number of rows and columns)")

    if n < min_n or n > max_n:
        raise InvalidSizeError(f"Matrix size must be between {min_n}x{min_n} and {max_n}x{max_n}, got {n}x{n}")

    for i in range(n):
        if rows[i][i] != 0:
            raise InvalidDiagonalError(f"Diagonal elements must be 0 (element [{i}][{i}] is {rows[i][i]})")

    values = [
        [0 if i == j else _normalize_entry(rows[i][j], i, j, inf) for j in range(n)]
        for i in range(n)
    ]
    dist = np.array(values, dtype=np.int64).reshape(n, n)

    # A simple path uses at most n - 1 distinct edges
    finite = np.sort(dist[(dist < inf) & ~np.eye(n, dtype=bool)])[::-1]
    longest = int(finite[: n - 1].sum())
    if longest >= inf:
        raise InvalidWeightError(
            f"Weights too large for sentinel {inf}: a path may reach {longest}"
        )
    return dist


def random_matrix(
    n: int,
    edge_probability: float = 0.7,
    weight_range: Tuple[int, int] = (1, 15),
    rng: Union[np.random.Generator, int, None] = None,
    inf: int = INF,
) -> List[List[int]]:
    """Generate a random directed distance matrix.

    Each off-diagonal pair gets an edge with probability ``edge_probability``
    and an integer weight drawn uniformly from ``weight_range`` (inclusive);
    missing edges are ``inf``. ``(n - 1) * weight_range[1]`` must stay below
    ``inf`` so the result always passes ``validate_matrix``.

    Parameters
    ----------
    rng : numpy.random.Generator or int, optional
        Random source, or a seed for a new one. Pass a seed for reproducible
        matrices.
    """
    if n < 1:
        raise InvalidSizeError(f"n must be >= 1, got {n}")
    if not 0.0 <= edge_probability <= 1.0:
        raise InvalidConfigError(f"edge_probability must be in [0, 1], got {edge_probability}")
    low, high = weight_range
    if low < 0 or high < low or high >= inf or (n - 1) * high >= inf:
        raise InvalidConfigError(f"Invalid weight_range {weight_range} for n={n} and sentinel {inf}")

    if not isinstance(rng, np.random.Generator):
        rng = np.random.default_rng(rng)

    has_edge = rng.random((n, n)) < edge_probability
    weights = rng.integers(low, high, size=(n, n), endpoint=True)

    dist = np.where(has_edge, weights, inf)
    np.fill_diagonal(dist, 0)
    return dist.tolist()


class DistanceStore:
    """Owner of the original and working distance matrices.

    Parameters
    ----------
    min_vertices, max_vertices : int
        Supported vertex range for ``initialize``.
    inf : int
        Sentinel used for unreachable pairs.
    """

    def __init__(self, min_vertices: int = 1, max_vertices: int = 10, inf: int = INF):
        self.min_vertices = min_vertices
        self.max_vertices = max_vertices
        self.inf = inf

        self._original: Optional[np.ndarray] = None
        self._working: Optional[np.ndarray] = None

    # =========================================================================
    # Initialization
    # =========================================================================

    def initialize(self, matrix: Matrix) -> None:
        """Validate ``matrix`` and set both original and working copies from it.

        Nothing is modified if validation fails.
        """
        validated = validate_matrix(matrix, self.min_vertices, self.max_vertices, self.inf)

        original = validated.copy()
        original.flags.writeable = False
        self._original = original
        self._working = validated
        log.info(f"Distance store initialized: n={self.n}")

    def initialize_random(
        self,
        n: int,
        edge_probability: float = 0.7,
        weight_range: Tuple[int, int] = (1, 15),
        rng: Union[np.random.Generator, int, None] = None,
    ) -> List[List[int]]:
        """Initialize from a random matrix; returns the generated matrix."""
        matrix = random_matrix(n, edge_probability, weight_range, rng, inf=self.inf)
        self.initialize(matrix)
        return matrix

    def reset(self) -> None:
        """Restore the working matrix to the original."""
        self._require_initialized()
        self._working = self._original.copy()

    # =========================================================================
    # Mutation
    # =========================================================================

    def apply_updates(self, updated_cells: Iterable[Tuple[int, int, int]]) -> None:
        """Write ``(i, j, new_dist)`` triples into the working matrix only."""
        self._require_initialized()
        for i, j, new_dist in updated_cells:
            self._working[i, j] = new_dist

    # =========================================================================
    # Query Interface
    # =========================================================================

    @property
    def initialized(self) -> bool:
        return self._working is not None

    @property
    def n(self) -> int:
        return 0 if self._working is None else self._working.shape[0]

    def get_cell(self, i: int, j: int) -> int:
        self._require_initialized()
        return int(self._working[i, j])

    def get_original(self, i: int, j: int) -> int:
        self._require_initialized()
        return int(self._original[i, j])

    @property
    def distances(self) -> np.ndarray:
        """Read-only view of the working matrix."""
        self._require_initialized()
        view = self._working.view()
        view.flags.writeable = False
        return view

    @property
    def original(self) -> np.ndarray:
        """Read-only original matrix."""
        self._require_initialized()
        return self._original

    def snapshot(self) -> np.ndarray:
        """Independent copy of the working matrix."""
        self._require_initialized()
        return self._working.copy()

    def is_improved(self, i: int, j: int) -> bool:
        """True if the working distance is shorter than the original edge."""
        return self.get_cell(i, j) < self.get_original(i, j)

    def improved_cells(self) -> List[Tuple[int, int]]:
        """All ``(i, j)`` whose distance improved, in row-major order."""
        self._require_initialized()
        rows, cols = np.nonzero(self._working < self._original)
        return [(int(i), int(j)) for i, j in zip(rows, cols)]

    def to_list(self) -> List[List[int]]:
        self._require_initialized()
        return self._working.tolist()

    def _require_initialized(self):
        if self._working is None:
            raise RuntimeError("Distance store not initialized.")
