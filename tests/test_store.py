"""Tests for the distance store."""

import math

import numpy as np
import pytest
from Floyd import (
    INF,
    DistanceStore,
    InvalidDiagonalError,
    InvalidShapeError,
    InvalidSizeError,
    InvalidWeightError,
    InvalidConfigError,
    random_matrix,
)


MATRIX = [[0, 1, INF], [INF, 0, 1], [1, INF, 0]]


class TestInitialize:
    """Tests for matrix validation and initialization."""

    def test_original_and_working_match(self):
        """Both matrices start as a copy of the input."""
        store = DistanceStore()
        store.initialize(MATRIX)

        assert store.n == 3
        assert store.distances.tolist() == MATRIX
        assert store.original.tolist() == MATRIX

    def test_deep_copy(self):
        """Mutating the caller's matrix does not affect the store."""
        matrix = [row[:] for row in MATRIX]
        store = DistanceStore()
        store.initialize(matrix)
        matrix[0][1] = 42

        assert store.get_cell(0, 1) == 1

    @pytest.mark.parametrize("matrix", [
        [[0, 1], [1, 0, 2]],
        [[0, 1, 2], [1, 0, 2]],
        [[0, 1, 2]],
    ])
    def test_non_square(self, matrix):
        """Ragged or rectangular input raises InvalidShapeError."""
        with pytest.raises(InvalidShapeError):
            DistanceStore().initialize(matrix)

    def test_size_bound(self):
        """Vertex count outside the bound raises InvalidSizeError."""
        store = DistanceStore(min_vertices=3, max_vertices=4)
        with pytest.raises(InvalidSizeError):
            store.initialize([[0, 1], [1, 0]])
        with pytest.raises(InvalidSizeError):
            store.initialize(np.zeros((5, 5), dtype=int))

    def test_empty_matrix(self):
        """An empty matrix is too small."""
        with pytest.raises(InvalidSizeError):
            DistanceStore().initialize([])

    def test_nonzero_diagonal(self):
        """Non-zero diagonal raises InvalidDiagonalError."""
        with pytest.raises(InvalidDiagonalError):
            DistanceStore().initialize([[0, 1, 2], [1, 3, 2], [1, 1, 0]])

    @pytest.mark.parametrize("bad", [-1, 2.5, "x", float("nan")])
    def test_invalid_weight(self, bad):
        """Negative, non-integral or non-numeric weights are rejected."""
        with pytest.raises(InvalidWeightError):
            DistanceStore().initialize([[0, bad], [1, 0]])

    @pytest.mark.parametrize("matrix", [
        [[0, 998, INF], [INF, 0, 1], [INF, INF, 0]],
        [[0, 500, 1], [INF, 0, 499], [1, 1, 0]],
    ])
    def test_weights_reaching_sentinel(self, matrix):
        """The n - 1 largest finite weights must sum below INF."""
        with pytest.raises(InvalidWeightError):
            DistanceStore().initialize(matrix)

    def test_large_weight_single_edge(self):
        """n = 2 paths have one edge, so any weight below INF fits."""
        store = DistanceStore()
        store.initialize([[0, 998], [INF, 0]])

        assert store.get_cell(0, 1) == 998

    @pytest.mark.parametrize("unreachable", [None, math.inf, INF, INF + 50])
    def test_unreachable_normalised(self, unreachable):
        """None, infinity and values past the sentinel all become INF."""
        store = DistanceStore()
        store.initialize([[0, unreachable], [3, 0]])

        assert store.get_cell(0, 1) == INF

    def test_failed_initialize_keeps_state(self):
        """A rejected matrix leaves the previous one in place."""
        store = DistanceStore()
        store.initialize(MATRIX)
        with pytest.raises(InvalidDiagonalError):
            store.initialize([[1, 0], [0, 0]])

        assert store.n == 3
        assert store.distances.tolist() == MATRIX


class TestMutation:
    """Tests for apply_updates and reset."""

    def test_apply_updates_working_only(self):
        """Updates land in the working matrix, never the original."""
        store = DistanceStore()
        store.initialize(MATRIX)
        store.apply_updates([(0, 2, 2), (1, 0, 2)])

        assert store.get_cell(0, 2) == 2
        assert store.get_cell(1, 0) == 2
        assert store.get_original(0, 2) == INF
        assert store.get_original(1, 0) == INF

    def test_original_read_only(self):
        """The original matrix cannot be written through its view."""
        store = DistanceStore()
        store.initialize(MATRIX)

        with pytest.raises(ValueError):
            store.original[0, 1] = 5
        with pytest.raises(ValueError):
            store.distances[0, 1] = 5

    def test_improved_cells(self):
        """Improved cells are those shorter than the original."""
        store = DistanceStore()
        store.initialize(MATRIX)
        store.apply_updates([(2, 1, 2)])

        assert store.is_improved(2, 1)
        assert not store.is_improved(0, 1)
        assert store.improved_cells() == [(2, 1)]

    def test_reset_restores_original(self):
        """reset() discards working updates."""
        store = DistanceStore()
        store.initialize(MATRIX)
        store.apply_updates([(2, 1, 2)])
        store.reset()

        assert store.distances.tolist() == MATRIX
        assert store.improved_cells() == []

    def test_uninitialized(self):
        """Reads before initialize are a programming error."""
        with pytest.raises(RuntimeError):
            DistanceStore().get_cell(0, 0)


class TestRandomMatrix:
    """Tests for random matrix generation."""

    def test_reproducible_with_seed(self):
        """Same seed gives the same matrix."""
        assert random_matrix(6, rng=7) == random_matrix(6, rng=7)

    def test_generator_accepted(self):
        """A numpy Generator can be supplied directly."""
        a = random_matrix(5, rng=np.random.default_rng(3))
        b = random_matrix(5, rng=np.random.default_rng(3))
        assert a == b

    def test_valid_matrix(self):
        """Output has zero diagonal and weights in range or INF."""
        matrix = random_matrix(8, edge_probability=0.5, weight_range=(2, 9), rng=1)

        for i, row in enumerate(matrix):
            assert len(row) == 8
            for j, d in enumerate(row):
                if i == j:
                    assert d == 0
                else:
                    assert d == INF or 2 <= d <= 9

    @pytest.mark.parametrize("p,expected", [(0.0, INF), (1.0, None)])
    def test_edge_probability_extremes(self, p, expected):
        """p=0 gives no edges; p=1 gives every edge."""
        matrix = np.array(random_matrix(5, edge_probability=p, rng=0))
        off_diag = matrix[~np.eye(5, dtype=bool)]

        if expected == INF:
            assert np.all(off_diag == INF)
        else:
            assert np.all(off_diag < INF)

    @pytest.mark.parametrize("kwargs", [
        dict(edge_probability=1.5),
        dict(weight_range=(5, 1)),
        dict(weight_range=(-1, 3)),
        dict(weight_range=(1, 500)),
    ])
    def test_invalid_parameters(self, kwargs):
        """Out-of-range generation parameters raise InvalidConfigError."""
        with pytest.raises(InvalidConfigError):
            random_matrix(4, **kwargs)

    def test_initialize_random(self):
        """initialize_random loads the generated matrix."""
        store = DistanceStore()
        matrix = store.initialize_random(4, rng=11)

        assert store.distances.tolist() == matrix
