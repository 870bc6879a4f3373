"""Input validation errors raised by the distance store and configuration.

All errors are raised synchronously before any state is mutated.
"""


class SimulationError(Exception):
    """Base class for simulation input errors."""


class InvalidShapeError(SimulationError, ValueError):
    """Matrix is not square (ragged rows or row count != column count)."""


class InvalidSizeError(SimulationError, ValueError):
    """Vertex count lies outside the supported bound."""


class InvalidDiagonalError(SimulationError, ValueError):
    """A diagonal entry is non-zero."""


class InvalidWeightError(SimulationError, ValueError):
    """An off-diagonal entry is negative, non-numeric or non-integral."""


class InvalidConfigError(SimulationError, ValueError):
    """Simulation parameters are out of range (e.g. worker_count < 1)."""


# Short names
ShapeError = InvalidShapeError
SizeError = InvalidSizeError
DiagonalError = InvalidDiagonalError
ConfigError = InvalidConfigError
