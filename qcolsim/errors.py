# qcolsim/errors.py


class SimulationError(Exception):
    pass


class InvalidShapeError(SimulationError, ValueError):
    pass


class QubitIndexError(SimulationError, IndexError):
    pass


class InvalidArgumentError(SimulationError, ValueError):
    pass


class DimensionMismatchError(SimulationError, ValueError):
    pass


class NormalizationError(SimulationError, AssertionError):
    pass
