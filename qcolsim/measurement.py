# qcolsim/measurement.py
import logging
from dataclasses import dataclass
import numpy as np

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class MeasurementResult:
    qubit_index: int
    result_bit: int
    probability_zero: float
    probability_one: float

def normalize_probabilities(p0: float, p1: float):
    """Rescale (P0, P1) to sum to 1; an all-zero state counts as P0 = 1."""
    total = p0 + p1
    if total == 0:
        return 1.0, 0.0
    return p0 / total, p1 / total

def draw_outcome(p0: float, rng=None) -> int:
    """Single uniform draw r in [0, 1); outcome 0 iff r < P0."""
    if rng is None:
        rng = np.random.default_rng()
    r = rng.random()
    return 0 if r < p0 else 1

def record(k: int, bit: int, p0: float, p1: float) -> MeasurementResult:
    logger.debug("Measured qubit %d: result=%d, P(0)=%.4f, P(1)=%.4f", k, bit, p0, p1)
    return MeasurementResult(qubit_index=k, result_bit=bit,
                             probability_zero=p0, probability_one=p1)
