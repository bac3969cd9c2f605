# qcolsim/apply_serial.py
import numpy as np
from .state import State
from .errors import InvalidShapeError, InvalidArgumentError
from .measurement import MeasurementResult, normalize_probabilities, draw_outcome, record

def apply_single_qubit(state: State, U2: np.ndarray, k: int):
    """Apply 2x2 gate U2 to qubit k (little-endian: bit k), in place."""
    state.check_dimension()
    U2 = np.asarray(U2)
    if U2.shape != (2, 2):
        raise InvalidShapeError(f"matrix must be 2x2, got shape {U2.shape}")
    state.check_qubit(k)
    psi = state.psi
    N = state.dim
    mask = 1 << k
    # each (i, i|mask) pair is visited once, from the index whose bit k is 0
    for i0 in range(N):
        if i0 & mask:
            continue
        i1 = i0 | mask
        a0 = psi[i0]
        a1 = psi[i1]
        psi[i0] = U2[0,0]*a0 + U2[0,1]*a1
        psi[i1] = U2[1,0]*a0 + U2[1,1]*a1

def apply_CNOT(state: State, control: int, target: int):
    """Flip target where control is 1. Replaces state.psi with a fresh array."""
    state.check_dimension()
    state.check_qubit(control, "controlQubit")
    state.check_qubit(target, "targetQubit")
    if control == target:
        raise InvalidArgumentError("control and target must differ")
    psi = state.psi
    N = state.dim
    mc = 1 << control
    mt = 1 << target
    out = np.empty_like(psi)
    # place each amplitude at its destination; reading from i ^ mt in place would clobber pairs
    for i in range(N):
        dst = i ^ mt if i & mc else i
        out[dst] = psi[i]
    state.psi = out

def qubit_probabilities(psi: np.ndarray, k: int):
    mask = 1 << k
    p0 = 0.0
    p1 = 0.0
    for i in range(psi.shape[0]):
        a = psi[i]
        p = a.real*a.real + a.imag*a.imag
        if i & mask:
            p1 += p
        else:
            p0 += p
    return float(p0), float(p1)

def collapse(psi: np.ndarray, k: int, bit: int):
    """Zero amplitudes disagreeing with bit, then renormalize the survivors."""
    mask = 1 << k
    norm2 = 0.0
    for i in range(psi.shape[0]):
        if ((i & mask) != 0) != bool(bit):
            psi[i] = 0
        else:
            a = psi[i]
            norm2 += a.real*a.real + a.imag*a.imag
    norm = np.sqrt(norm2) if norm2 != 0 else 1.0
    for i in range(psi.shape[0]):
        psi[i] = psi[i] / norm

def measure_qubit(state: State, k: int, rng=None) -> MeasurementResult:
    """Projective measurement of qubit k; collapses state.psi in place."""
    state.check_qubit(k)
    state.check_dimension()
    p0, p1 = normalize_probabilities(*qubit_probabilities(state.psi, k))
    bit = draw_outcome(p0, rng)
    collapse(state.psi, k, bit)
    return record(k, bit, p0, p1)
