# qcolsim/apply_numba.py
import numpy as np
from numba import config, njit, prange, set_num_threads, get_num_threads
from .state import State
from .errors import InvalidShapeError, InvalidArgumentError
from .measurement import MeasurementResult, normalize_probabilities, draw_outcome, record

# ---------- low-level kernels (Numba JIT) ----------

@njit(parallel=True)
def _single_qubit_kernel(psi, U2, k):
    N = psi.shape[0]
    step = 1 << k
    block = step << 1
    nblocks = N // block
    for b in prange(nblocks):
        base = b * block
        for off in range(step):
            i0 = base + off
            i1 = i0 + step
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = U2[0,0]*a0 + U2[0,1]*a1
            psi[i1] = U2[1,0]*a0 + U2[1,1]*a1

@njit(parallel=True)
def _cnot_kernel(psi, out, control, target):
    N = psi.shape[0]
    mc = 1 << control
    mt = 1 << target
    # permutation: every destination is written exactly once
    for i in prange(N):
        if i & mc:
            out[i ^ mt] = psi[i]
        else:
            out[i] = psi[i]

@njit
def _probs_kernel(psi, k):
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
    return p0, p1

@njit
def _collapse_kernel(psi, k, bit):
    mask = 1 << k
    norm2 = 0.0
    for i in range(psi.shape[0]):
        on = 1 if (i & mask) else 0
        if on != bit:
            psi[i] = 0
        else:
            a = psi[i]
            norm2 += a.real*a.real + a.imag*a.imag
    norm = np.sqrt(norm2) if norm2 != 0.0 else 1.0
    for i in range(psi.shape[0]):
        psi[i] = psi[i] / norm

# ---------- user-facing apply helpers ----------

def max_threads() -> int:
    return config.NUMBA_NUM_THREADS

def set_threads(n: int):
    # numba rejects counts outside [1, NUMBA_NUM_THREADS]
    set_num_threads(max(1, min(int(n), max_threads())))

def get_threads() -> int:
    return get_num_threads()

def apply_single_qubit(state: State, U2: np.ndarray, k: int):
    state.check_dimension()
    U2 = np.asarray(U2)
    if U2.shape != (2, 2):
        raise InvalidShapeError(f"matrix must be 2x2, got shape {U2.shape}")
    state.check_qubit(k)
    _single_qubit_kernel(state.psi, U2.astype(state.dtype), k)

def apply_CNOT(state: State, control: int, target: int):
    state.check_dimension()
    state.check_qubit(control, "controlQubit")
    state.check_qubit(target, "targetQubit")
    if control == target:
        raise InvalidArgumentError("control and target must differ")
    out = np.empty_like(state.psi)
    _cnot_kernel(state.psi, out, control, target)
    state.psi = out

def measure_qubit(state: State, k: int, rng=None) -> MeasurementResult:
    state.check_qubit(k)
    state.check_dimension()
    p0, p1 = normalize_probabilities(*_probs_kernel(state.psi, k))
    bit = draw_outcome(p0, rng)
    _collapse_kernel(state.psi, k, bit)
    return record(k, bit, float(p0), float(p1))
