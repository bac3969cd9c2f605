# qcolsim/bloch.py
import math
from typing import NamedTuple, Optional, Sequence
import numpy as np
from .complex_math import complex_multiply
from .state import State

class BlochAngles(NamedTuple):
    theta: float = 0.0  # polar, [0, pi]
    phi: float = 0.0    # azimuthal, [0, 2pi)

PRESETS = {
    "zero":   BlochAngles(0.0, 0.0),
    "one":    BlochAngles(math.pi, 0.0),
    "plus":   BlochAngles(math.pi / 2, 0.0),
    "minus":  BlochAngles(math.pi / 2, math.pi),
    "plusI":  BlochAngles(math.pi / 2, math.pi / 2),
    "minusI": BlochAngles(math.pi / 2, 3 * math.pi / 2),
}

def local_state_from_bloch(theta: float, phi: float):
    """(alpha, beta) of cos(theta/2)|0> + e^{i phi} sin(theta/2)|1>."""
    half = theta / 2.0
    alpha = complex(math.cos(half), 0.0)
    beta = complex(math.sin(half) * math.cos(phi), math.sin(half) * math.sin(phi))
    return alpha, beta

def bloch_from_local_state(alpha: complex, beta: complex) -> BlochAngles:
    """Inverse of local_state_from_bloch, with the global phase removed so alpha is real and >= 0."""
    norm2 = abs(alpha) ** 2 + abs(beta) ** 2
    if norm2 == 0:
        return BlochAngles(0.0, 0.0)
    inv = 1.0 / math.sqrt(norm2)
    alpha, beta = alpha * inv, beta * inv
    if abs(alpha) == 0:
        return BlochAngles(math.pi, math.atan2(beta.imag, beta.real))
    g = complex(math.cos(-math.atan2(alpha.imag, alpha.real)),
                math.sin(-math.atan2(alpha.imag, alpha.real)))
    a = complex_multiply(alpha, g)
    b = complex_multiply(beta, g)
    theta = 2.0 * math.acos(min(1.0, abs(a)))
    return BlochAngles(theta, math.atan2(b.imag, b.real))

def build_initial_state(n_qubits: int, angles: Optional[Sequence] = None, dtype=np.complex128) -> State:
    """
    Tensor product of per-qubit Bloch states, qubit q at bit q of the basis index.
    Missing entries default to |0>.
    """
    angles = [] if angles is None else list(angles)
    local = []
    for q in range(n_qubits):
        theta, phi = angles[q] if q < len(angles) and angles[q] is not None else (0.0, 0.0)
        local.append(local_state_from_bloch(theta, phi))

    N = 1 << n_qubits
    psi = np.zeros(N, dtype=dtype)
    for i in range(N):
        amp = complex(1.0, 0.0)
        for q in range(n_qubits):
            alpha, beta = local[q]
            amp = complex_multiply(amp, beta if (i >> q) & 1 else alpha)
        psi[i] = amp
    return State(n=n_qubits, psi=psi)
