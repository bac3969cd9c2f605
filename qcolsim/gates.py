# qcolsim/gates.py
import numpy as np

def H(dtype=np.complex128) -> np.ndarray:
    s = 1.0 / np.sqrt(2.0)
    return np.array([[s, s],
                     [s, -s]], dtype=dtype)

def X(dtype=np.complex128) -> np.ndarray:
    return np.array([[0, 1],
                     [1, 0]], dtype=dtype)

def Y(dtype=np.complex128) -> np.ndarray:
    return np.array([[0, -1j],
                     [1j, 0]], dtype=dtype)

def Z(dtype=np.complex128) -> np.ndarray:
    return np.array([[1, 0],
                     [0, -1]], dtype=dtype)

_SINGLE_QUBIT = {"H": H, "X": X, "Y": Y, "Z": Z}

def matrix_for_gate(kind, dtype=np.complex128):
    """2x2 matrix for H/X/Y/Z; None for MEASURE and CNOT (not a single 2x2 application)."""
    make = _SINGLE_QUBIT.get(str(kind))
    if make is None:
        return None
    return make(dtype=dtype)
