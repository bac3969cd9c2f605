# qcolsim/complex_math.py
import numpy as np
from .errors import InvalidShapeError


def complex_add(a: complex, b: complex) -> complex:
    return complex(a.real + b.real, a.imag + b.imag)


def complex_multiply(a: complex, b: complex) -> complex:
    # (a + ib)(c + id) = (ac - bd) + i(ad + bc)
    return complex(a.real * b.real - a.imag * b.imag,
                   a.real * b.imag + a.imag * b.real)


def multiply_matrices(A: np.ndarray, B: np.ndarray) -> np.ndarray:
    """Plain triple-loop complex matrix product, A (m x n) times B (n x p)."""
    if A.ndim != 2 or B.ndim != 2 or A.shape[1] != B.shape[0]:
        raise InvalidShapeError(
            f"Matrix dimension mismatch: A is {A.shape}, B is {B.shape}")
    m, n = A.shape
    p = B.shape[1]
    out = np.zeros((m, p), dtype=np.result_type(A.dtype, B.dtype, np.complex64))
    for i in range(m):
        for j in range(p):
            acc = 0j
            for k in range(n):
                acc = complex_add(acc, complex_multiply(A[i, k], B[k, j]))
            out[i, j] = acc
    return out
