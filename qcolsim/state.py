# qcolsim/state.py
import numpy as np
from dataclasses import dataclass
from .errors import DimensionMismatchError, NormalizationError, QubitIndexError

def basis_label(index: int, n: int) -> str:
    """Ket label with qubit 0 as the leftmost character (index 1, n=2 -> '|10>')."""
    bits = format(index, f"0{n}b")[::-1] if n > 0 else ""
    return f"|{bits}⟩"

@dataclass
class State:
    n: int
    psi: np.ndarray  # shape (2**n,), qubit q is bit q of the basis index

    @staticmethod
    def zero(n: int, dtype=np.complex128) -> "State":
        N = 1 << n
        psi = np.zeros(N, dtype=dtype)
        psi[0] = 1.0 + 0.0j
        return State(n=n, psi=psi)

    @property
    def dtype(self):
        return self.psi.dtype

    @property
    def dim(self) -> int:
        return 1 << self.n

    def check_dimension(self):
        if self.psi.ndim != 1 or self.psi.shape[0] != self.dim:
            raise DimensionMismatchError(
                f"amplitudes length {self.psi.size} does not match 2^{self.n} = {self.dim}")

    def check_qubit(self, k: int, what: str = "qubitIndex"):
        if k < 0 or k >= self.n:
            raise QubitIndexError(f"{what} {k} is out of range for {self.n} qubits")

    def norm2(self) -> float:
        return float(np.vdot(self.psi, self.psi).real)

    def check_normalized(self, tol=1e-9):
        n2 = self.norm2()
        if not (abs(1.0 - n2) <= tol):
            raise NormalizationError(f"Normalization failed: ||psi||^2={n2}")

    def probabilities(self) -> np.ndarray:
        return np.abs(self.psi) ** 2

    def qubit_probabilities(self, k: int):
        """Unnormalized marginal (P0, P1) of qubit k."""
        self.check_qubit(k)
        p = self.probabilities()
        ones = (np.arange(self.dim) >> k) & 1
        return float(p[ones == 0].sum()), float(p[ones == 1].sum())

    def basis_labels(self):
        return [basis_label(i, self.n) for i in range(self.dim)]

    def copy(self) -> "State":
        return State(self.n, self.psi.copy())

    def as_numpy(self) -> np.ndarray:
        return self.psi

def format_state(state: State, tol=1e-6) -> str:
    terms = []
    for i, amp in enumerate(state.psi):
        if abs(amp) < tol:
            continue
        if abs(amp.imag) < tol:
            coeff = f"{amp.real:.3f}"
        elif abs(amp.real) < tol:
            coeff = f"{amp.imag:.3f}j"
        else:
            coeff = f"({amp.real:.3f}{'+' if amp.imag >= 0 else '-'}{abs(amp.imag):.3f}j)"
        terms.append(f"{coeff}{basis_label(i, state.n)}")
    return " + ".join(terms) if terms else "0"
