# qcolsim/circuit.py
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Sequence, Tuple
import numpy as np
from .layout import MAX_COLS

logger = logging.getLogger(__name__)

class GateKind(str, Enum):
    H = "H"
    X = "X"
    Y = "Y"
    Z = "Z"
    MEASURE = "MEASURE"
    CNOT = "CNOT"

    def __str__(self):
        return self.value

SINGLE_QUBIT_KINDS = (GateKind.H, GateKind.X, GateKind.Y, GateKind.Z)

@dataclass(frozen=True)
class GateCell:
    kind: GateKind
    row: int
    col: int
    # CNOT only: set on the control half of a pair
    has_target: bool = False
    target_row: Optional[int] = None

Grid = Tuple[Tuple[Optional[GateCell], ...], ...]

@dataclass(frozen=True)
class Circuit:
    """Grid of optional gate cells, grid[row][col]. Treated as persistent data."""
    n_qubits: int
    n_cols: int
    grid: Grid

    @staticmethod
    def empty(n_qubits: int, n_cols: int) -> "Circuit":
        return create_empty_circuit(n_qubits, n_cols)

    def place(self, kind, row: int, col: int) -> "Circuit":
        return set_cell(self, row, col, GateCell(GateKind(kind), row, col))

    def h(self, row:int, col:int): return self.place(GateKind.H, row, col)
    def x(self, row:int, col:int): return self.place(GateKind.X, row, col)
    def y(self, row:int, col:int): return self.place(GateKind.Y, row, col)
    def z(self, row:int, col:int): return self.place(GateKind.Z, row, col)
    def measure(self, row:int, col:int): return self.place(GateKind.MEASURE, row, col)

    def cnot(self, control:int, target:int, col:int) -> "Circuit":
        c = set_cell(self, control, col,
                     GateCell(GateKind.CNOT, control, col, has_target=True, target_row=target))
        return set_cell(c, target, col, GateCell(GateKind.CNOT, target, col))

    def run(self, initial_state=None, **kwargs):
        """Simulate column by column; starts from |0...0> when no initial state is given."""
        from .simulate import run_circuit
        from .state import State
        if initial_state is None:
            initial_state = State.zero(self.n_qubits, dtype=kwargs.get("dtype") or np.complex128)
        return run_circuit(self, initial_state, **kwargs)

def create_empty_circuit(n_qubits: int, n_cols: int) -> Circuit:
    grid = tuple(tuple(None for _ in range(n_cols)) for _ in range(n_qubits))
    return Circuit(n_qubits=n_qubits, n_cols=n_cols, grid=grid)

def _in_bounds(circuit: Circuit, row: int, col: int) -> bool:
    return 0 <= row < circuit.n_qubits and 0 <= col < circuit.n_cols

def get_cell(circuit: Circuit, row: int, col: int) -> Optional[GateCell]:
    if not _in_bounds(circuit, row, col):
        return None
    return circuit.grid[row][col]

def set_cell(circuit: Circuit, row: int, col: int, cell: Optional[GateCell]) -> Circuit:
    """New circuit with grid[row][col] = cell; the argument is returned untouched if out of range."""
    if not _in_bounds(circuit, row, col):
        return circuit
    new_row = circuit.grid[row][:col] + (cell,) + circuit.grid[row][col + 1:]
    grid = circuit.grid[:row] + (new_row,) + circuit.grid[row + 1:]
    return replace(circuit, grid=grid)

# ----------------------------- builders -----------------------------

Placement = Tuple  # (kind, row, col) or (kind, row, col, target_row) for a CNOT control

def build_circuit(placements: Sequence[Placement], n_qubits: int, n_cols: Optional[int] = None) -> Circuit:
    """Grid from (kind, row, col[, target_row]) placements, dropping anything off-grid."""
    if n_cols is None:
        n_cols = max((p[2] for p in placements), default=0) + 1
    total_cols = max(1, min(n_cols, MAX_COLS))
    circuit = create_empty_circuit(n_qubits, total_cols)
    for p in placements:
        kind, row, col = GateKind(p[0]), p[1], p[2]
        if not _in_bounds(circuit, row, col):
            logger.debug("dropping %s at (%d, %d): outside %dx%d grid",
                         kind, row, col, n_qubits, total_cols)
            continue
        if kind == GateKind.CNOT and len(p) > 3 and p[3] is not None:
            cell = GateCell(kind, row, col, has_target=True, target_row=p[3])
        else:
            cell = GateCell(kind, row, col)
        circuit = set_cell(circuit, row, col, cell)
    return circuit

def cnot_target(circuit: Circuit, row: int, col: int) -> Optional[int]:
    """Target row for a CNOT control cell, or None when the cell has no usable target."""
    cell = get_cell(circuit, row, col)
    if cell is None or cell.kind != GateKind.CNOT or not cell.has_target:
        return None
    t = cell.target_row
    if isinstance(t, bool) or not isinstance(t, (int, np.integer)) or t == row or not (0 <= t < circuit.n_qubits):
        return None
    return t

def validate_circuit(circuit: Circuit) -> List[str]:
    problems = []
    for col in range(circuit.n_cols):
        targeted = set()
        for row in range(circuit.n_qubits):
            cell = circuit.grid[row][col]
            if cell is None or cell.kind != GateKind.CNOT or not cell.has_target:
                continue
            t = cnot_target(circuit, row, col)
            if t is None:
                problems.append(f"CNOT control at {row}:{col} has no valid target (target_row={cell.target_row!r})")
                continue
            partner = circuit.grid[t][col]
            if partner is None or partner.kind != GateKind.CNOT or partner.has_target:
                problems.append(f"CNOT control at {row}:{col} targets {t}:{col}, which is not a CNOT partner")
            targeted.add(t)
        for row in range(circuit.n_qubits):
            cell = circuit.grid[row][col]
            if cell is not None and cell.kind == GateKind.CNOT and not cell.has_target and row not in targeted:
                problems.append(f"CNOT at {row}:{col} has no control in its column")
    for msg in problems:
        logger.warning(msg)
    return problems

def format_circuit(circuit: Circuit) -> str:
    lines = []
    for r, row in enumerate(circuit.grid):
        marks = ["." if cell is None else str(cell.kind)[0] for cell in row]
        lines.append(f"q{r}: " + "  ".join(marks))
    return "\n".join(lines)
