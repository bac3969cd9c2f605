# qcolsim/simulate.py
import logging
from dataclasses import dataclass, field
from typing import Dict, List
import numpy as np
from .circuit import Circuit, GateKind, SINGLE_QUBIT_KINDS, cnot_target
from .measurement import MeasurementResult
from .state import State
from . import gates as G

logger = logging.getLogger(__name__)

@dataclass
class SimulationRun:
    snapshots: List[State]                                          # one per column, in column order
    measurements: Dict[str, int] = field(default_factory=dict)      # "row:col" -> bit
    results: List[MeasurementResult] = field(default_factory=list)  # execution order

def _load_backend(backend: str, num_threads=None):
    if backend == "serial":
        from . import apply_serial as ap
    elif backend == "numba":
        try:
            from . import apply_numba as ap
        except Exception as e:
            raise RuntimeError("Numba backend not available. Did you `pip install numba`?") from e
        if num_threads is not None:
            ap.set_threads(int(num_threads))
    else:
        raise NotImplementedError(f"Unknown backend: {backend}")
    return ap

def run_circuit(circuit: Circuit, initial_state: State, rng=None, backend: str = "serial",
                dtype=None, check_norm=False, check_norm_tol=None, num_threads=None) -> SimulationRun:
    """
    Walk the columns left to right. Within a column: single-qubit unitaries,
    then CNOT pairs, then measurements, each phase in increasing row order.
    A deep copy of the state is recorded after every column; initial_state is never mutated.
    """
    ap = _load_backend(backend, num_threads)
    if rng is None:
        rng = np.random.default_rng()

    st = initial_state.copy()
    if dtype is not None:
        st.psi = st.psi.astype(dtype)
    st.check_dimension()
    if check_norm_tol is None:
        check_norm_tol = 1e-5 if st.dtype == np.complex64 else 1e-9

    logger.debug("simulating %d qubits x %d columns on %s backend",
                 circuit.n_qubits, circuit.n_cols, backend)

    run = SimulationRun(snapshots=[])
    grid = circuit.grid
    for col in range(circuit.n_cols):
        # 1) H / X / Y / Z
        for row in range(circuit.n_qubits):
            cell = grid[row][col]
            if cell is not None and cell.kind in SINGLE_QUBIT_KINDS:
                ap.apply_single_qubit(st, G.matrix_for_gate(cell.kind, dtype=st.dtype), row)

        # 2) CNOT pairs, driven from the control half
        for row in range(circuit.n_qubits):
            cell = grid[row][col]
            if cell is None or cell.kind != GateKind.CNOT or not cell.has_target:
                continue
            target = cnot_target(circuit, row, col)
            if target is None:
                logger.warning("skipping CNOT at %d:%d without a valid target (target_row=%r)",
                               row, col, cell.target_row)
                continue
            ap.apply_CNOT(st, row, target)

        # 3) measurements
        for row in range(circuit.n_qubits):
            cell = grid[row][col]
            if cell is not None and cell.kind == GateKind.MEASURE:
                res = ap.measure_qubit(st, row, rng)
                run.measurements[f"{row}:{col}"] = res.result_bit
                run.results.append(res)

        if check_norm:
            st.check_normalized(tol=check_norm_tol)
        run.snapshots.append(st.copy())

    return run

def simulate_circuit_by_column(circuit: Circuit, initial_state: State, **kwargs) -> List[State]:
    return run_circuit(circuit, initial_state, **kwargs).snapshots
