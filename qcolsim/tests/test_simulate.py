# qcolsim/tests/test_simulate.py
import logging
import numpy as np
import pytest
from qcolsim.bloch import build_initial_state
from qcolsim.circuit import Circuit, GateCell, GateKind, set_cell
from qcolsim.errors import DimensionMismatchError, NormalizationError, QubitIndexError
from qcolsim.simulate import run_circuit, simulate_circuit_by_column
from qcolsim.state import State

class FixedDraws:
    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0

    def random(self):
        self.calls += 1
        return self.values.pop(0)

S = 1/np.sqrt(2)

def test_one_snapshot_per_column():
    c = Circuit.empty(2, 4).h(0, 1)
    snaps = simulate_circuit_by_column(c, build_initial_state(2))
    assert len(snaps) == 4
    assert np.array_equal(snaps[0].psi, [1, 0, 0, 0])
    assert np.allclose(snaps[1].psi, [S, S, 0, 0])
    # empty columns carry the previous state forward
    assert np.array_equal(snaps[2].psi, snaps[1].psi)
    assert np.array_equal(snaps[3].psi, snaps[1].psi)

def test_bell_state_scenario():
    c = Circuit.empty(2, 2).h(0, 0).cnot(0, 1, 1)
    snaps = simulate_circuit_by_column(c, build_initial_state(2, [(0, 0), (0, 0)]))
    assert np.allclose(snaps[1].psi[[0, 3]], [S, S], atol=1e-12)
    assert snaps[1].psi[1] == 0 and snaps[1].psi[2] == 0

def test_initial_state_is_not_mutated():
    init = build_initial_state(2)
    before = init.psi.copy()
    simulate_circuit_by_column(Circuit.empty(2, 2).x(0, 0).h(1, 1), init)
    assert np.array_equal(init.psi, before)

def test_snapshots_are_independent_copies():
    snaps = simulate_circuit_by_column(Circuit.empty(1, 2).x(0, 0), build_initial_state(1))
    assert snaps[0].psi is not snaps[1].psi
    snaps[1].psi[:] = 0
    assert np.allclose(snaps[0].psi, [0, 1])

def test_unitaries_run_before_cnots_within_a_column():
    # Z on the target row of an unpaired control: Z(q1) then CNOT keeps |11> positive,
    # CNOT then Z would flip its sign.
    c = Circuit.empty(2, 1)
    c = set_cell(c, 0, 0, GateCell(GateKind.CNOT, 0, 0, has_target=True, target_row=1))
    c = c.z(1, 0)
    init = build_initial_state(2, [(np.pi/2, 0.0)])
    snaps = simulate_circuit_by_column(c, init)
    assert np.allclose(snaps[0].psi, [S, 0, 0, S], atol=1e-12)

def test_measurements_run_after_cnots_within_a_column():
    # MEASURE sits on the target row of an unpaired control. After the CNOT the
    # target is in a Bell pair, so r = 0.9 yields 1; measured first it would read 0.
    c = Circuit.empty(2, 2).h(0, 0)
    c = set_cell(c, 0, 1, GateCell(GateKind.CNOT, 0, 1, has_target=True, target_row=1))
    c = c.measure(1, 1)
    draws = FixedDraws(0.9)
    run = run_circuit(c, build_initial_state(2), rng=draws)
    assert draws.calls == 1
    assert run.measurements == {"1:1": 1}
    assert np.allclose(run.snapshots[1].psi, [0, 0, 0, 1])

def test_measurement_collapses_entangled_partner():
    c = Circuit.empty(2, 3).h(0, 0).cnot(0, 1, 1).measure(1, 2)
    run = run_circuit(c, build_initial_state(2), rng=FixedDraws(0.9))
    assert run.measurements == {"1:2": 1}
    assert np.allclose(run.snapshots[2].psi, [0, 0, 0, 1])
    # earlier columns still show the superposition
    assert np.allclose(run.snapshots[1].psi[[0, 3]], [S, S])
    res = run.results[0]
    assert res.qubit_index == 1
    assert res.probability_zero == pytest.approx(0.5)

def test_measurements_in_row_order():
    c = Circuit.empty(2, 1).measure(1, 0).measure(0, 0)
    init = build_initial_state(2, [(np.pi/2, 0.0), (np.pi/2, 0.0)])
    run = run_circuit(c, init, rng=FixedDraws(0.1, 0.9))
    assert [r.qubit_index for r in run.results] == [0, 1]
    assert run.measurements == {"0:0": 0, "1:0": 1}
    assert np.allclose(run.snapshots[0].psi, [0, 0, 1, 0])

def test_malformed_cnot_is_skipped(caplog):
    c = Circuit.empty(2, 1)
    c = set_cell(c, 0, 0, GateCell(GateKind.CNOT, 0, 0, has_target=True))
    c = set_cell(c, 1, 0, GateCell(GateKind.CNOT, 1, 0, has_target=True, target_row=1))
    init = build_initial_state(2, [(np.pi, 0.0), (np.pi, 0.0)])
    with caplog.at_level(logging.WARNING, logger="qcolsim.simulate"):
        snaps = simulate_circuit_by_column(c, init)
    assert np.allclose(snaps[0].psi, init.psi)
    assert len(caplog.records) == 2

def test_partner_cell_alone_does_nothing():
    c = set_cell(Circuit.empty(2, 1), 1, 0, GateCell(GateKind.CNOT, 1, 0))
    init = build_initial_state(2, [(np.pi, 0.0)])
    snaps = simulate_circuit_by_column(c, init)
    assert np.array_equal(snaps[0].psi, init.psi)

def test_no_measurement_runs_are_reproducible():
    c = Circuit.empty(3, 4).h(0, 0).y(1, 0).cnot(0, 2, 1).z(1, 2).h(2, 3)
    init = build_initial_state(3, [(0.4, 1.0), (1.3, 0.2), (2.5, 3.3)])
    a = simulate_circuit_by_column(c, init)
    b = simulate_circuit_by_column(c, init)
    for x, y in zip(a, b):
        assert np.array_equal(x.psi, y.psi)

def test_same_seed_same_outcomes():
    c = Circuit.empty(3, 3).h(0, 0).h(1, 0).h(2, 0).measure(0, 1).measure(1, 1).measure(2, 2)
    runs = [run_circuit(c, build_initial_state(3), rng=np.random.default_rng(7)) for _ in range(2)]
    assert runs[0].measurements == runs[1].measurements
    assert len(runs[0].measurements) == 3

def test_engine_errors_abort_the_run():
    # grid taller than the state: row 2 does not exist in a 2-qubit state
    c = Circuit.empty(3, 2).h(2, 1)
    with pytest.raises(QubitIndexError):
        simulate_circuit_by_column(c, build_initial_state(2))

def test_corrupt_initial_state_is_rejected():
    with pytest.raises(DimensionMismatchError):
        simulate_circuit_by_column(Circuit.empty(2, 1), State(2, np.zeros(3, dtype=complex)))

def test_check_norm():
    bad = State(1, np.array([1.0, 1.0], dtype=complex))
    with pytest.raises(NormalizationError):
        simulate_circuit_by_column(Circuit.empty(1, 1), bad, check_norm=True)
    snaps = simulate_circuit_by_column(Circuit.empty(1, 1).h(0, 0), build_initial_state(1), check_norm=True)
    assert len(snaps) == 1

def test_dtype_override():
    snaps = simulate_circuit_by_column(Circuit.empty(1, 1).h(0, 0), build_initial_state(1),
                                       dtype=np.complex64, check_norm=True)
    assert snaps[0].dtype == np.complex64

def test_unknown_backend():
    with pytest.raises(NotImplementedError):
        simulate_circuit_by_column(Circuit.empty(1, 1), build_initial_state(1), backend="gpu")

def test_circuit_run_defaults_to_zero_state():
    run = Circuit.empty(2, 1).x(1, 0).run()
    assert np.allclose(run.snapshots[0].psi, [0, 0, 1, 0])

def test_circuit_run_with_dtype_none():
    run = Circuit.empty(1, 1).y(0, 0).run(dtype=None)
    assert run.snapshots[0].dtype == np.complex128
    assert np.allclose(run.snapshots[0].psi, [0, 1j])
