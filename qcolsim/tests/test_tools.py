# qcolsim/tests/test_tools.py
import argparse
import csv
import numpy as np
import pytest
from qcolsim import bench
from qcolsim.circuit import GateKind, validate_circuit
from qcolsim.run import build_parser, execute, parse_gate

def test_parse_gate():
    assert parse_gate("h:0:1") == (GateKind.H, 0, 1)
    assert parse_gate("CNOT:0:2:1") == (GateKind.CNOT, 0, 2, 1)
    for bad in ("H:0", "Q:0:0", "X:0:0:1", "H:a:0"):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_gate(bad)

def test_bad_arguments_exit():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--gate", "H:0"])
    with pytest.raises(SystemExit):
        execute(["--qubits", "9"])
    with pytest.raises(SystemExit):
        execute(["--qubits", "2", "--preset", "5=one"])

def test_run_bell_report(capsys):
    run = execute(["--qubits", "2", "--gate", "H:0:0", "--gate", "CNOT:0:1:1", "--gate", "CNOT:1:1",
                   "--gate", "MEASURE:1:2", "--seed", "3"])
    out = capsys.readouterr().out
    assert "q0: H  C  ." in out
    assert "q1: .  C  M" in out
    assert "c1: |00⟩ 0.500  |10⟩ 0.000  |01⟩ 0.000  |11⟩ 0.500" in out
    bit = run.measurements["1:2"]
    assert f"1:2 -> {bit}" in out
    assert np.allclose(run.snapshots[2].probabilities()[[0, 3]], [1 - bit, bit])

def test_run_with_presets_and_angles(capsys):
    run = execute(["--qubits", "2", "--preset", "0=one", "--bloch", "1=3.141592653589793,0",
                   "--gate", "X:0:0"])
    assert np.allclose(run.snapshots[0].probabilities(), [0, 0, 1, 0])
    assert "(none)" in capsys.readouterr().out

def test_random_circuit_is_well_formed():
    c = bench.random_circuit(4, 6, seed=0)
    assert (c.n_qubits, c.n_cols) == (4, 6)
    assert validate_circuit(c) == []
    assert bench.count_gates(c) == 4 * 3 + 4 * 3

def test_bench_writes_csv(tmp_path):
    out = tmp_path / "serial" / "qubits.csv"
    bench.bench_qubits([1, 2, 3], 4, "serial", str(out))
    with open(out) as f:
        rows = list(csv.DictReader(f))
    assert [int(r["qubits"]) for r in rows] == [1, 2, 3]
    assert all(r["backend"] == "serial" for r in rows)

def test_plots(tmp_path):
    matplotlib = pytest.importorskip("matplotlib")
    matplotlib.use("Agg")
    from qcolsim import plot_results
    run = execute(["--qubits", "2", "--gate", "H:0:0", "--gate", "MEASURE:0:1", "--seed", "0",
                   "--plot", str(tmp_path / "cols.png")])
    assert (tmp_path / "cols.png").exists()
    assert plot_results.plot_column_probabilities([], tmp_path / "none.png") is None
    assert run.measurements.keys() == {"0:1"}

    data = tmp_path / "data"
    bench.bench_depth(2, [2, 4], "serial", str(data / "serial" / "depth.csv"))
    plot_results.main(str(data))
    assert (data / "serial" / "runtime_vs_depth_serial.png").exists()
