# qcolsim/run.py
import argparse, logging, sys
import numpy as np
from .bloch import PRESETS, BlochAngles, build_initial_state, local_state_from_bloch
from .circuit import GateKind, build_circuit, format_circuit, validate_circuit
from .layout import N_QUBITS, MAX_QUBITS, MAX_COLS
from .simulate import run_circuit

def parse_gate(text):
    """KIND:ROW:COL or CNOT:ROW:COL:TARGET -> placement tuple."""
    parts = text.split(":")
    if len(parts) not in (3, 4):
        raise argparse.ArgumentTypeError(f"expected KIND:ROW:COL[:TARGET], got {text!r}")
    try:
        kind = GateKind(parts[0].upper())
        nums = [int(x) for x in parts[1:]]
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"bad gate {text!r}: {e}") from e
    if len(nums) == 3 and kind != GateKind.CNOT:
        raise argparse.ArgumentTypeError(f"only CNOT takes a target row: {text!r}")
    return (kind, *nums)

def parse_preset(text):
    q, _, name = text.partition("=")
    if name not in PRESETS:
        raise argparse.ArgumentTypeError(f"unknown preset {name!r}; choose from {', '.join(PRESETS)}")
    return int(q), PRESETS[name]

def parse_bloch(text):
    q, _, angles = text.partition("=")
    try:
        theta, phi = (float(x) for x in angles.split(","))
        return int(q), BlochAngles(theta, phi)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected Q=THETA,PHI, got {text!r}") from e

def build_parser():
    p = argparse.ArgumentParser(description="Simulate a qubit-row x time-column circuit and print each column's state.")
    p.add_argument("--qubits", type=int, default=N_QUBITS)
    p.add_argument("--cols", type=int, default=None, help=f"defaults to last used column + 1 (max {MAX_COLS})")
    p.add_argument("--gate", type=parse_gate, action="append", default=[], metavar="KIND:ROW:COL[:TARGET]")
    p.add_argument("--preset", type=parse_preset, action="append", default=[], metavar="Q=NAME")
    p.add_argument("--bloch", type=parse_bloch, action="append", default=[], metavar="Q=THETA,PHI")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--backend", type=str, default="serial", choices=["serial", "numba"])
    p.add_argument("--plot", type=str, default=None, metavar="PNG")
    p.add_argument("-v", "--verbose", action="store_true")
    return p

def execute(argv=None):
    """Parse argv, run the circuit, print the report and return the SimulationRun."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    if not (1 <= args.qubits <= MAX_QUBITS):
        parser.error(f"--qubits must be in [1, {MAX_QUBITS}]")

    angles = [BlochAngles() for _ in range(args.qubits)]
    for q, a in args.preset + args.bloch:
        if not (0 <= q < args.qubits):
            parser.error(f"qubit {q} out of range for {args.qubits} qubits")
        angles[q] = a

    circuit = build_circuit(args.gate, args.qubits, args.cols)
    validate_circuit(circuit)

    print("=== Quantum circuit ===")
    print(f"nQubits = {circuit.n_qubits}, nCols = {circuit.n_cols}")
    print(format_circuit(circuit))

    print("\n=== Initial qubit states ===")
    for q, (theta, phi) in enumerate(angles):
        alpha, beta = local_state_from_bloch(theta, phi)
        sign = "+" if beta.imag >= 0 else "-"
        print(f"q{q}: |ψ⟩ = {alpha.real:.4f}·|0⟩ + ({beta.real:.4f} {sign} {abs(beta.imag):.4f}i)·|1⟩")

    init = build_initial_state(args.qubits, angles)
    run = run_circuit(circuit, init, rng=np.random.default_rng(args.seed), backend=args.backend)

    print("\n=== Column states ===")
    labels = init.basis_labels()
    for col, st in enumerate(run.snapshots):
        probs = st.probabilities()
        cells = "  ".join(f"{lab} {p:.3f}" for lab, p in zip(labels, probs))
        print(f"c{col}: {cells}")

    print("\n=== Measurements ===")
    if not run.measurements:
        print("(none)")
    for key, bit in run.measurements.items():
        print(f"{key} -> {bit}")

    if args.plot:
        from .plot_results import plot_column_probabilities
        plot_column_probabilities(run.snapshots, args.plot, measurements=run.measurements)
        print(f"\nSaved {args.plot}")
    return run

def main(argv=None):
    execute(argv)

if __name__ == "__main__":
    main(sys.argv[1:])
