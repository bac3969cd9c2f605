# qcolsim/bench.py
import argparse, csv, os, socket, subprocess, time
from datetime import datetime
import numpy as np
from .circuit import Circuit
from .bloch import build_initial_state
from .simulate import run_circuit

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")

def backend_dir(backend):
    path = os.path.join(DATA_DIR, backend)
    os.makedirs(path, exist_ok=True)
    return path

def time_run(circ, backend, threads=None, seed=0):
    init = build_initial_state(circ.n_qubits)
    t0 = time.perf_counter()
    _ = run_circuit(circ, init, rng=np.random.default_rng(seed), backend=backend, num_threads=threads)
    return (time.perf_counter() - t0) * 1e3  # ms

def warmup(circ, backend, threads=None):
    # one dummy run to JIT-compile & warm caches
    time_run(circ, backend, threads)

# ---------------------------------------------------------------------

def meta_row():
    commit = ""
    try:
        commit = subprocess.check_output(["git", "rev-parse", "--short", "HEAD"],
                                         stderr=subprocess.DEVNULL).decode().strip()
    except (OSError, subprocess.CalledProcessError):
        pass
    return {
        "hostname": socket.gethostname(),
        "commit": commit,
        "dtype": "complex128",
        "timestamp": datetime.now().isoformat(timespec="seconds"),
    }

HEADER = ["qubits","cols","backend","threads","gates","wall_ms","hostname","commit","dtype","timestamp"]

def new_csv(path):
    """Create/overwrite CSV with header."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", newline="") as f:
        csv.DictWriter(f, fieldnames=HEADER).writeheader()

def write_row(path, row):
    with open(path, "a", newline="") as f:
        csv.DictWriter(f, fieldnames=HEADER).writerow(row)

def count_gates(circ: Circuit) -> int:
    return sum(cell is not None for row in circ.grid for cell in row)

# ---------------------------------------------------------------------

def random_circuit(n, cols, seed=0, p_measure=0.1):
    """Even columns: a random single-qubit gate (or measurement) per row. Odd columns: CNOT pairs."""
    rng = np.random.default_rng(seed)
    c = Circuit.empty(n, cols)
    for col in range(cols):
        if col % 2 == 0 or n < 2:
            for k in range(n):
                if rng.random() < p_measure:
                    c = c.measure(k, col)
                else:
                    c = c.place("HXYZ"[int(rng.integers(0, 4))], k, col)
        else:
            for k in range(0, n-1, 2):
                if rng.integers(0, 2) == 0:
                    c = c.cnot(k, k+1, col)
                else:
                    c = c.cnot(k+1, k, col)
    return c

def numba_max_threads():
    try:
        from numba import config
    except ImportError:
        return os.cpu_count() or 1
    return config.NUMBA_NUM_THREADS

def _row(n, cols, backend, threads, circ, wall):
    m = meta_row()
    return {
        "qubits": n, "cols": cols, "backend": backend, "threads": threads,
        "gates": count_gates(circ), "wall_ms": f"{wall:.3f}",
        "hostname": m["hostname"], "commit": m["commit"], "dtype": m["dtype"], "timestamp": m["timestamp"],
    }

# ---------------------------------------------------------------------
# individual experiments

def bench_qubits(ns, cols, backend, out_path):
    print(f"[run] Qubits scaling → {out_path}")
    new_csv(out_path)
    warmup(random_circuit(ns[0], cols, seed=42), backend=backend)
    threads = 0 if backend == "serial" else numba_max_threads()
    for n in ns:
        circ = random_circuit(n, cols, seed=42)
        wall = time_run(circ, backend)
        write_row(out_path, _row(n, cols, backend, threads, circ, wall))
        print(f"  n={n}  wall={wall:.2f} ms")
    print("✓ done.\n")

def bench_depth(n, depths, backend, out_path):
    print(f"[run] Depth scaling → {out_path}")
    new_csv(out_path)
    warmup(random_circuit(n, min(depths), seed=7), backend=backend)
    threads = 0 if backend == "serial" else numba_max_threads()
    for d in depths:
        circ = random_circuit(n, d, seed=7)
        wall = time_run(circ, backend)
        write_row(out_path, _row(n, d, backend, threads, circ, wall))
        print(f"  cols={d}  wall={wall:.2f} ms")
    print("✓ done.\n")

def bench_threads(n, cols, threads_list, out_path):
    print(f"[run] Thread scaling → {out_path}")
    new_csv(out_path)
    circ = random_circuit(n, cols, seed=123)
    warmup(circ, "numba", threads=1)
    t1 = time_run(circ, "numba", threads=1)
    pool = numba_max_threads()
    print(f"  pool={pool}  T1={t1:.1f} ms")
    for t in threads_list:
        tt = min(int(t), pool)
        if tt != t:
            print(f"  requested t={t} > pool={pool}; using t={tt}")
        wall = time_run(circ, "numba", threads=tt)
        speedup = t1 / wall if wall > 0 else float("nan")
        write_row(out_path, _row(n, cols, "numba", tt, circ, wall))
        print(f"  t={tt}  wall={wall:.2f} ms  speedup={speedup:.2f}×")
    print("✓ done.\n")

# ---------------------------------------------------------------------
def build_parser():
    p = argparse.ArgumentParser(description="qcolsim benchmarks → data/<backend>/*.csv")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_qubits = sub.add_parser("qubits")
    p_qubits.add_argument("--ns", type=str, required=True)
    p_qubits.add_argument("--cols", type=int, default=100)
    p_qubits.add_argument("--backend", type=str, default="serial", choices=["serial","numba"])

    p_depth = sub.add_parser("depth")
    p_depth.add_argument("--n", type=int, default=10)
    p_depth.add_argument("--depths", type=str, default="10,50,100,300")
    p_depth.add_argument("--backend", type=str, default="serial", choices=["serial","numba"])

    p_threads = sub.add_parser("threads")
    p_threads.add_argument("--n", type=int, default=16)
    p_threads.add_argument("--cols", type=int, default=50)
    p_threads.add_argument("--threads", type=str, default="1,2,4,8")
    # threads always use numba backend
    p_threads.add_argument("--backend", type=str, default="numba", choices=["numba"])
    return p

def main(argv=None):
    args = build_parser().parse_args(argv)
    base = backend_dir(args.backend)

    if args.cmd == "qubits":
        ns = [int(x) for x in args.ns.split(",")]
        bench_qubits(ns, args.cols, args.backend, os.path.join(base, "qubits.csv"))

    elif args.cmd == "depth":
        ds = [int(x) for x in args.depths.split(",")]
        bench_depth(args.n, ds, args.backend, os.path.join(base, "depth.csv"))

    elif args.cmd == "threads":
        ts = [int(x) for x in args.threads.split(",")]
        bench_threads(args.n, args.cols, ts, os.path.join(base, "threads.csv"))

if __name__ == "__main__":
    main()
