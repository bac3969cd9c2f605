# qcolsim/plot_results.py
import csv, os
from collections import defaultdict
from statistics import median
import matplotlib.pyplot as plt

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")

# ----------------------- per-column global state -----------------------

def plot_column_probabilities(snapshots, path, title="Global state", measurements=None):
    """One horizontal probability-bar panel per circuit column, labels with qubit 0 leftmost."""
    if not snapshots:
        return None
    cols = len(snapshots)
    labels = snapshots[0].basis_labels()
    fig, axes = plt.subplots(1, cols, figsize=(2.2 * cols, 0.35 * len(labels) + 1.2),
                             sharey=True, squeeze=False)
    for col, (ax, st) in enumerate(zip(axes[0], snapshots)):
        p = st.probabilities()
        total = p.sum()
        p = p / total if total > 0 else p
        ax.barh(range(len(labels)), p, color="#38bdf8")
        ax.set_xlim(0, 1)
        ax.set_title(f"c{col}", fontsize=9)
        ax.tick_params(axis="x", labelsize=7)
        if measurements:
            bits = [f"q{k.split(':')[0]}={b}" for k, b in measurements.items() if int(k.split(":")[1]) == col]
            if bits:
                ax.set_xlabel(" ".join(bits), fontsize=8)
    axes[0][0].invert_yaxis()
    axes[0][0].set_yticks(range(len(labels)))
    axes[0][0].set_yticklabels(labels, fontfamily="monospace", fontsize=8)
    fig.suptitle(title)
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)
    return path

# ----------------------------- bench CSVs -----------------------------

def load_rows(path):
    rows = []
    with open(path, "r") as f:
        r = csv.DictReader(f)
        for row in r:
            row["qubits"]  = int(row["qubits"])
            row["cols"]    = int(row["cols"])
            row["threads"] = int(row["threads"])
            row["wall_ms"] = float(row["wall_ms"])
            rows.append(row)
    return rows

def median_by_key(rows, key_fields):
    buckets = defaultdict(list)
    for r in rows:
        key = tuple(r[k] for k in key_fields)
        buckets[key].append(r["wall_ms"])
    agg = []
    for key, vals in buckets.items():
        out = dict(zip(key_fields, key))
        out["wall_ms"] = float(median(vals))
        agg.append(out)
    return agg

def _line_plot(points, xlabel, ylabel, title, out_path, log=False):
    plt.figure()
    for label, p in points.items():
        xs, ys = zip(*sorted(p))
        plt.plot(xs, ys, marker="o", label=label)
    plt.xlabel(xlabel)
    plt.ylabel(ylabel)
    plt.title(title)
    if log:
        plt.yscale("log")
    plt.grid(True, which="both", ls="--", lw=0.5)
    plt.legend()
    plt.tight_layout()
    plt.savefig(out_path, dpi=200)
    plt.close()

def plot_runtime_vs_qubits(rows, tag, out_dir):
    by_backend = defaultdict(list)
    for r in median_by_key(rows, ["backend", "qubits"]):
        by_backend[r["backend"]].append((r["qubits"], r["wall_ms"]))
    if by_backend:
        _line_plot(by_backend, "Qubits (n)", "Runtime (ms)", f"Runtime vs Qubits [{tag}]",
                   os.path.join(out_dir, f"runtime_vs_qubits_{tag}.png"), log=True)

def plot_runtime_vs_depth(rows, tag, out_dir):
    by_backend = defaultdict(list)
    for r in median_by_key(rows, ["backend", "cols"]):
        by_backend[r["backend"]].append((r["cols"], r["wall_ms"]))
    if by_backend:
        _line_plot(by_backend, "Columns", "Runtime (ms)", f"Runtime vs Columns [{tag}]",
                   os.path.join(out_dir, f"runtime_vs_depth_{tag}.png"))

def plot_speedup_vs_threads(rows, tag, out_dir):
    pts = sorted(median_by_key(rows, ["threads"]), key=lambda r: r["threads"])
    t1 = next((r["wall_ms"] for r in pts if r["threads"] == 1), None)
    if not t1:
        return
    _line_plot({"numba": [(r["threads"], t1 / r["wall_ms"]) for r in pts]},
               "Threads", "Speedup (T1/Tt)", f"Speedup vs Threads [{tag}]",
               os.path.join(out_dir, f"speedup_vs_threads_{tag}.png"))

def main(data_dir=DATA_DIR):
    csvs = []
    for root, _, files in os.walk(data_dir):
        for f in files:
            if f.endswith(".csv"):
                csvs.append(os.path.join(root, f))

    if not csvs:
        print("No CSV files found under data/")
        return

    for path in csvs:
        tag = os.path.splitext(os.path.basename(path))[0]
        backend = os.path.basename(os.path.dirname(path))
        try:
            rows = load_rows(path)
        except (OSError, KeyError, ValueError) as e:
            print(f"Skipping {path}: {e}")
            continue

        print(f"Plotting from {backend}/{tag}.csv ({len(rows)} rows)...")
        out_dir = os.path.dirname(path)
        if tag.startswith("qubits"):
            plot_runtime_vs_qubits(rows, backend, out_dir)
        elif tag.startswith("threads"):
            plot_speedup_vs_threads(rows, backend, out_dir)
        elif tag.startswith("depth"):
            plot_runtime_vs_depth(rows, backend, out_dir)

    print("\nSaved all plots under data/<backend>/*.png")

if __name__ == "__main__":
    main()
