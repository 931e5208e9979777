from __future__ import annotations

import argparse
import csv
import json
import sys
import time
from pathlib import Path
from statistics import mean, pstdev


def _fmt_mu_sigma(vals):
    if not vals:
        return "n/a"
    mu = mean(vals)
    sd = pstdev(vals) if len(vals) > 1 else 0.0
    return f"{mu:.1f} ± {sd:.1f}"


def main():
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

    import numpy as np

    from nlayernet.core.activations import Sigmoid
    from nlayernet.core.types import Topology
    from nlayernet.core.weights import WeightStore
    from nlayernet.data.truth_table import Dataset
    from nlayernet.training.trainer import Trainer

    ap = argparse.ArgumentParser(description="XOR convergence rate over random initialisations")
    ap.add_argument("--seeds", nargs="+", type=int, default=list(range(20)))
    ap.add_argument("--layers", nargs="+", type=int, default=[2, 2, 1])
    ap.add_argument("--lr", type=float, default=0.3)
    ap.add_argument("--threshold", type=float, default=0.0002)
    ap.add_argument("--max-iterations", type=int, default=100000)
    ap.add_argument("--low", type=float, default=-1.5)
    ap.add_argument("--high", type=float, default=1.5)
    ap.add_argument("--out", type=str, default=".artifacts/xor")
    args = ap.parse_args()

    topology = Topology.of(args.layers)
    dataset = Dataset.from_pairs(
        [([0, 0], [0]), ([0, 1], [1]), ([1, 0], [1]), ([1, 1], [0])]
    )

    out = Path(args.out)
    out.mkdir(parents=True, exist_ok=True)
    runs = []
    for seed in args.seeds:
        weights = WeightStore.random(
            topology, args.low, args.high, np.random.default_rng(seed)
        )
        trainer = Trainer(
            weights,
            Sigmoid(),
            lr=args.lr,
            error_threshold=args.threshold,
            max_iterations=args.max_iterations,
        )
        started = time.perf_counter()
        result = trainer.train(dataset)
        runs.append(
            {
                "seed": seed,
                "iterations": result.iterations,
                "average_error": result.average_error,
                "stop_reason": result.stop_reason,
                "seconds": time.perf_counter() - started,
            }
        )
        print(json.dumps(runs[-1]))
    (out / "results.jsonl").write_text(
        "\n".join(json.dumps(x) for x in runs), encoding="utf-8"
    )

    converged = [r for r in runs if r["stop_reason"] == "converged"]
    rate = len(converged) / len(runs) if runs else 0.0
    csv_path = out / "xor_convergence.csv"
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["topology", "seeds", "converged", "rate", "iterations_mu_sd"])
        w.writerow(
            [
                str(topology),
                len(runs),
                len(converged),
                f"{rate:.3f}",
                _fmt_mu_sigma([r["iterations"] for r in converged]),
            ]
        )
    print(f"Converged {len(converged)}/{len(runs)} ({rate:.1%})")
    print("Wrote:", csv_path)


if __name__ == "__main__":
    main()
