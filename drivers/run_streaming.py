"""
run_streaming.py
────────────────
Streaming demo: batches flow through fit → transform → incremental_fit
and the effect of scaling is reported after every batch.

What happens when you run this
──────────────────────────────
    1.  Batches come either from a CSV (--csv, read with BatchStreamLoader)
        or, with no CSV, from Uniform(0, 10) random draws.
    2.  The first batch is fitted; every later batch is merged into the
        running estimate with incremental_fit.  Leading batches too short
        to fit alone (n ≤ ddof) are held back and fitted together.
    3.  Each batch is then transformed with the current scaler and its
        mean before / after scaling is printed.  After scaling it should
        sit close to 0.  While the data seen so far has zero spread the
        line says the scale is undefined instead.
    4.  In random mode every batch is kept, and at the end the whole
        stream is transformed at once: mean ≈ 0, std ≈ 1.

Usage
─────
    python -m drivers.run_streaming                         # random batches
    python -m drivers.run_streaming --csv data/samples/basic.csv --batch-size 250
    python -m drivers.run_streaming --ddof 0 --n-batches 10 --n-samples 50
    python -m drivers.run_streaming --help
"""

import argparse
import sys
import time
from pathlib import Path
from typing import Iterable

import numpy as np

from core.errors import ScalingError
from core.logging_utils import get_logger, set_level
from core.online_optimizer import OnlineOptimizer
from core.pipeline import fold_batches
from core.scaler_config import ScalerConfig
from core.standard_scaler import StandardScaler
from data.generate_sample_data import generate_batch
from data.stream_loader import BatchStreamLoader

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Reporting
# ─────────────────────────────────────────────────────────────────────────────

def check(scaler: StandardScaler, x: np.ndarray) -> tuple[float, float]:
    """Mean of *x* before and after scaling with *scaler*."""
    before = float(np.mean(x))
    after  = float(np.mean(scaler.transform(x)))
    return before, after


def _render_step(
    step: int,
    scaler: StandardScaler,
    before: float | None = None,
    after: float | None = None,
) -> str:
    line = (
        f"  batch {step:>5}   n={scaler.n_samples:<8} "
        f"mean={scaler.mean:>12.6f}  std={scaler.standard_deviation:>10.6f}   "
    )
    if before is None:
        return line + "scale undefined (zero spread so far)"
    return line + f"batch mean  before={before:>12.6f}  after={after:>+10.6f}"


# ─────────────────────────────────────────────────────────────────────────────
# Streaming loop
# ─────────────────────────────────────────────────────────────────────────────

def random_batches(n_batches: int, n_samples: int, seed: int | None = 42):
    """Yield *n_batches* Uniform(0, 10) batches of *n_samples* each."""
    rng = np.random.default_rng(seed)
    for _ in range(n_batches):
        yield generate_batch(n_samples, rng=rng)


def run_stream(
    batches: Iterable,
    config: ScalerConfig | None = None,
    print_every: int = 1,
    keep_history: bool = False,
) -> dict:
    """Execute the streaming loop and return a summary of what happened.

    Parameters
    ----------
    batches      – iterable of 1-D batches (the stream)
    config       – fitting configuration (default ddof = 1)
    print_every  – print a report line every N batches (0 = silent)
    keep_history – keep every batch so the whole stream can be checked
                   at the end

    Returns
    -------
    dict with keys: optimizer, scaler, n_batches, elapsed, and (when
    keep_history) whole_before, whole_after, whole_std_after
    """
    optimizer = OnlineOptimizer()
    scaler    = None
    seen      = []
    n_batches = 0

    start_time = time.time()

    if config is None:
        config = ScalerConfig.default()

    for n_batches, batch, fitted in fold_batches(optimizer, config, batches):
        batch = np.asarray(batch, dtype=np.float64).ravel()
        if keep_history and batch.size:
            seen.append(batch)
        if fitted is None:
            continue
        scaler = fitted

        if print_every and n_batches % print_every == 0 and batch.size:
            if scaler.is_degenerate:
                print(_render_step(n_batches, scaler), flush=True)
            else:
                before, after = check(scaler, batch)
                print(_render_step(n_batches, scaler, before, after), flush=True)

    elapsed = time.time() - start_time

    result = dict(
        optimizer=optimizer,
        scaler=scaler,
        n_batches=n_batches,
        elapsed=elapsed,
    )

    if keep_history and seen:
        whole = np.concatenate(seen)
        before, after = check(scaler, whole)
        result["whole_before"]    = before
        result["whole_after"]     = after
        result["whole_std_after"] = float(np.std(scaler.transform(whole), ddof=scaler.ddof))

    return result


# ─────────────────────────────────────────────────────────────────────────────
# CLI
# ─────────────────────────────────────────────────────────────────────────────

def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Stream batches through a running standard scaler."
    )
    parser.add_argument(
        "--csv", type=str, default=None,
        help="Path to CSV file.  If omitted, random Uniform(0, 10) batches are used."
    )
    parser.add_argument(
        "--column", type=str, default="value",
        help="CSV column to stream (default: value)."
    )
    parser.add_argument(
        "--batch-size", type=int, default=100,
        help="Rows per batch when reading a CSV (default: 100)."
    )
    parser.add_argument(
        "--n-batches", type=int, default=2,
        help="Number of random batches when no CSV is given (default: 2)."
    )
    parser.add_argument(
        "--n-samples", type=int, default=20,
        help="Samples per random batch (default: 20)."
    )
    parser.add_argument(
        "--ddof", type=float, default=1.0,
        help="Delta degrees of freedom: 1 = sample std, 0 = population std (default: 1)."
    )
    parser.add_argument(
        "--print-every", type=int, default=1,
        help="Print a report line every N batches; 0 disables (default: 1)."
    )
    parser.add_argument(
        "--seed", type=int, default=42,
        help="Random seed for generated batches (default: 42)."
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        help="Logging level (default: INFO)."
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    set_level(args.log_level, __name__)

    config = ScalerConfig(ddof=args.ddof)

    if args.csv is None:
        batches = random_batches(args.n_batches, args.n_samples, args.seed)
        keep_history = True
        logger.info("streaming %d random batches of %d samples", args.n_batches, args.n_samples)
    else:
        csv_path = Path(args.csv)
        if not csv_path.exists():
            print(f"  ERROR: file not found: {csv_path}", file=sys.stderr)
            return 1
        loader = BatchStreamLoader(csv_path, column=args.column, batch_size=args.batch_size)
        batches = loader.stream()
        keep_history = False
        logger.info("streaming %r", loader)

    try:
        result = run_stream(
            batches,
            config=config,
            print_every=args.print_every,
            keep_history=keep_history,
        )
    except ScalingError as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    scaler = result["scaler"]
    if scaler is None:
        print("  ERROR: the stream contained no samples.", file=sys.stderr)
        return 1

    print(f"\n  ── DONE ──  {result['n_batches']} batches in {result['elapsed']:.3f}s")
    print(f"  final estimate:  {scaler!r}")
    if "whole_before" in result:
        print(
            f"  whole stream:    mean before={result['whole_before']:.6f}  "
            f"after={result['whole_after']:+.6f}  std after={result['whole_std_after']:.6f}"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
