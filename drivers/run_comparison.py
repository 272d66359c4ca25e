#!/usr/bin/env python3
"""
run_comparison.py
─────────────────
Driver script that runs the streaming estimator and the exact batch
computation on the same dataset, plots the results, and optionally saves
the comparison figure.

Usage
─────
    python -m drivers.run_comparison \\
        --csv data/samples/shifted.csv \\
        --batch-size 250 \\
        --ddof 1 \\
        --save-plots \\
        --output-dir plots/

What it does
────────────
1. Loads the specified CSV using batch_vs_online.compare()
2. Generates a multi-panel figure showing:
   - Running mean vs the exact mean
   - Running std vs the exact std
   - Absolute error of both estimates (log scale)
   - Mean of each batch before and after scaling
3. Prints a summary table comparing final statistics
4. Optionally saves the plot to disk

Once the whole file has been consumed the running estimate must equal
the batch answer up to floating-point rounding.
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.gridspec as gridspec
from matplotlib.ticker import MaxNLocator

from core.errors import ScalingError
from core.logging_utils import get_logger, set_level
from evaluation.batch_vs_online import compare

logger = get_logger(__name__)

ONLINE_COLOR = "#2E86AB"
BATCH_COLOR  = "#A23B72"


# ═════════════════════════════════════════════════════════════════════════
# PLOTTING FUNCTIONS
# ═════════════════════════════════════════════════════════════════════════

def plot_comparison(results: Dict[str, Any], save_path: Path | None = None) -> None:
    """Create the four-panel comparison plot.

    Parameters
    ----------
    results : dict
        The output of batch_vs_online.compare().
    save_path : Path | None
        If provided, save the figure to this path.  Otherwise, display interactively.
    """
    batch     = results["batch"]
    histories = results["online"]["histories"]
    csv_name  = Path(results["csv_path"]).name

    fig = plt.figure(figsize=(14, 9))
    fig.suptitle(
        f"Streaming vs Batch Standardisation — {csv_name} (ddof={results['ddof']})",
        fontsize=15,
        fontweight="bold",
        y=0.995,
    )
    gs = gridspec.GridSpec(2, 2, figure=fig, hspace=0.35, wspace=0.25,
                           top=0.92, bottom=0.07, left=0.07, right=0.98)

    n_seen   = np.array(histories["n_samples"])
    mean     = np.array(histories["mean"])
    std      = np.array(histories["standard_deviation"])
    before   = np.array(histories["batch_mean_before"])
    after    = np.array(histories["batch_mean_after"])

    # ── PLOT 1: Running mean ──────────────────────────────────────────────
    ax1 = fig.add_subplot(gs[0, 0])
    ax1.plot(n_seen, mean, label="Online (running)", color=ONLINE_COLOR, linewidth=1.5)
    ax1.axhline(batch["mean"], color=BATCH_COLOR, linestyle="--", linewidth=2, label="Batch (exact)")
    ax1.set_xlabel("Samples seen", fontsize=10)
    ax1.set_ylabel("Mean", fontsize=10)
    ax1.set_title("Running Mean", fontsize=11, fontweight="bold")
    ax1.legend(loc="best", fontsize=9)
    ax1.grid(alpha=0.3, linestyle=":")
    ax1.xaxis.set_major_locator(MaxNLocator(integer=True, nbins=6))

    # ── PLOT 2: Running std ───────────────────────────────────────────────
    ax2 = fig.add_subplot(gs[0, 1])
    ax2.plot(n_seen, std, label="Online (running)", color=ONLINE_COLOR, linewidth=1.5)
    ax2.axhline(batch["standard_deviation"], color=BATCH_COLOR, linestyle="--", linewidth=2,
                label="Batch (exact)")
    ax2.set_xlabel("Samples seen", fontsize=10)
    ax2.set_ylabel("Standard deviation", fontsize=10)
    ax2.set_title("Running Standard Deviation", fontsize=11, fontweight="bold")
    ax2.legend(loc="best", fontsize=9)
    ax2.grid(alpha=0.3, linestyle=":")
    ax2.xaxis.set_major_locator(MaxNLocator(integer=True, nbins=6))

    # ── PLOT 3: Absolute error (log) ──────────────────────────────────────
    ax3 = fig.add_subplot(gs[1, 0])
    tiny = np.finfo(np.float64).tiny
    ax3.plot(n_seen, np.abs(mean - batch["mean"]) + tiny, label="|mean error|",
             color=ONLINE_COLOR, linewidth=1.5)
    ax3.plot(n_seen, np.abs(std - batch["standard_deviation"]) + tiny, label="|std error|",
             color="#E63946", linewidth=1.5)
    ax3.set_yscale("log")
    ax3.set_xlabel("Samples seen", fontsize=10)
    ax3.set_ylabel("Absolute error vs batch", fontsize=10)
    ax3.set_title("Distance To The Exact Answer", fontsize=11, fontweight="bold")
    ax3.legend(loc="best", fontsize=9)
    ax3.grid(alpha=0.3, linestyle=":")
    ax3.xaxis.set_major_locator(MaxNLocator(integer=True, nbins=6))

    # ── PLOT 4: Batch means before / after scaling ────────────────────────
    ax4 = fig.add_subplot(gs[1, 1])
    ax4.plot(n_seen, before, label="before scaling", color="#F77F00", linewidth=1.2)
    ax4b = ax4.twinx()
    ax4b.plot(n_seen, after, label="after scaling", color=ONLINE_COLOR, linewidth=1.2)
    ax4b.axhline(0.0, color="grey", linestyle=":", linewidth=1)
    ax4.set_xlabel("Samples seen", fontsize=10)
    ax4.set_ylabel("Batch mean (raw)", fontsize=10)
    ax4b.set_ylabel("Batch mean (scaled)", fontsize=10)
    ax4.set_title("Batch Mean Before / After Scaling", fontsize=11, fontweight="bold")
    lines = list(ax4.get_lines()) + list(ax4b.get_lines())[:1]
    ax4.legend(lines, [ln.get_label() for ln in lines], loc="best", fontsize=9)
    ax4.grid(alpha=0.3, linestyle=":")
    ax4.xaxis.set_major_locator(MaxNLocator(integer=True, nbins=6))

    # ── Save or show ──────────────────────────────────────────────────────
    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches="tight")
        print(f"\n✓ Plot saved to: {save_path}")
    else:
        plt.show()

    plt.close(fig)


def print_summary_table(results: Dict[str, Any]) -> None:
    """Print a text-based summary table to the console.

    Parameters
    ----------
    results : dict
        The output of batch_vs_online.compare()
    """
    batch  = results["batch"]
    online = results["online"]
    scaler = online["scaler"]

    print("\n" + "=" * 70)
    print("COMPARISON SUMMARY")
    print("=" * 70)
    print(f"Dataset: {results['csv_path']}")
    print(f"Total samples processed: {online['optimizer'].n_samples}")
    print(f"Batches: {len(online['histories']['step'])} of up to {results['batch_size']} rows")
    print(f"ddof: {results['ddof']}")
    print("-" * 70)
    print(f"{'Statistic':<15} {'Batch (exact)':<22} {'Online (final)':<22} {'Delta':<10}")
    print("-" * 70)
    print(f"{'Mean':<15} {batch['mean']:<22.10g} {scaler.mean:<22.10g} "
          f"{scaler.mean - batch['mean']:+.3e}")
    print(f"{'Std':<15} {batch['standard_deviation']:<22.10g} {scaler.standard_deviation:<22.10g} "
          f"{scaler.standard_deviation - batch['standard_deviation']:+.3e}")
    print(f"{'sklearn std':<15} {batch['sklearn_std']:<22.10g} {'(ddof=0)':<22} {'':<10}")
    print("=" * 70)

    rel = abs(scaler.standard_deviation - batch["standard_deviation"]) / max(
        abs(batch["standard_deviation"]), np.finfo(np.float64).tiny
    )
    print("\nINTERPRETATION:")
    if rel < 1e-9:
        print("✓ Streaming estimate matches the batch answer to rounding error")
    else:
        print(f"✗ Streaming std differs from batch by {rel:.2e} (relative)")
    print()


# ═════════════════════════════════════════════════════════════════════════
# MAIN ENTRY POINT
# ═════════════════════════════════════════════════════════════════════════

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Compare streaming and batch standardisation statistics and plot them.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic usage (interactive plot)
  python -m drivers.run_comparison --csv data/samples/basic.csv

  # Mean shift halfway through, saved to file
  python -m drivers.run_comparison --csv data/samples/shifted.csv --save-plots

  # Population std, small batches
  python -m drivers.run_comparison --csv data/samples/offset.csv --ddof 0 --batch-size 10
        """
    )
    parser.add_argument(
        "--csv", type=str, required=True,
        help="Path to the input CSV file (generated by generate_sample_data.py)"
    )
    parser.add_argument(
        "--column", type=str, default="value",
        help="CSV column to stream (default: value)"
    )
    parser.add_argument(
        "--batch-size", type=int, default=100,
        help="Rows per streamed batch (default: 100)"
    )
    parser.add_argument(
        "--ddof", type=float, default=1.0,
        help="Delta degrees of freedom (default: 1)"
    )
    parser.add_argument(
        "--save-plots", action="store_true",
        help="Save plots to file instead of displaying interactively"
    )
    parser.add_argument(
        "--no-plots", action="store_true",
        help="Skip plotting entirely"
    )
    parser.add_argument(
        "--output-dir", type=str, default="plots",
        help="Directory to save plots (default: plots/)"
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        help="Logging level (default: INFO)"
    )
    args = parser.parse_args(argv)
    set_level(args.log_level, __name__)

    csv_path = Path(args.csv)
    if not csv_path.exists():
        print(f"ERROR: CSV file not found: {csv_path}", file=sys.stderr)
        return 1

    logger.info("comparing %s (batch_size=%d, ddof=%s)", csv_path, args.batch_size, args.ddof)
    try:
        results = compare(
            csv_path=csv_path,
            batch_size=args.batch_size,
            ddof=args.ddof,
            column=args.column,
        )
    except ScalingError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    print_summary_table(results)

    if args.no_plots:
        return 0

    if args.save_plots:
        output_dir = Path(args.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        save_path = output_dir / f"{csv_path.stem}_b{args.batch_size}_ddof{args.ddof:g}.png"
        plot_comparison(results, save_path=save_path)
    else:
        print("\nGenerating plots (close window to exit)...")
        plot_comparison(results, save_path=None)

    return 0


if __name__ == "__main__":
    sys.exit(main())
