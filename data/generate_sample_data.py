"""
generate_sample_data.py
───────────────────────
Synthetic numeric streams for the standardisation pipeline.

What it generates
─────────────────
A one-column CSV:

    value
    3.71
    8.02
    ...

where each row is one sample that will later be streamed batch-by-batch
by stream_loader.py.

Design knobs
────────────
    n_samples  – total rows in the CSV
    low, high  – bounds of the uniform distribution the samples come from
    shift      – added to every sample in the second half of the file.
                 A non-zero shift moves the true mean mid-stream, so the
                 running estimate visibly lags and then catches up.
    offset     – added to every sample.  A large offset (e.g. 1e9) with a
                 small spread is the classic trap for naive
                 sum-of-squares variance formulas.
    seed       – full reproducibility
"""

import numpy as np
import pandas as pd
from pathlib import Path

VALUE_COLUMN = "value"


def generate_batch(
    n_samples: int,
    low: float = 0.0,
    high: float = 10.0,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Draw one batch of iid Uniform(low, high) samples.

    Parameters
    ----------
    n_samples : int
        Batch length.  0 is allowed and yields an empty batch.
    low, high : float
        Distribution bounds.
    rng : numpy Generator | None
        Source of randomness; a fresh unseeded one when None.

    Returns
    -------
    np.ndarray of shape (n_samples,)
    """
    if n_samples < 0:
        raise ValueError("n_samples must be ≥ 0.")
    if rng is None:
        rng = np.random.default_rng()
    return rng.uniform(low, high, size=n_samples)


def generate(
    filepath: str | Path,
    n_samples: int = 5000,
    low: float = 0.0,
    high: float = 10.0,
    shift: float = 0.0,
    offset: float = 0.0,
    seed: int = 42,
) -> pd.DataFrame:
    """Generate a synthetic stream CSV and return it as a DataFrame.

    Parameters
    ----------
    filepath : str | Path
        Where to write the CSV.  Parent directories are created if they
        do not exist.
    n_samples : int, default=5000
        Number of rows.
    low, high : float, default=0, 10
        Uniform distribution bounds.
    shift : float, default=0.0
        Added to the second half of the stream (mean shift at the midpoint).
    offset : float, default=0.0
        Added to every sample.
    seed : int, default=42
        Random seed.

    Returns
    -------
    df : pd.DataFrame
        The generated data (also written to *filepath*).

    Raises
    ------
    ValueError
        On invalid parameter combinations.
    """
    # ── validate ──────────────────────────────────────────────────────────
    if n_samples < 2:
        raise ValueError("n_samples must be ≥ 2.")
    if not high > low:
        raise ValueError("high must be > low.")

    rng    = np.random.default_rng(seed)
    values = generate_batch(n_samples, low, high, rng) + offset

    # ── mean shift at the midpoint ────────────────────────────────────────
    mid = n_samples // 2
    values[mid:] += shift

    df = pd.DataFrame({VALUE_COLUMN: values})

    # ── write CSV ─────────────────────────────────────────────────────────
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(filepath, index=False)

    return df


# ─────────────────────────────────────────────────────────────────────────────
# Convenience: generate the default sample CSVs used by the rest of the project
# ─────────────────────────────────────────────────────────────────────────────

def generate_defaults(data_dir: str | Path = "data/samples") -> dict[str, Path]:
    """Create the three standard CSVs the project uses out of the box.

    Returns a dict mapping short name → written path.

    Files
    -----
    basic.csv    – 5 000 rows, Uniform(0, 10)
    shifted.csv  – 5 000 rows, Uniform(0, 10), +5 mean shift at the midpoint
    offset.csv   – 5 000 rows, Uniform(0, 1) + 1e9 (cancellation stress test)
    """
    data_dir = Path(data_dir)
    paths = {}

    paths["basic"] = data_dir / "basic.csv"
    generate(paths["basic"], n_samples=5000, low=0.0, high=10.0, seed=42)

    paths["shifted"] = data_dir / "shifted.csv"
    generate(paths["shifted"], n_samples=5000, low=0.0, high=10.0, shift=5.0, seed=42)

    paths["offset"] = data_dir / "offset.csv"
    generate(paths["offset"], n_samples=5000, low=0.0, high=1.0, offset=1e9, seed=42)

    return paths


# ─────────────────────────────────────────────────────────────────────────────
# CLI entry-point
# ─────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    paths = generate_defaults()
    for name, path in paths.items():
        print(f"  wrote {name:>8} → {path}")
