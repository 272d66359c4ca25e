"""
batch_vs_online.py
──────────────────
Runs the streaming estimator and a one-shot batch computation on the same
data and returns comparable results.

Why two separate runs on the same data?
────────────────────────────────────────
    Batch  – sees ALL values at once and computes mean / std directly
             (numpy, plus scikit-learn's StandardScaler as an independent
             reference for the population case).  This is the exact
             answer the stream should converge to.

    Online – sees the values one batch at a time through
             OnlineOptimizer.fit / incremental_fit.  We record the running
             estimate after every batch, plus the mean of each batch
             before and after scaling with the scaler available at that
             point, so the driver can plot convergence.

What this module returns
────────────────────────
A single dict with two top-level keys:

    results["batch"]  – dict with the exact statistics
    results["online"] – dict with per-batch histories

Like every module outside drivers/, this one does NO plotting.
"""

from pathlib import Path
from typing import Iterable

import numpy as np
from sklearn.preprocessing import StandardScaler as SklearnScaler

from core.logging_utils import get_logger
from core.online_optimizer import OnlineOptimizer
from core.pipeline import fold_batches
from core.scaler_config import ScalerConfig
from data.stream_loader import BatchStreamLoader

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Batch runner
# ─────────────────────────────────────────────────────────────────────────────

def run_batch(values: np.ndarray, ddof: float = 1.0) -> dict:
    """Exact mean / std over all values.

    Parameters
    ----------
    values : np.ndarray, shape (n_samples,)
    ddof   : float – delta degrees of freedom for the std

    Returns
    -------
    dict with keys:
        n_samples, mean, standard_deviation  – direct numpy computation
        sklearn_mean, sklearn_std            – scikit-learn StandardScaler
                                               (population std, i.e. ddof=0)
    """
    values = np.asarray(values, dtype=np.float64).ravel()

    sk = SklearnScaler().fit(values.reshape(-1, 1))

    return dict(
        n_samples          = int(values.size),
        mean               = float(np.mean(values)),
        standard_deviation = float(np.std(values, ddof=ddof)),
        sklearn_mean       = float(sk.mean_[0]),
        sklearn_std        = float(sk.scale_[0]),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Online runner
# ─────────────────────────────────────────────────────────────────────────────

def run_online(batches: Iterable, config: ScalerConfig | None = None) -> dict:
    """Fold batches through an OnlineOptimizer, recording every step.

    Parameters
    ----------
    batches : iterable of array-like
        The stream.  Order matters.  Empty batches are recorded as no-ops.
        Leading batches too short to fit on their own are held back and
        fitted together; no entry is recorded for them until that fit.
    config  : ScalerConfig | None
        Fitting configuration (default ddof = 1).

    Returns
    -------
    dict with keys:
        optimizer, scaler – final state
        histories – dict of lists, one entry per batch:
            step, n_samples, mean, standard_deviation,
            batch_mean_before, batch_mean_after
    """
    optimizer = OnlineOptimizer()
    scaler    = None

    hist = {
        "step":               [],
        "n_samples":          [],
        "mean":               [],
        "standard_deviation": [],
        "batch_mean_before":  [],
        "batch_mean_after":   [],
    }

    if config is None:
        config = ScalerConfig.default()

    for step, batch, fitted in fold_batches(optimizer, config, batches):
        if fitted is None:
            continue
        scaler = fitted
        batch  = np.asarray(batch, dtype=np.float64).ravel()

        hist["step"].append(step)
        hist["n_samples"].append(optimizer.n_samples)
        hist["mean"].append(scaler.mean)
        hist["standard_deviation"].append(scaler.standard_deviation)

        if batch.size and not scaler.is_degenerate:
            hist["batch_mean_before"].append(float(np.mean(batch)))
            hist["batch_mean_after"].append(float(np.mean(scaler.transform(batch))))
        else:
            hist["batch_mean_before"].append(float("nan"))
            hist["batch_mean_after"].append(float("nan"))

    logger.info("online pass: %d batches, final %r", len(hist["step"]), scaler)

    return dict(
        optimizer=optimizer,
        scaler=scaler,
        histories=hist,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Top-level: run both and package into one results dict
# ─────────────────────────────────────────────────────────────────────────────

def compare(
    csv_path: str | Path,
    batch_size: int = 100,
    ddof: float = 1.0,
    column: str = "value",
) -> dict:
    """Load a CSV, run batch and online on it, return unified results.

    Parameters
    ----------
    csv_path   – path to a CSV generated by generate_sample_data
    batch_size – rows per streamed batch
    ddof       – delta degrees of freedom for both runs
    column     – which column to read

    Returns
    -------
    dict with keys:
        "batch"    – output of run_batch()
        "online"   – output of run_online()
        "csv_path" – the input path (for labelling plots later)
        "ddof", "batch_size"
    """
    loader = BatchStreamLoader(csv_path, column=column, batch_size=batch_size)

    batch_results  = run_batch(loader.read_all(), ddof=ddof)
    online_results = run_online(loader.stream(), ScalerConfig(ddof=ddof))

    return dict(
        batch=batch_results,
        online=online_results,
        csv_path=str(loader.filepath),
        ddof=ddof,
        batch_size=batch_size,
    )
