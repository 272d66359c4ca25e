"""
online_optimizer.py
───────────────────
Batch-incremental estimation of mean and standard deviation.

Why this exists
───────────────
A StandardScaler needs the mean and std of *all* the data seen so far.
In a stream the data arrives in batches and is never available at once,
so we keep only the sufficient statistics (n, mean, std) and merge every
new batch into them.  Each batch is processed in one vectorised pass and
the raw history is never revisited.

Parallel variance algorithm (Chan, Golub & LeVeque)
────────────────────────────────────────────────────
Reduce each side to (n, mean, M2) where M2 is the sum of squared
deviations from its own mean.  For a fitted scaler

    M2_a = std_a² · (n_a - ddof)

and for a raw batch M2_b = Σ (x - mean_b)², computed directly.  Then

    n     = n_a + n_b
    δ     = mean_b - mean_a
    mean  = mean_a + δ · n_b / n
    M2    = M2_a + M2_b + δ² · n_a · n_b / n
    std   = sqrt( M2 / (n - ddof) )

This is exact for non-overlapping batches: merging A then B gives the
same answer (to rounding) as fitting on A ++ B, whatever the split.

Lifecycle of the count
──────────────────────
    OnlineOptimizer()          n_samples = 0
    .fit(batch)                n_samples = len(batch)        (reset)
    .incremental_fit(batch)    n_samples += len(batch)       (merge)
    any failure                n_samples unchanged
    empty batch in update      n_samples unchanged, scaler returned as-is

The count is also stored on every StandardScaler produced, and
incremental_fit trusts the scaler's copy.  The optimizer's own counter is
the fallback for hand-built scalers that carry n_samples = 0.

Concurrency
───────────
No locking: fit / incremental_fit on one instance must be serialised by
the caller.  The returned StandardScaler values are immutable.
"""

from typing import Iterable, Tuple

import numpy as np

from core.errors import DegenerateScaleError, EmptyInputError, ScalingError
from core.logging_utils import get_logger
from core.pipeline import fit_batches
from core.scaler_config import ScalerConfig
from core.standard_scaler import StandardScaler, as_batch

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Moment helpers — (n, mean, M2) triples
# ─────────────────────────────────────────────────────────────────────────────

def _batch_moments(batch: np.ndarray) -> Tuple[int, float, float]:
    """(n, mean, M2) of a raw, non-empty batch (two-pass, no cancellation)."""
    n    = int(batch.size)
    mean = float(np.mean(batch))
    m2   = float(np.sum((batch - mean) ** 2))
    return n, mean, m2


def _scaler_moments(scaler: StandardScaler, n_samples: int) -> Tuple[int, float, float]:
    """(n, mean, M2) recovered from a fitted scaler; empty when n_samples is 0."""
    if n_samples == 0:
        return 0, 0.0, 0.0
    m2 = scaler.standard_deviation ** 2 * (n_samples - scaler.ddof)
    return n_samples, float(scaler.mean), float(m2)


def _merge_moments(
    left: Tuple[int, float, float],
    right: Tuple[int, float, float],
) -> Tuple[int, float, float]:
    n_a, mean_a, m2_a = left
    n_b, mean_b, m2_b = right

    n     = n_a + n_b
    delta = mean_b - mean_a
    mean  = mean_a + delta * n_b / n
    m2    = m2_a + m2_b + delta ** 2 * n_a * n_b / n
    return n, mean, m2


def _to_scaler(moments: Tuple[int, float, float], ddof: float) -> StandardScaler:
    """Turn (n, mean, M2) into a StandardScaler, refusing n ≤ ddof."""
    n, mean, m2 = moments
    if n - ddof <= 0:
        raise DegenerateScaleError(
            f"Need more than ddof={ddof} samples to estimate the standard "
            f"deviation, got {n}."
        )
    # M2 can dip a hair below zero through rounding when all values are equal
    variance = max(m2, 0.0) / (n - ddof)
    return StandardScaler(
        ddof=ddof,
        mean=mean,
        standard_deviation=float(np.sqrt(variance)),
        n_samples=n,
    )


def combine(left: StandardScaler, right: StandardScaler) -> StandardScaler:
    """Merge two scalers fitted on disjoint data into one.

    Both must carry their ``n_samples`` and share the same ``ddof``.  A
    side with ``n_samples == 0`` contributes nothing and the other side is
    returned unchanged.

    Raises
    ------
    ScalingError
        If the two scalers were fitted with different ddof.
    """
    if left.ddof != right.ddof:
        raise ScalingError(
            f"Cannot combine scalers with different ddof ({left.ddof} vs {right.ddof})."
        )
    if right.n_samples == 0:
        return left
    if left.n_samples == 0:
        return right

    merged = _merge_moments(
        _scaler_moments(left, left.n_samples),
        _scaler_moments(right, right.n_samples),
    )
    return _to_scaler(merged, left.ddof)


# ─────────────────────────────────────────────────────────────────────────────
# Main class
# ─────────────────────────────────────────────────────────────────────────────

class OnlineOptimizer:
    """Fits StandardScalers and updates them batch by batch.

    Attributes
    ----------
    n_samples : int
        Total number of samples absorbed since the last fit().  0 until
        the first successful fit.
    """

    def __init__(self):
        self.n_samples: int = 0

    # ── one-shot fit (reset) ──────────────────────────────────────────────

    def fit(self, inputs, config: ScalerConfig | None = None) -> StandardScaler:
        """Fit a fresh scaler on the first batch of a stream.

        Overwrites any previous count: fit() starts a new stream, it does
        not merge into the old one.

        Parameters
        ----------
        inputs : array-like of shape (n,)
            Non-empty batch.
        config : ScalerConfig | None
            Fitting configuration; ``ScalerConfig.default()`` when None.

        Returns
        -------
        StandardScaler

        Raises
        ------
        EmptyInputError
            If the batch has no samples.
        DegenerateScaleError
            If the batch has ``n ≤ ddof`` samples.
        ScalingError
            If the batch contains NaN or infinite values.
        """
        if config is None:
            config = ScalerConfig.default()

        batch = as_batch(inputs)
        if batch.size == 0:
            raise EmptyInputError()

        scaler = _to_scaler(_batch_moments(batch), float(config.ddof))

        self.n_samples = scaler.n_samples
        logger.debug("fit: %r", scaler)
        return scaler

    # ── incremental update (merge) ────────────────────────────────────────

    def incremental_fit(self, inputs, scaler: StandardScaler) -> StandardScaler:
        """Merge a new batch into the statistics of ``scaler``.

        Parameters
        ----------
        inputs : array-like of shape (n,)
            New batch.  May be empty, in which case ``scaler`` is returned
            unchanged and the count is left alone.
        scaler : StandardScaler
            The latest scaler of this stream.

        Returns
        -------
        StandardScaler
            A new value; ``scaler`` itself is not modified.

        Raises
        ------
        DegenerateScaleError
            If the combined count does not exceed ddof.
        ScalingError
            If the batch contains NaN or infinite values.
        """
        batch = as_batch(inputs)
        if batch.size == 0:
            return scaler

        n_seen = self._resolve_count(scaler)
        merged = _merge_moments(
            _scaler_moments(scaler, n_seen),
            _batch_moments(batch),
        )
        updated = _to_scaler(merged, scaler.ddof)

        self.n_samples = updated.n_samples
        logger.debug("incremental_fit: +%d samples → %r", batch.size, updated)
        return updated

    update = incremental_fit

    # ── convenience: whole stream ─────────────────────────────────────────

    def fit_stream(
        self,
        batches: Iterable,
        config: ScalerConfig | None = None,
    ) -> StandardScaler:
        """fit() on the first non-empty batch, incremental_fit() on the rest."""
        return fit_batches(self, config, batches)

    # ── helpers ───────────────────────────────────────────────────────────

    def _resolve_count(self, scaler: StandardScaler) -> int:
        """Number of samples already summarised by ``scaler``."""
        if scaler.n_samples == 0:
            return self.n_samples
        if self.n_samples and scaler.n_samples != self.n_samples:
            logger.warning(
                "Scaler reports n_samples=%d but this optimizer has seen %d; "
                "using the scaler's count.",
                scaler.n_samples, self.n_samples,
            )
        return scaler.n_samples

    def __repr__(self) -> str:
        return f"OnlineOptimizer(n_samples={self.n_samples})"
