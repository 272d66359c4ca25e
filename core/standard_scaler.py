"""
standard_scaler.py
──────────────────
The fitted state of a streaming standardiser, and the transform that
applies it.

Transform
─────────
    x_scaled = (x - mean) / standard_deviation

There is no epsilon in the denominator: a zero (or NaN) standard
deviation is refused with a DegenerateScaleError instead of silently
producing inf / huge values.

Design notes
────────────
* StandardScaler is a NamedTuple: immutable, hashable, cheap to copy.
  Every fit / update returns a NEW value, so an old scaler remains a
  valid snapshot and can keep transforming while the stream moves on.
* ``n_samples`` travels with the statistics.  OnlineOptimizer reads it
  back on the next update, so the count can never be paired with the
  wrong mean/std.  0 means "count unknown" (e.g. hand-built in a test).
* transform() never touches the optimizer and never mutates anything,
  so it is safe to call from many threads against the same snapshot.
"""

from typing import NamedTuple

import numpy as np

from core.errors import DegenerateScaleError, ScalingError


def as_batch(inputs) -> np.ndarray:
    """Coerce any array-like into a flat float64 batch.

    Raises
    ------
    ScalingError
        If the batch contains NaN or ±inf.
    """
    batch = np.asarray(inputs, dtype=np.float64).ravel()
    if batch.size and not np.all(np.isfinite(batch)):
        raise ScalingError("Batch contains NaN or infinite values.")
    return batch


class StandardScaler(NamedTuple):
    """Running mean / std estimate that rescales data to zero mean, unit variance.

    Produced by OnlineOptimizer.fit / OnlineOptimizer.incremental_fit.

    Attributes
    ----------
    ddof               : float — delta degrees of freedom used for the std
    mean               : float — estimated mean
    standard_deviation : float — estimated (ddof-adjusted) std
    n_samples          : int   — samples absorbed into the estimate (0 = unknown)
    """
    ddof               : float
    mean               : float
    standard_deviation : float
    n_samples          : int = 0

    @property
    def variance(self) -> float:
        return self.standard_deviation ** 2

    @property
    def is_degenerate(self) -> bool:
        """True when transform() would refuse to run."""
        std = self.standard_deviation
        return (not np.isfinite(std)) or std == 0.0

    def transform(self, inputs) -> np.ndarray:
        """Standardise a batch with the stored statistics.

        Parameters
        ----------
        inputs : array-like of shape (n,)
            Any batch, including one never seen during fitting.  May be
            empty, in which case an empty array is returned.

        Returns
        -------
        np.ndarray of shape (n,)

        Raises
        ------
        DegenerateScaleError
            If the standard deviation is zero or not finite.
        """
        if self.is_degenerate:
            raise DegenerateScaleError(
                f"Cannot standardise with standard_deviation={self.standard_deviation!r}."
            )
        batch = as_batch(inputs)
        return (batch - self.mean) / self.standard_deviation

    def inverse_transform(self, scaled) -> np.ndarray:
        """Map standardised values back to the original scale."""
        scaled = as_batch(scaled)
        return scaled * self.standard_deviation + self.mean

    def __repr__(self) -> str:
        return (
            f"StandardScaler(mean={self.mean:.6g}, "
            f"std={self.standard_deviation:.6g}, "
            f"ddof={self.ddof}, n_samples={self.n_samples})"
        )
