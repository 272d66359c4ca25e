"""
scaler_config.py
────────────────
Hyper-parameters for fitting a StandardScaler.

There is only one knob: ``ddof`` (delta degrees of freedom), the
adjustment applied to the variance divisor.

    ddof = 1   →  sample std      (divide by n - 1)   ← default
    ddof = 0   →  population std  (divide by n)

No validation happens here.  A ddof that is too large for the data is
reported by OnlineOptimizer as a DegenerateScaleError at fit time.
"""

from typing import NamedTuple


class ScalerConfig(NamedTuple):
    """Immutable fitting configuration (the "blueprint" of a StandardScaler).

    Attributes
    ----------
    ddof : float — delta degrees of freedom used for the std estimate
    """
    ddof: float = 1.0

    @classmethod
    def default(cls) -> "ScalerConfig":
        """Sample standard deviation (ddof = 1)."""
        return cls()

    @classmethod
    def population(cls) -> "ScalerConfig":
        """Population standard deviation (ddof = 0)."""
        return cls(ddof=0.0)
