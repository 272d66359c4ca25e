"""
errors.py
─────────
Exception hierarchy for the standardisation engine.

    ScalingError              – base class, also a ValueError
    ├── EmptyInputError       – fit() was handed a zero-length batch
    └── DegenerateScaleError  – the scale is zero / undefined, so
                                standardising would divide by zero or
                                produce NaN

Every failure leaves the OnlineOptimizer's sample count untouched.
"""


class ScalingError(ValueError):
    """Base class for every error raised by the scaler, optimizer and pipeline."""


class EmptyInputError(ScalingError):
    """Raised when a fit is attempted on a batch with no samples."""

    def __init__(self, message: str = "Cannot fit a scaler on an empty batch."):
        super().__init__(message)


class DegenerateScaleError(ScalingError):
    """Raised when the standard deviation is zero, NaN, or cannot be estimated.

    Typical causes
    --------------
    * every sample seen so far has the same value  → std == 0
    * fewer samples than ``ddof + 1``              → n - ddof ≤ 0
    """
