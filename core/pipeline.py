"""
pipeline.py
───────────
The fit → transform contract that external code drives a scaler through.

State machine
─────────────
    Blueprint ──fit──▶ Model ──transform──▶ Output
                        │  ▲
                        └──┘ incremental_fit   (absorb another batch)

Any algorithm with a configuration type, a fitted-model type, a one-shot
fit, an optional incremental fit and a side-effect-free transform fits
this shape.  The protocols below are structural (typing.Protocol): the
concrete classes in this package never inherit from them, they just
provide the right methods.

    ScalerConfig      satisfies  Blueprint
    OnlineOptimizer   satisfies  Fit + IncrementalFit
    StandardScaler    satisfies  Transformer
"""

from typing import Iterable, Iterator, Protocol, TypeVar, runtime_checkable

import numpy as np

from core.errors import DegenerateScaleError, EmptyInputError

BatchT     = TypeVar("BatchT", contravariant=True)
OutputT    = TypeVar("OutputT", covariant=True)
BlueprintT = TypeVar("BlueprintT", contravariant=True)
ModelT     = TypeVar("ModelT")


@runtime_checkable
class Blueprint(Protocol):
    """Immutable hyper-parameters with a sensible default."""

    @classmethod
    def default(cls): ...


@runtime_checkable
class Transformer(Protocol[BatchT, OutputT]):
    """Fitted model: Model × Batch → Output, no side effects."""

    def transform(self, inputs: BatchT) -> OutputT: ...


@runtime_checkable
class Fit(Protocol[BlueprintT, BatchT, ModelT]):
    """Blueprint × Batch → Model (resets any running state)."""

    def fit(self, inputs: BatchT, config: BlueprintT) -> ModelT: ...


@runtime_checkable
class IncrementalFit(Protocol[BatchT, ModelT]):
    """Model × Batch → Model (absorbs one more batch)."""

    def incremental_fit(self, inputs: BatchT, scaler: ModelT) -> ModelT: ...


# ─────────────────────────────────────────────────────────────────────────────
# Generic drivers over the protocols
# ─────────────────────────────────────────────────────────────────────────────

def fold_batches(fitter, config, batches: Iterable) -> Iterator[tuple]:
    """Walk a stream, yielding ``(step, batch, model)`` after every batch.

    Leading batches are held back until together they can be fitted:
    a fit on ``n ≤ ddof`` samples raises DegenerateScaleError, so short
    batches are concatenated and retried with the next one.  While that
    happens ``model`` is None.  From then on every batch goes through
    ``fitter.incremental_fit``.  ``step`` counts from 1 and includes
    empty batches.

    Raises
    ------
    DegenerateScaleError
        If the stream ends before enough samples arrived to fit.
    """
    model   = None
    pending = []
    error   = None

    for step, batch in enumerate(batches, start=1):
        if model is not None:
            model = fitter.incremental_fit(batch, model)
            yield step, batch, model
            continue

        if np.size(batch) == 0:
            yield step, batch, None
            continue

        pending.append(np.ravel(batch))
        try:
            model = fitter.fit(np.concatenate(pending), config)
        except DegenerateScaleError as exc:
            error = exc
            yield step, batch, None
            continue

        pending, error = [], None
        yield step, batch, model

    if error is not None:
        raise error


def fit_batches(fitter, config, batches: Iterable):
    """Fold a stream of batches into one model.

    See fold_batches() for how the first fit is chosen.

    Raises
    ------
    EmptyInputError
        If no batch contained any sample.
    DegenerateScaleError
        If the whole stream holds too few samples for the ddof.
    """
    model = None
    for _, _, model in fold_batches(fitter, config, batches):
        pass
    if model is None:
        raise EmptyInputError("Stream contained no samples.")
    return model


def fit_transform(fitter, config, inputs):
    """fit() then transform() on the same batch. Returns (model, output)."""
    model = fitter.fit(inputs, config)
    return model, model.transform(inputs)
