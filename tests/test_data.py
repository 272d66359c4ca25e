import numpy as np
import pandas as pd
import pytest

from data.generate_sample_data import generate, generate_batch, generate_defaults
from data.stream_loader import BatchStreamLoader


def test_generate_batch_bounds_and_length(rng):
    batch = generate_batch(500, low=2.0, high=3.0, rng=rng)
    assert batch.shape == (500,)
    assert batch.min() >= 2.0 and batch.max() < 3.0
    assert generate_batch(0, rng=rng).size == 0
    with pytest.raises(ValueError):
        generate_batch(-1)


def test_generate_writes_csv_and_is_reproducible(tmp_path):
    path = tmp_path / "nested" / "stream.csv"
    df = generate(path, n_samples=100, seed=7)
    assert path.exists()
    assert list(df.columns) == ["value"]
    assert len(df) == 100

    again = generate(tmp_path / "again.csv", n_samples=100, seed=7)
    np.testing.assert_array_equal(df["value"].to_numpy(), again["value"].to_numpy())

    on_disk = pd.read_csv(path)
    np.testing.assert_allclose(on_disk["value"].to_numpy(), df["value"].to_numpy())


def test_generate_shift_and_offset(tmp_path):
    base    = generate(tmp_path / "a.csv", n_samples=10, seed=1)["value"].to_numpy()
    shifted = generate(tmp_path / "b.csv", n_samples=10, seed=1, shift=5.0)["value"].to_numpy()
    offset  = generate(tmp_path / "c.csv", n_samples=10, seed=1, offset=100.0)["value"].to_numpy()

    np.testing.assert_allclose(shifted[:5], base[:5])
    np.testing.assert_allclose(shifted[5:], base[5:] + 5.0)
    np.testing.assert_allclose(offset, base + 100.0)


@pytest.mark.parametrize("kwargs", [dict(n_samples=1), dict(low=5.0, high=5.0)])
def test_generate_validates(tmp_path, kwargs):
    with pytest.raises(ValueError):
        generate(tmp_path / "x.csv", **kwargs)


def test_generate_defaults(tmp_path):
    paths = generate_defaults(tmp_path)
    assert set(paths) == {"basic", "shifted", "offset"}
    assert all(p.exists() for p in paths.values())


def test_loader_yields_fixed_size_batches(tmp_path):
    path = tmp_path / "s.csv"
    df = generate(path, n_samples=250, seed=3)
    loader = BatchStreamLoader(path, batch_size=100)

    batches = list(loader.stream())
    assert [len(b) for b in batches] == [100, 100, 50]
    assert all(b.dtype == np.float64 for b in batches)
    np.testing.assert_allclose(np.concatenate(batches), df["value"].to_numpy())


def test_loader_is_reentrant(tmp_path):
    path = tmp_path / "s.csv"
    generate(path, n_samples=30, seed=3)
    loader = BatchStreamLoader(path, batch_size=7)
    first = np.concatenate(list(loader))
    second = np.concatenate(list(loader.stream()))
    np.testing.assert_array_equal(first, second)
    assert loader.count_rows() == 30
    np.testing.assert_array_equal(loader.read_all(), first)


def test_loader_reads_selected_column(tmp_path):
    path = tmp_path / "multi.csv"
    pd.DataFrame({"a": [1.0, 2.0, 3.0], "b": [10.0, 20.0, 30.0]}).to_csv(path, index=False)
    loader = BatchStreamLoader(path, column="b", batch_size=2)
    np.testing.assert_array_equal(np.concatenate(list(loader)), [10.0, 20.0, 30.0])


def test_loader_validation(tmp_path):
    with pytest.raises(FileNotFoundError):
        BatchStreamLoader(tmp_path / "missing.csv")

    path = tmp_path / "s.csv"
    generate(path, n_samples=10)
    with pytest.raises(ValueError):
        BatchStreamLoader(path, column="nope")
    with pytest.raises(ValueError):
        BatchStreamLoader(path, batch_size=0)


def test_loader_repr(tmp_path):
    path = tmp_path / "s.csv"
    generate(path, n_samples=10)
    assert repr(BatchStreamLoader(path, batch_size=5)) == (
        "BatchStreamLoader(file='s.csv', column='value', batch_size=5)"
    )
