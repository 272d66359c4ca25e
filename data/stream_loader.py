"""
stream_loader.py
────────────────
Batch-by-batch CSV reader that simulates a live numeric stream.

Why this exists
───────────────
pandas.read_csv() loads an entire file into memory at once.  In a real
streaming system the data arrives a batch at a time and never all at
once.  This module wraps pandas' chunked reader to honour that contract:
it yields one 1-D numpy batch per iteration, keeping memory usage
constant regardless of file size.

Pipeline position
─────────────────
    CSV on disk  →  BatchStreamLoader  →  np.ndarray batch  →  OnlineOptimizer
                                                                 ├── fit (first batch)
                                                                 └── incremental_fit (rest)

Design decisions
────────────────
* batch_size defaults to 100.  The final batch may be shorter.
* Only one column is read; every other column in the file is ignored.
* The generator is re-entrant: call stream() multiple times on the same
  loader and it restarts from the top of the file each time.
"""

from pathlib import Path
from typing import Generator

import numpy as np
import pandas as pd

from data.generate_sample_data import VALUE_COLUMN


class BatchStreamLoader:
    """Iterate over one CSV column in fixed-size batches.

    Parameters
    ----------
    filepath : str | Path
        Path to the CSV file.  Must exist.
    column : str, default='value'
        Name of the numeric column to stream.
    batch_size : int, default=100
        Number of rows per yielded batch.
    """

    def __init__(
        self,
        filepath: str | Path,
        column: str = VALUE_COLUMN,
        batch_size: int = 100,
    ):
        self.filepath   = Path(filepath)
        self.column     = column
        self.batch_size = batch_size

        if batch_size < 1:
            raise ValueError("batch_size must be ≥ 1.")

        # ── validate file exists ──────────────────────────────────────────
        if not self.filepath.exists():
            raise FileNotFoundError(f"CSV not found: {self.filepath}")

        # ── peek at the header to validate the column ─────────────────────
        header = pd.read_csv(self.filepath, nrows=0).columns.tolist()
        if column not in header:
            raise ValueError(
                f"Column '{column}' not found in {self.filepath}. "
                f"Available columns: {header}"
            )

    # ── main generator ────────────────────────────────────────────────────

    def stream(self) -> Generator[np.ndarray, None, None]:
        """Yield batches of shape (≤ batch_size,) as float64 arrays.

        The generator re-reads the file from the top every time it is
        called, so you can iterate multiple times over the same loader.
        """
        reader = pd.read_csv(
            self.filepath,
            chunksize=self.batch_size,
            usecols=[self.column],
        )
        for chunk in reader:
            yield chunk[self.column].to_numpy(dtype=np.float64)

    def __iter__(self):
        return self.stream()

    # ── convenience: load everything (batch baseline) ─────────────────────

    def read_all(self) -> np.ndarray:
        """Return the whole column as one array."""
        df = pd.read_csv(self.filepath, usecols=[self.column])
        return df[self.column].to_numpy(dtype=np.float64)

    def count_rows(self) -> int:
        """Return total number of data rows (excludes header).

        Uses chunked reading so memory stays constant even for huge files.
        """
        total = 0
        for chunk in pd.read_csv(self.filepath, chunksize=10_000, usecols=[self.column]):
            total += len(chunk)
        return total

    def __repr__(self) -> str:
        return (
            f"BatchStreamLoader(file='{self.filepath.name}', "
            f"column='{self.column}', batch_size={self.batch_size})"
        )
