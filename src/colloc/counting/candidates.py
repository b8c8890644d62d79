"""Adjacent n-gram candidate tabulation."""

from __future__ import annotations

import multiprocessing as mp
from dataclasses import dataclass
from functools import cached_property
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from ..errors import ConfigurationError
from ..utils.logging import get_logger

logger = get_logger(__name__)

_MIN_PARALLEL_WINDOWS = 10_000


@dataclass(frozen=True)
class NgramCounts:
    """Unique n-gram keys in ascending lexicographic order with summed counts."""

    size: int
    keys: np.ndarray
    counts: np.ndarray

    def __len__(self) -> int:
        return int(self.counts.shape[0])

    @property
    def total(self) -> int:
        return int(self.counts.sum()) if len(self) else 0

    def get(self, key: Sequence[int], default: int = 0) -> int:
        return self._index.get(tuple(int(k) for k in key), default)

    def as_dict(self) -> dict[Tuple[int, ...], int]:
        return dict(self._index)

    @cached_property
    def _index(self) -> dict[Tuple[int, ...], int]:
        return {tuple(int(v) for v in row): int(c) for row, c in zip(self.keys.tolist(), self.counts.tolist())}

    @classmethod
    def empty(cls, size: int) -> "NgramCounts":
        return cls(size=size, keys=np.zeros((0, size), dtype=np.int64), counts=np.zeros(0, dtype=np.int64))


def as_stream(stream: Iterable[int]) -> np.ndarray:
    if not isinstance(stream, np.ndarray):
        stream = list(stream)
    arr = np.asarray(stream, dtype=np.int64).reshape(-1)
    if arr.size and int(arr.min()) < 0:
        raise ValueError("Token ids must be non-negative.")
    return arr


def ngram_windows(stream: np.ndarray, size: int) -> np.ndarray:
    """All adjacent windows of `size` ids, one row per start position."""
    if stream.shape[0] < size:
        return np.zeros((0, size), dtype=np.int64)
    return np.lib.stride_tricks.sliding_window_view(stream, size)


def aggregate(keys: np.ndarray, counts: np.ndarray, size: int) -> NgramCounts:
    """Collapse repeated keys into one row each, summing their counts."""
    if keys.shape[0] == 0:
        return NgramCounts.empty(size)
    uniq, inverse = np.unique(keys, axis=0, return_inverse=True)
    summed = np.bincount(inverse.reshape(-1), weights=counts, minlength=uniq.shape[0])
    return NgramCounts(size=size, keys=uniq.astype(np.int64), counts=np.rint(summed).astype(np.int64))


def merge_counts(parts: Iterable[NgramCounts], size: int) -> NgramCounts:
    """Concatenate partial tables and re-aggregate duplicate keys."""
    parts = [p for p in parts if len(p)]
    if not parts:
        return NgramCounts.empty(size)
    keys = np.concatenate([p.keys for p in parts], axis=0)
    counts = np.concatenate([p.counts for p in parts])
    return aggregate(keys, counts, size)


def resolve_features(features: Optional[Iterable[int]]) -> Optional[np.ndarray]:
    if features is None:
        return None
    return np.unique(np.asarray(list(features), dtype=np.int64))


def _count_chunk(args: Tuple[np.ndarray, int, Optional[np.ndarray], int]) -> NgramCounts:
    chunk, size, features, boundary = args
    windows = ngram_windows(chunk, size)
    if features is None:
        keep = ~np.any(windows == boundary, axis=1)
    else:
        keep = np.all(np.isin(windows, features), axis=1)
    kept = windows[keep]
    return aggregate(kept, np.ones(kept.shape[0], dtype=np.int64), size)


def _chunks(stream: np.ndarray, size: int, chunk_size: int) -> Iterable[np.ndarray]:
    # consecutive chunks overlap by size - 1 so that every window starts in exactly one chunk
    n_windows = stream.shape[0] - size + 1
    for start in range(0, n_windows, chunk_size):
        stop = min(start + chunk_size, n_windows)
        yield stream[start : stop + size - 1]


def count_ngrams(
    stream: Iterable[int],
    size: int,
    features: Optional[Iterable[int]] = None,
    boundary: int = 0,
    num_workers: int = 1,
    chunk_factor: int = 4,
    progress: bool = False,
) -> NgramCounts:
    """Count adjacent `size`-grams whose ids all belong to `features`.

    `features=None` allows every id except the boundary sentinel. An explicit
    feature set is applied as given, so a set containing the sentinel lets
    boundary-spanning candidates through; they are removed at ranking time.
    """
    if size < 1:
        raise ConfigurationError("Invalid ngram size.")
    arr = as_stream(stream)
    feats = resolve_features(features)
    n_windows = arr.shape[0] - size + 1
    if n_windows <= 0:
        return NgramCounts.empty(size)

    if num_workers <= 1 or n_windows < _MIN_PARALLEL_WINDOWS:
        result = _count_chunk((arr, size, feats, boundary))
    else:
        chunk_size = max(size, n_windows // (num_workers * max(chunk_factor, 1)) + 1)
        jobs = [(chunk, size, feats, boundary) for chunk in _chunks(arr, size, chunk_size)]
        logger.info("Counting %d-grams with %d workers over %d chunks", size, num_workers, len(jobs))
        ctx = mp.get_context()
        with ctx.Pool(processes=num_workers) as pool:
            results_iter = pool.imap_unordered(_count_chunk, jobs, chunksize=1)
            if progress:
                results_iter = tqdm(results_iter, total=len(jobs), desc=f"Counting {size}-grams", unit="chunks")
            parts = list(results_iter)
        result = merge_counts(parts, size)

    logger.info("Tabulated %d distinct %d-grams over %d instances", len(result), size, result.total)
    return result
