"""Expected cell counts under word independence.

Cells are indexed in the usual n11, n12, n21, n22 (or n111 .. n222) order:
bit j of the cell index, counted from the most significant end, is 0 when
word j is present and 1 when it is absent.
"""

from __future__ import annotations

import numpy as np


def cell_patterns(size: int) -> np.ndarray:
    """Presence matrix of shape (2**size, size); True where the word is present."""
    idx = np.arange(2 ** size)[:, None]
    shifts = np.arange(size - 1, -1, -1)[None, :]
    return ((idx >> shifts) & 1) == 0


def word_totals(observed: np.ndarray, size: int) -> np.ndarray:
    """Single-word totals per row: sum of the cells in which that word is present."""
    patterns = cell_patterns(size)
    return observed @ patterns.astype(observed.dtype)


def independence_expected(observed: np.ndarray, n_total: int, size: int) -> np.ndarray:
    """Expected cells when all `size` words are mutually independent.

    e = exp(sum_j log(t_j) - (size - 1) * log(N)) with t_j the word total or
    its complement N - t_j, which reduces to the 2x2 model for bigrams and
    to "Model 1" for trigrams.
    """
    if observed.shape[0] == 0:
        return np.zeros(observed.shape, dtype=np.float64)
    totals = word_totals(observed, size).astype(np.float64)
    n = float(n_total)
    with np.errstate(divide="ignore"):
        log_present = np.log(totals)
        log_absent = np.log(n - totals)
        log_n = np.log(n)
    patterns = cell_patterns(size)
    # (m, cells, size) selection of log(t_j) or log(N - t_j)
    logs = np.where(patterns[None, :, :], log_present[:, None, :], log_absent[:, None, :])
    return np.exp(logs.sum(axis=2) - (size - 1) * log_n)


def expected_bigram(observed: np.ndarray, n_total: int) -> np.ndarray:
    return independence_expected(observed, n_total, 2)


def expected_trigram(observed: np.ndarray, n_total: int) -> np.ndarray:
    return independence_expected(observed, n_total, 3)
