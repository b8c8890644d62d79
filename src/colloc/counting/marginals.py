"""Marginal and pairwise count lookups keyed by id or id tuple."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, List, Optional, Tuple

import numpy as np

from ..utils.logging import get_logger
from .candidates import NgramCounts, aggregate

logger = get_logger(__name__)

Key = Tuple[int, ...]


@dataclass
class MarginalTable:
    """Hash map from a key (tuple of ids) to its summed count."""

    name: str
    counts: Dict[Key, int]
    duplicates: List[Key] = field(default_factory=list)
    _arrays: Optional[Tuple[np.ndarray, np.ndarray]] = field(default=None, init=False, repr=False, compare=False)

    def __len__(self) -> int:
        return len(self.counts)

    def arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Keys as an `(m, width)` id matrix and their counts, cached."""
        if self._arrays is None:
            width = len(next(iter(self.counts))) if self.counts else 1
            keys = np.array(list(self.counts), dtype=np.int64).reshape(-1, width)
            values = np.fromiter(self.counts.values(), dtype=np.int64, count=len(self.counts))
            self._arrays = (keys, values)
        return self._arrays

    def get(self, key: Key) -> Optional[int]:
        return self.counts.get(key)

    @classmethod
    def from_rows(cls, name: str, keys: Iterable[Hashable], counts: Iterable[int]) -> "MarginalTable":
        """Build the lookup from aggregated rows.

        A key may appear only once. Repeated keys are collapsed to their first
        row and reported with a warning; the run continues.
        """
        table: Dict[Key, int] = {}
        dups: List[Key] = []
        for key, count in zip(keys, counts):
            k = _as_key(key)
            if k in table:
                dups.append(k)
                continue
            table[k] = int(count)
        if dups:
            logger.warning("Dropping %d duplicate rows in %s: %s", len(dups), name, dups[:10])
        return cls(name=name, counts=table, duplicates=dups)


def _as_key(key: Hashable) -> Key:
    if isinstance(key, (tuple, list, np.ndarray)):
        return tuple(int(v) for v in key)
    return (int(key),)


def marginal_table(counts: NgramCounts, positions: Tuple[int, ...], name: Optional[str] = None) -> MarginalTable:
    """Sum the joint counts grouped by the ids at `positions`."""
    label = name or "w" + "".join(str(p + 1) for p in positions)
    if not len(counts):
        return MarginalTable(name=label, counts={})
    sub = counts.keys[:, list(positions)]
    grouped = aggregate(sub, counts.counts, len(positions))
    return MarginalTable.from_rows(label, grouped.keys, grouped.counts)


def _encode(keys: np.ndarray, base: int) -> np.ndarray:
    """Mixed-radix code per row; preserves lexicographic row order."""
    if base ** keys.shape[1] > np.iinfo(np.int64).max:
        raise ValueError(f"Ids up to {base - 1} are too large to join {keys.shape[1]}-column keys.")
    codes = np.zeros(keys.shape[0], dtype=np.int64)
    for j in range(keys.shape[1]):
        codes = codes * base + keys[:, j]
    return codes


def lookup(table: MarginalTable, keys: np.ndarray, positions: Tuple[int, ...]) -> Tuple[np.ndarray, np.ndarray]:
    """Look up every row's key; returns values and a mask of rows that were found."""
    query = np.asarray(keys, dtype=np.int64)[:, list(positions)]
    values = np.zeros(query.shape[0], dtype=np.int64)
    found = np.zeros(query.shape[0], dtype=bool)
    if not query.shape[0] or not len(table):
        return values, found
    table_keys, table_values = table.arrays()
    base = int(max(table_keys.max(), query.max())) + 1
    table_codes = _encode(table_keys, base)
    order = np.argsort(table_codes, kind="stable")
    table_codes = table_codes[order]
    table_values = table_values[order]
    query_codes = _encode(query, base)
    pos = np.minimum(np.searchsorted(table_codes, query_codes), table_codes.shape[0] - 1)
    found = table_codes[pos] == query_codes
    values[found] = table_values[pos[found]]
    return values, found
