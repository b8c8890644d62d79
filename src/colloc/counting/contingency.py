"""Contingency cells for bigram and trigram candidates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..utils.logging import get_logger
from .candidates import NgramCounts
from .marginals import MarginalTable, lookup, marginal_table

logger = get_logger(__name__)

BIGRAM_MARGINALS: Dict[str, Tuple[int, ...]] = {"w1": (0,), "w2": (1,)}
TRIGRAM_MARGINALS: Dict[str, Tuple[int, ...]] = {
    "w1": (0,),
    "w2": (1,),
    "w3": (2,),
    "w12": (0, 1),
    "w13": (0, 2),
    "w23": (1, 2),
}


@dataclass(frozen=True)
class ContingencyCells:
    """Observed cells for every surviving candidate.

    `observed` has one column per cell in n11, n12, n21, n22 (or n111 .. n222)
    order; every row sums to `n_total`.
    """

    size: int
    keys: np.ndarray
    counts: np.ndarray
    observed: np.ndarray
    n_total: int
    dropped: int = 0

    def __len__(self) -> int:
        return int(self.counts.shape[0])

    @property
    def cell_names(self) -> List[str]:
        names = []
        for i in range(2 ** self.size):
            bits = format(i, f"0{self.size}b")
            names.append("n" + "".join("1" if b == "0" else "2" for b in bits))
        return names

    def cell(self, name: str) -> np.ndarray:
        return self.observed[:, self.cell_names.index(name)]


def build_marginals(counts: NgramCounts, layout: Dict[str, Tuple[int, ...]]) -> Dict[str, MarginalTable]:
    return {name: marginal_table(counts, positions, name) for name, positions in layout.items()}


def _join(
    counts: NgramCounts,
    marginals: Dict[str, MarginalTable],
    layout: Dict[str, Tuple[int, ...]],
) -> Tuple[np.ndarray, np.ndarray, Dict[str, np.ndarray], int]:
    found = np.ones(len(counts), dtype=bool)
    values: Dict[str, np.ndarray] = {}
    for name, positions in layout.items():
        v, ok = lookup(marginals[name], counts.keys, positions)
        values[name] = v
        found &= ok
    dropped = int((~found).sum())
    if dropped:
        logger.info("Dropping %d %d-gram rows with missing marginal counts", dropped, counts.size)
    return (
        counts.keys[found],
        counts.counts[found],
        {name: v[found] for name, v in values.items()},
        dropped,
    )


def bigram_cells(counts: NgramCounts, marginals: Optional[Dict[str, MarginalTable]] = None) -> ContingencyCells:
    if marginals is None:
        marginals = build_marginals(counts, BIGRAM_MARGINALS)
    keys, joint, m, dropped = _join(counts, marginals, BIGRAM_MARGINALS)
    n_total = int(joint.sum())
    n11 = joint
    n12 = m["w1"] - joint
    n21 = m["w2"] - joint
    n22 = n_total - (n11 + n12 + n21)
    observed = np.stack([n11, n12, n21, n22], axis=1).astype(np.int64)
    return ContingencyCells(size=2, keys=keys, counts=joint, observed=observed, n_total=n_total, dropped=dropped)


def trigram_cells(counts: NgramCounts, marginals: Optional[Dict[str, MarginalTable]] = None) -> ContingencyCells:
    if marginals is None:
        marginals = build_marginals(counts, TRIGRAM_MARGINALS)
    keys, c123, m, dropped = _join(counts, marginals, TRIGRAM_MARGINALS)
    n_total = int(c123.sum())
    n111 = c123
    n112 = m["w12"] - c123
    n121 = m["w13"] - c123
    n122 = m["w1"] - m["w12"] - n121
    n211 = m["w23"] - c123
    n212 = m["w2"] - m["w12"] - n211
    n221 = m["w3"] - m["w13"] - n211
    n222 = n_total - m["w1"] - n211 - n212 - n221
    observed = np.stack([n111, n112, n121, n122, n211, n212, n221, n222], axis=1).astype(np.int64)
    return ContingencyCells(size=3, keys=keys, counts=c123, observed=observed, n_total=n_total, dropped=dropped)


def contingency_cells(counts: NgramCounts) -> ContingencyCells:
    if counts.size == 2:
        return bigram_cells(counts)
    if counts.size == 3:
        return trigram_cells(counts)
    raise ValueError(f"No contingency layout for {counts.size}-grams")
