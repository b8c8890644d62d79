"""Scoring of variable-length sequences from external lambda/sigma estimates.

The estimates themselves (Blaheta and Johnson's lambda and its standard
error) come from an external producer; this module turns them into z-scores
and one-sided normal p-values and ranks them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Protocol, Sequence, Tuple

import numpy as np
import pyarrow as pa
from scipy.stats import norm

from .config import SequenceConfig
from .utils.logging import get_logger
from .vocab import TypeTable

logger = get_logger(__name__)


@dataclass(frozen=True)
class SequenceEstimate:
    ids: Tuple[int, ...]
    count: int
    lam: float
    sigma: float
    lam1: Optional[float] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SequenceEstimate":
        lam1 = d.get("lambda1")
        return cls(
            ids=tuple(int(i) for i in d["ids"]),
            count=int(d["count"]),
            lam=float(d["lambda"]),
            sigma=float(d["sigma"]),
            lam1=float(lam1) if lam1 is not None else None,
        )


class SequenceEstimator(Protocol):
    def __call__(
        self,
        stream: Sequence[int],
        types: Optional[TypeTable],
        *,
        sizes: Tuple[int, ...],
        min_count: int,
        method: str,
        smoothing: float,
    ) -> Iterable[SequenceEstimate]: ...


@dataclass(frozen=True)
class ScoredSequence:
    ids: Tuple[int, ...]
    words: Tuple[str, ...]
    count: int
    lam: float
    sigma: float
    z: float
    p: float
    lam1: Optional[float] = None

    @property
    def collocation(self) -> str:
        return " ".join(self.words)

    @property
    def length(self) -> int:
        return len(self.ids)


class SequenceTable:
    def __init__(self, rows: Sequence[ScoredSequence], method: str) -> None:
        self._rows = list(rows)
        self.method = method

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[ScoredSequence]:
        return iter(self._rows)

    def __getitem__(self, idx: int) -> ScoredSequence:
        return self._rows[idx]

    @property
    def ids(self) -> List[Tuple[int, ...]]:
        return [r.ids for r in self._rows]

    def head(self, n: int = 10) -> "SequenceTable":
        return SequenceTable(self._rows[:n], self.method)

    def to_records(self) -> List[Dict[str, object]]:
        records = []
        for r in self._rows:
            rec: Dict[str, object] = {
                "collocation": r.collocation,
                "length": r.length,
                "count": r.count,
                "lambda": r.lam,
            }
            if self.method == "lambda1":
                rec["lambda1"] = r.lam1
            rec.update({"sigma": r.sigma, "z": r.z, "p": r.p})
            records.append(rec)
        return records

    def schema(self) -> pa.Schema:
        fields = [
            ("collocation", pa.string()),
            ("length", pa.int64()),
            ("count", pa.int64()),
            ("lambda", pa.float64()),
        ]
        if self.method == "lambda1":
            fields.append(("lambda1", pa.float64()))
        fields += [("sigma", pa.float64()), ("z", pa.float64()), ("p", pa.float64())]
        return pa.schema(fields)

    def to_arrow(self, include_ids: bool = True) -> pa.Table:
        table = pa.Table.from_pylist(self.to_records(), schema=self.schema())
        if include_ids:
            table = table.append_column("ids", pa.array([list(r.ids) for r in self._rows], type=pa.list_(pa.int64())))
        return table


def score_sequences(
    estimates: Iterable[SequenceEstimate],
    types: Optional[TypeTable] = None,
    config: Optional[SequenceConfig] = None,
) -> SequenceTable:
    config = config or SequenceConfig()
    kept: List[SequenceEstimate] = []
    degenerate = 0
    for est in estimates:
        if len(est.ids) not in config.sizes or est.count < config.min_count:
            continue
        numerator = est.lam1 if config.method == "lambda1" else est.lam
        if numerator is None or est.sigma == 0 or not np.isfinite(est.sigma):
            degenerate += 1
            continue
        kept.append(est)
    if degenerate:
        logger.info("Dropping %d sequences without a usable lambda/sigma", degenerate)

    if not kept:
        return SequenceTable([], config.method)

    if config.method == "lambda1":
        num = np.array([e.lam1 for e in kept], dtype=np.float64)
    else:
        num = np.array([e.lam for e in kept], dtype=np.float64)
    sigma = np.array([e.sigma for e in kept], dtype=np.float64)
    z = num / sigma
    p = norm.sf(z)
    order = np.argsort(-z, kind="stable")

    rows = []
    for i in order:
        e = kept[i]
        words = tuple(types.label(i) for i in e.ids) if types is not None else tuple(str(x) for x in e.ids)
        rows.append(
            ScoredSequence(
                ids=e.ids,
                words=words,
                count=e.count,
                lam=e.lam,
                sigma=e.sigma,
                z=float(z[i]),
                p=float(p[i]),
                lam1=e.lam1,
            )
        )
    logger.info("Scored %d sequences (method=%s, min_count=%d)", len(rows), config.method, config.min_count)
    return SequenceTable(rows, config.method)


def find_sequences(
    stream: Sequence[int],
    types: Optional[TypeTable],
    estimator: SequenceEstimator,
    config: Optional[SequenceConfig] = None,
) -> SequenceTable:
    config = config or SequenceConfig()
    estimates = estimator(
        stream,
        types,
        sizes=config.sizes,
        min_count=config.min_count,
        method=config.method,
        smoothing=config.smoothing,
    )
    return score_sequences(estimates, types, config)
