"""Filtering, ranking and materialization of scored candidates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np
import pyarrow as pa

from .utils.logging import get_logger
from .vocab import TypeTable

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScoredCandidates:
    """Candidates of one n-gram size that survived scoring, in aggregation order."""

    size: int
    keys: np.ndarray
    counts: np.ndarray
    scores: Dict[str, np.ndarray]

    def __len__(self) -> int:
        return int(self.counts.shape[0])


@dataclass(frozen=True)
class Collocation:
    ids: Tuple[int, ...]
    words: Tuple[str, ...]
    count: int
    scores: Dict[str, float] = field(default_factory=dict)

    @property
    def collocation(self) -> str:
        return " ".join(self.words)

    @property
    def length(self) -> int:
        return len(self.ids)

    def word(self, i: int) -> str:
        return self.words[i] if i < len(self.words) else ""


class CollocationTable:
    """Ranked collocations with their counts and measure columns.

    ``ids`` is the side table of original id tuples, aligned with the rows.
    """

    def __init__(self, rows: Sequence[Collocation], measure_columns: Sequence[str]) -> None:
        self._rows = list(rows)
        self.measure_columns = list(measure_columns)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Collocation]:
        return iter(self._rows)

    def __getitem__(self, idx: int) -> Collocation:
        return self._rows[idx]

    @property
    def rows(self) -> List[Collocation]:
        return list(self._rows)

    @property
    def ids(self) -> List[Tuple[int, ...]]:
        return [r.ids for r in self._rows]

    @property
    def columns(self) -> List[str]:
        return ["collocation", "word1", "word2", "word3", "length", "count", *self.measure_columns]

    def column(self, name: str) -> list:
        return [rec[name] for rec in self.to_records()]

    def head(self, n: int = 10) -> "CollocationTable":
        return CollocationTable(self._rows[:n], self.measure_columns)

    def to_records(self) -> List[Dict[str, object]]:
        records = []
        for r in self._rows:
            rec: Dict[str, object] = {
                "collocation": r.collocation,
                "word1": r.word(0),
                "word2": r.word(1),
                "word3": r.word(2),
                "length": r.length,
                "count": r.count,
            }
            for col in self.measure_columns:
                rec[col] = r.scores[col]
            records.append(rec)
        return records

    def to_arrow(self, include_ids: bool = True) -> pa.Table:
        data: Dict[str, pa.Array] = {
            "collocation": pa.array([r.collocation for r in self._rows], type=pa.string()),
            "word1": pa.array([r.word(0) for r in self._rows], type=pa.string()),
            "word2": pa.array([r.word(1) for r in self._rows], type=pa.string()),
            "word3": pa.array([r.word(2) for r in self._rows], type=pa.string()),
            "length": pa.array([r.length for r in self._rows], type=pa.int32()),
            "count": pa.array([r.count for r in self._rows], type=pa.int64()),
        }
        for col in self.measure_columns:
            # NaN marks a secondary measure undefined on that row
            data[col] = pa.array([r.scores[col] for r in self._rows], type=pa.float64(), from_pandas=True)
        if include_ids:
            data["ids"] = pa.array([list(r.ids) for r in self._rows], type=pa.list_(pa.int64()))
        return pa.table(data)


def _display(ids: Tuple[int, ...], types: Optional[TypeTable]) -> Tuple[str, ...]:
    if types is None:
        return tuple(str(i) for i in ids)
    return tuple(types.label(i) for i in ids)


def rank(
    parts: Sequence[ScoredCandidates],
    primary: str,
    measure_columns: Sequence[str],
    min_count: int = 1,
    boundary: int = 0,
    types: Optional[TypeTable] = None,
) -> CollocationTable:
    """Filter and sort scored candidates into the final table.

    Rows keep their aggregation order (parts in the given order) before a
    stable descending sort on `primary`, so ties are never reordered.
    """
    keys: List[Tuple[int, ...]] = []
    counts: List[int] = []
    scores: Dict[str, List[float]] = {col: [] for col in measure_columns}
    for part in parts:
        for i in range(len(part)):
            keys.append(tuple(int(v) for v in part.keys[i]))
            counts.append(int(part.counts[i]))
            for col in measure_columns:
                scores[col].append(float(part.scores[col][i]))

    if not keys:
        return CollocationTable([], measure_columns)

    count_arr = np.asarray(counts, dtype=np.int64)
    has_boundary = np.array([boundary in k for k in keys], dtype=bool)
    if has_boundary.any():
        logger.debug("Removing %d candidates containing the boundary id", int(has_boundary.sum()))
    keep = ~has_boundary & (count_arr >= min_count)
    idx = np.flatnonzero(keep)

    primary_values = np.asarray(scores[primary], dtype=np.float64)[idx]
    order = idx[np.argsort(-primary_values, kind="stable")]

    rows = [
        Collocation(
            ids=keys[i],
            words=_display(keys[i], types),
            count=counts[i],
            scores={col: scores[col][i] for col in measure_columns},
        )
        for i in order
    ]
    if types is not None:
        unknown = sorted({i for r in rows for i in r.ids if not 0 < i <= len(types)})
        if unknown:
            logger.warning("%d ids missing from the type table are shown as ids: %s", len(unknown), unknown[:10])
    logger.info("Ranked %d collocations by %s (min_count=%d)", len(rows), primary, min_count)
    return CollocationTable(rows, measure_columns)
