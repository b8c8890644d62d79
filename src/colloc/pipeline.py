"""Collocation detection: tabulate, estimate, score and rank in one pass."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional, Sequence

import numpy as np

from .config import CollocationConfig
from .counting.candidates import count_ngrams
from .counting.contingency import ContingencyCells, bigram_cells, trigram_cells
from .ranking import CollocationTable, ScoredCandidates, rank
from .scoring.expected import expected_bigram, expected_trigram, word_totals
from .scoring.measures import score
from .stream import build_stream
from .utils.logging import get_logger
from .vocab import TypeTable

logger = get_logger(__name__)

_CELLS: Dict[int, Callable] = {2: bigram_cells, 3: trigram_cells}
_EXPECTED: Dict[int, Callable[[np.ndarray, int], np.ndarray]] = {2: expected_bigram, 3: expected_trigram}


def score_cells(cells: ContingencyCells, config: CollocationConfig) -> ScoredCandidates:
    """Expected counts and measures for one size; rows undefined under the primary measure are dropped."""
    expected = _EXPECTED[cells.size](cells.observed, cells.n_total)
    values, valid = score(
        cells.observed,
        expected,
        word_totals(cells.observed, cells.size),
        config.measures,
        epsilon=config.epsilon,
        primary=config.primary,
    )
    invalid = int((~valid).sum())
    if invalid:
        logger.info("Dropping %d %d-gram rows with undefined %s", invalid, cells.size, config.primary.column)
    return ScoredCandidates(
        size=cells.size,
        keys=cells.keys[valid],
        counts=cells.counts[valid],
        scores={col: v[valid] for col, v in values.items()},
    )


def tabulate(
    stream: Iterable[int],
    size: int,
    config: CollocationConfig,
    features: Optional[Iterable[int]] = None,
) -> ContingencyCells:
    counts = count_ngrams(
        stream,
        size,
        features=features,
        boundary=config.boundary,
        num_workers=config.num_workers,
        progress=config.progress,
    )
    return _CELLS[size](counts)


def find_collocations(
    stream: Iterable[int],
    types: Optional[TypeTable] = None,
    config: Optional[CollocationConfig] = None,
    features: Optional[Iterable[int]] = None,
) -> CollocationTable:
    """Detect and rank bigram/trigram collocations in a token-id stream.

    `features` restricts candidates to n-grams made only of the given ids
    (None allows every real id). Minimum-count filtering happens after the
    statistics are computed, so the independence model always sees the full
    co-occurrence structure.
    """
    config = config or CollocationConfig()
    stream_arr = np.asarray(stream if isinstance(stream, np.ndarray) else list(stream), dtype=np.int64)
    feature_list = None if features is None else sorted({int(f) for f in features})
    columns = [m.column for m in config.measures]

    parts = []
    for size in config.sizes:
        cells = tabulate(stream_arr, size, config, feature_list)
        logger.info("Scoring %d %d-gram candidates (N=%d)", len(cells), size, cells.n_total)
        parts.append(score_cells(cells, config))

    return rank(
        parts,
        primary=config.primary.column,
        measure_columns=columns,
        min_count=config.min_count,
        boundary=config.boundary,
        types=types,
    )


def find_collocations_in_documents(
    documents: Iterable[Sequence[int]],
    types: Optional[TypeTable] = None,
    config: Optional[CollocationConfig] = None,
    features: Optional[Iterable[int]] = None,
) -> CollocationTable:
    config = config or CollocationConfig()
    stream = build_stream(documents, boundary=config.boundary)
    return find_collocations(stream, types=types, config=config, features=features)
