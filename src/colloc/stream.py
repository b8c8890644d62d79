"""Token stream construction."""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

BOUNDARY = 0


def build_stream(documents: Iterable[Sequence[int]], boundary: int = BOUNDARY) -> np.ndarray:
    """Concatenate documents into one id stream, terminating each with `boundary`.

    Candidates that straddle two documents contain the sentinel and are
    removed downstream.
    """
    parts: list[np.ndarray] = []
    for doc in documents:
        arr = np.asarray(list(doc), dtype=np.int64)
        if arr.size:
            if int(arr.min()) < 0:
                raise ValueError("Token ids must be non-negative.")
            if np.any(arr == boundary):
                raise ValueError(f"Document contains the boundary id {boundary}.")
        parts.append(arr)
        parts.append(np.array([boundary], dtype=np.int64))
    if not parts:
        return np.zeros(0, dtype=np.int64)
    return np.concatenate(parts)
