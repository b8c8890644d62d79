"""Association measures over observed and expected contingency cells.

All functions take an ``(m, 2**k)`` array of observed cells and the matching
expected cells, with column 0 holding the fully joint cell. Each returns the
per-row values together with a boolean mask of rows on which the measure is
defined.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Optional, Sequence, Tuple

import numpy as np

from ..errors import ConfigurationError


class Measure(str, Enum):
    LR = "lr"
    CHI2 = "chi2"
    PMI = "pmi"
    DICE = "dice"
    ALL = "all"

    @property
    def column(self) -> str:
        return _COLUMNS[self]

    def expand(self) -> Tuple["Measure", ...]:
        if self is Measure.ALL:
            return (Measure.LR, Measure.CHI2, Measure.PMI, Measure.DICE)
        return (self,)


_COLUMNS = {
    Measure.LR: "G2",
    Measure.CHI2: "X2",
    Measure.PMI: "pmi",
    Measure.DICE: "dice",
    Measure.ALL: "G2",
}

_ALIASES = {
    "lr": Measure.LR,
    "g2": Measure.LR,
    "chi2": Measure.CHI2,
    "x2": Measure.CHI2,
    "pmi": Measure.PMI,
    "dice": Measure.DICE,
    "all": Measure.ALL,
}


def parse_method(method: "str | Measure") -> Measure:
    if isinstance(method, Measure):
        return method
    key = str(method).strip().lower()
    if key not in _ALIASES:
        raise ConfigurationError(f"Unknown association measure '{method}'. Use lr|chi2|pmi|dice|all.")
    return _ALIASES[key]


def likelihood_ratio(
    observed: np.ndarray,
    expected: np.ndarray,
    word_totals: np.ndarray,
    epsilon: float,
) -> Tuple[np.ndarray, np.ndarray]:
    # epsilon keeps log() finite for empty cells; 0 * log(eps) contributes 0
    n = observed.astype(np.float64)
    values = 2.0 * np.sum(n * np.log(n / (expected + epsilon) + epsilon), axis=1)
    return values, np.isfinite(values)


def chi_squared(
    observed: np.ndarray,
    expected: np.ndarray,
    word_totals: np.ndarray,
    epsilon: float,
) -> Tuple[np.ndarray, np.ndarray]:
    valid = np.all(expected > 0, axis=1)
    n = observed.astype(np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        values = np.sum((n - expected) ** 2 / expected, axis=1)
    values = np.where(valid, values, np.nan)
    return values, valid


def pointwise_mutual_information(
    observed: np.ndarray,
    expected: np.ndarray,
    word_totals: np.ndarray,
    epsilon: float,
) -> Tuple[np.ndarray, np.ndarray]:
    joint = observed[:, 0].astype(np.float64)
    e_joint = expected[:, 0]
    valid = (e_joint > 0) & (joint > 0)
    with np.errstate(divide="ignore", invalid="ignore"):
        values = np.log(joint / e_joint)
    values = np.where(valid, values, np.nan)
    return values, valid


def dice(
    observed: np.ndarray,
    expected: np.ndarray,
    word_totals: np.ndarray,
    epsilon: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """k * n_joint over the summed single-word totals (k = n-gram size)."""
    k = word_totals.shape[1]
    denom = word_totals.sum(axis=1).astype(np.float64)
    valid = denom > 0
    with np.errstate(divide="ignore", invalid="ignore"):
        values = k * observed[:, 0] / denom
    values = np.where(valid, values, np.nan)
    return values, valid


MeasureFn = Callable[[np.ndarray, np.ndarray, np.ndarray, float], Tuple[np.ndarray, np.ndarray]]

MEASURES: Dict[Measure, MeasureFn] = {
    Measure.LR: likelihood_ratio,
    Measure.CHI2: chi_squared,
    Measure.PMI: pointwise_mutual_information,
    Measure.DICE: dice,
}


def resolve(measures: Sequence[Measure]) -> list[Tuple[Measure, MeasureFn]]:
    resolved = []
    for m in measures:
        for item in parse_method(m).expand():
            resolved.append((item, MEASURES[item]))
    return resolved


def score(
    observed: np.ndarray,
    expected: np.ndarray,
    word_totals: np.ndarray,
    measures: Sequence[Measure],
    epsilon: float = 1e-9,
    primary: Optional[Measure] = None,
) -> Tuple[Dict[str, np.ndarray], np.ndarray]:
    """Compute the requested measures.

    Returns a mapping of output column name to values and the mask of rows on
    which the primary measure (the first requested one by default) is
    defined. Other columns hold NaN where they are undefined, so every column
    equals the one computed on its own.
    """
    resolved = resolve(measures)
    primary = parse_method(primary).expand()[0] if primary is not None else resolved[0][0]
    valid = np.ones(observed.shape[0], dtype=bool)
    values: Dict[str, np.ndarray] = {}
    for measure, fn in resolved:
        col, ok = fn(observed, expected, word_totals, epsilon)
        values[measure.column] = col
        if measure is primary:
            valid = ok
    return values, valid
