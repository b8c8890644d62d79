from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
import json

import yaml

from .errors import ConfigurationError
from .scoring.measures import Measure, parse_method

COLLOCATION_SIZES = (2, 3)
SEQUENCE_SIZES = (2, 3, 4, 5)
SEQUENCE_METHODS = ("lambda", "lambda1")


def _normalize_sizes(sizes: Any, allowed: Tuple[int, ...], what: str) -> Tuple[int, ...]:
    if isinstance(sizes, int):
        sizes = (sizes,)
    out = []
    for s in sizes:
        s = int(s)
        if s not in allowed:
            raise ConfigurationError(
                f"Unsupported {what} size {s}; supported sizes are {', '.join(map(str, allowed))}."
            )
        if s not in out:
            out.append(s)
    if not out:
        raise ConfigurationError(f"At least one {what} size is required.")
    return tuple(out)


@dataclass(frozen=True)
class CollocationConfig:
    """Parameters for one contingency-table collocation run.

    `method` is one of lr, chi2, pmi, dice or all. With `all` every measure is
    computed and rows are ranked by G2. `epsilon` offsets zero cells in the
    likelihood-ratio statistic.
    """

    sizes: Tuple[int, ...] = (2,)
    method: str = "lr"
    min_count: int = 1
    epsilon: float = 1e-9
    boundary: int = 0
    num_workers: int = 1
    progress: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "sizes", _normalize_sizes(self.sizes, COLLOCATION_SIZES, "collocation"))
        object.__setattr__(self, "method", parse_method(self.method).value)
        if int(self.min_count) < 0:
            raise ConfigurationError("min_count must be non-negative")
        if not float(self.epsilon) > 0:
            raise ConfigurationError("epsilon must be positive")
        if int(self.boundary) < 0:
            raise ConfigurationError("boundary id must be non-negative")
        if int(self.num_workers) < 1:
            raise ConfigurationError("num_workers must be >= 1")

    @property
    def measures(self) -> Tuple[Measure, ...]:
        return parse_method(self.method).expand()

    @property
    def primary(self) -> Measure:
        return self.measures[0]

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["sizes"] = list(self.sizes)
        return d

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "CollocationConfig":
        known = {k: v for k, v in d.items() if k in CollocationConfig.__dataclass_fields__}
        if "sizes" in known:
            known["sizes"] = known["sizes"] if isinstance(known["sizes"], int) else tuple(known["sizes"])
        return CollocationConfig(**known)

    @staticmethod
    def from_json(s: str) -> "CollocationConfig":
        return CollocationConfig.from_dict(json.loads(s))


@dataclass(frozen=True)
class SequenceConfig:
    """Parameters for the variable-length (lambda) sequence scorer.

    `min_count` and `smoothing` are passed through to the external estimator;
    `min_count` is applied again when the estimates are scored.
    """

    sizes: Tuple[int, ...] = (2,)
    min_count: int = 2
    method: str = "lambda"
    smoothing: float = 0.5

    def __post_init__(self) -> None:
        object.__setattr__(self, "sizes", _normalize_sizes(self.sizes, SEQUENCE_SIZES, "sequence"))
        method = str(self.method).strip().lower()
        if method not in SEQUENCE_METHODS:
            raise ConfigurationError(f"Unknown sequence method '{self.method}'. Use lambda|lambda1.")
        object.__setattr__(self, "method", method)
        if int(self.min_count) < 0:
            raise ConfigurationError("min_count must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["sizes"] = list(self.sizes)
        return d

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "SequenceConfig":
        known = {k: v for k, v in d.items() if k in SequenceConfig.__dataclass_fields__}
        if "sizes" in known:
            known["sizes"] = known["sizes"] if isinstance(known["sizes"], int) else tuple(known["sizes"])
        return SequenceConfig(**known)

    @staticmethod
    def from_json(s: str) -> "SequenceConfig":
        return SequenceConfig.from_dict(json.loads(s))


def load_config(path: Optional[str]) -> Dict[str, Any]:
    """Read a YAML or JSON config file into a plain mapping."""
    if not path:
        return {}
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")
    text = config_path.read_text(encoding="utf-8")
    if config_path.suffix.lower() == ".json":
        payload = json.loads(text)
    else:
        payload = yaml.safe_load(text)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValueError("Config must be a mapping.")
    return payload


def config_section(payload: Dict[str, Any], name: str) -> Dict[str, Any]:
    if name in payload and isinstance(payload[name], dict):
        return payload[name]
    return payload
