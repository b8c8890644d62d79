"""colloc: collocation detection over token-id streams.

Structure
- colloc.counting: adjacent n-gram tabulation, marginals, contingency cells
- colloc.scoring: independence model and association measures
- colloc.ranking / colloc.pipeline: filtering, ranking, the batch driver
- colloc.sequences: z/p scoring of external lambda/sigma estimates
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("colloc")
except PackageNotFoundError:  # pragma: no cover - runtime fallback
    __version__ = "0.0.0"

from .config import CollocationConfig, SequenceConfig
from .errors import CollocError, ConfigurationError
from .pipeline import find_collocations, find_collocations_in_documents
from .ranking import Collocation, CollocationTable
from .scoring.measures import Measure
from .sequences import SequenceEstimate, SequenceTable, find_sequences, score_sequences
from .stream import BOUNDARY, build_stream
from .vocab import TypeTable

__all__ = [
    "__version__",
    "BOUNDARY",
    "CollocError",
    "Collocation",
    "CollocationConfig",
    "CollocationTable",
    "ConfigurationError",
    "Measure",
    "SequenceConfig",
    "SequenceEstimate",
    "SequenceTable",
    "TypeTable",
    "build_stream",
    "find_collocations",
    "find_collocations_in_documents",
    "find_sequences",
    "score_sequences",
]
