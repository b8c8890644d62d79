"""Independence model and association measures."""

from colloc.scoring.expected import expected_bigram, expected_trigram, independence_expected, word_totals
from colloc.scoring.measures import MEASURES, Measure, parse_method, score

__all__ = [
    "expected_bigram",
    "expected_trigram",
    "independence_expected",
    "word_totals",
    "MEASURES",
    "Measure",
    "parse_method",
    "score",
]
