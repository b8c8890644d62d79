"""Candidate tabulation and contingency cells."""

from colloc.counting.candidates import NgramCounts, aggregate, count_ngrams, merge_counts, ngram_windows
from colloc.counting.contingency import ContingencyCells, bigram_cells, contingency_cells, trigram_cells
from colloc.counting.marginals import MarginalTable, marginal_table

__all__ = [
    "NgramCounts",
    "aggregate",
    "count_ngrams",
    "merge_counts",
    "ngram_windows",
    "ContingencyCells",
    "bigram_cells",
    "contingency_cells",
    "trigram_cells",
    "MarginalTable",
    "marginal_table",
]
