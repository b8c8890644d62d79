import numpy as np
import pytest

from colloc.counting.candidates import NgramCounts, aggregate, count_ngrams, merge_counts, ngram_windows
from colloc.errors import ConfigurationError


def test_bigram_counts_skip_boundary():
    counts = count_ngrams([1, 2, 1, 2, 3, 0, 1, 2], 2)
    assert counts.as_dict() == {(1, 2): 3, (2, 1): 1, (2, 3): 1}
    assert counts.total == 5


def test_keys_are_sorted():
    counts = count_ngrams([3, 1, 2, 1, 3, 1], 2)
    keys = [tuple(k) for k in counts.keys.tolist()]
    assert keys == sorted(keys)


def test_trigram_counts():
    counts = count_ngrams([1, 2, 3, 1, 2, 3, 0, 1, 2], 3)
    assert counts.as_dict() == {(1, 2, 3): 2, (2, 3, 1): 1, (3, 1, 2): 1}


def test_feature_filter():
    counts = count_ngrams([1, 2, 3, 2, 3], 2, features={2, 3})
    assert counts.as_dict() == {(2, 3): 2, (3, 2): 1}


def test_features_with_boundary_keep_boundary_candidates():
    counts = count_ngrams([1, 2, 0, 1], 2, features={0, 1, 2})
    assert counts.get((2, 0)) == 1
    assert counts.get((0, 1)) == 1


def test_short_stream_is_empty():
    counts = count_ngrams([1, 2], 3)
    assert len(counts) == 0
    assert counts.keys.shape == (0, 3)


def test_invalid_size():
    with pytest.raises(ConfigurationError):
        count_ngrams([1, 2, 3], 0)


def test_negative_ids_rejected():
    with pytest.raises(ValueError):
        count_ngrams([1, -2, 3], 2)


def test_windows():
    windows = ngram_windows(np.array([1, 2, 3, 4]), 3)
    assert windows.tolist() == [[1, 2, 3], [2, 3, 4]]


def test_merge_reaggregates_duplicate_keys():
    a = aggregate(np.array([[1, 2], [2, 3]]), np.array([2, 1]), 2)
    b = aggregate(np.array([[1, 2], [4, 5]]), np.array([5, 1]), 2)
    merged = merge_counts([a, b, NgramCounts.empty(2)], 2)
    assert merged.as_dict() == {(1, 2): 7, (2, 3): 1, (4, 5): 1}


def test_parallel_matches_serial():
    rng = np.random.default_rng(7)
    stream = rng.integers(0, 12, size=40_000)
    serial = count_ngrams(stream, 3)
    parallel = count_ngrams(stream, 3, num_workers=2)
    assert np.array_equal(serial.keys, parallel.keys)
    assert np.array_equal(serial.counts, parallel.counts)


def test_get_reuses_cached_index():
    counts = count_ngrams([1, 2, 1, 2, 3], 2)
    assert counts.get((1, 2)) == 2
    assert counts.get((3, 1)) == 0
    assert counts._index is counts._index
    assert counts.as_dict() == {(1, 2): 2, (2, 1): 1, (2, 3): 1}
