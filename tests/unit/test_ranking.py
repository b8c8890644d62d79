import numpy as np

from colloc.ranking import ScoredCandidates, rank
from colloc.vocab import TypeTable

TYPES = TypeTable(types=("the", "cat", "sat", "mat"))


def _part(size, keys, counts, g2):
    return ScoredCandidates(
        size=size,
        keys=np.array(keys, dtype=np.int64),
        counts=np.array(counts, dtype=np.int64),
        scores={"G2": np.array(g2, dtype=np.float64)},
    )


def test_sorted_descending_with_stable_ties():
    part = _part(2, [[1, 2], [1, 3], [2, 3], [3, 4]], [1, 1, 1, 1], [2.0, 5.0, 2.0, 2.0])
    table = rank([part], primary="G2", measure_columns=["G2"], types=TYPES)
    assert table.ids == [(1, 3), (1, 2), (2, 3), (3, 4)]


def test_bigrams_before_trigrams_on_ties():
    bi = _part(2, [[1, 2]], [2], [1.0])
    tri = _part(3, [[1, 2, 3]], [2], [1.0])
    table = rank([bi, tri], primary="G2", measure_columns=["G2"], types=TYPES)
    assert table.ids == [(1, 2), (1, 2, 3)]
    assert table[1].collocation == "the cat sat"
    assert table[0].word(2) == ""


def test_min_count_is_inclusive():
    part = _part(2, [[1, 2], [2, 3], [3, 4]], [1, 2, 3], [3.0, 2.0, 1.0])
    table = rank([part], primary="G2", measure_columns=["G2"], min_count=2, types=TYPES)
    assert [r.count for r in table] == [2, 3]


def test_boundary_rows_removed():
    part = _part(2, [[0, 1], [1, 0], [1, 2]], [9, 9, 1], [9.0, 8.0, 1.0])
    table = rank([part], primary="G2", measure_columns=["G2"], types=TYPES)
    assert table.ids == [(1, 2)]


def test_empty():
    table = rank([], primary="G2", measure_columns=["G2"])
    assert len(table) == 0
    assert table.to_arrow().num_rows == 0


def test_arrow_and_records():
    part = _part(2, [[1, 2]], [4], [1.5])
    table = rank([part], primary="G2", measure_columns=["G2"], types=TYPES)
    rec = table.to_records()[0]
    assert rec == {"collocation": "the cat", "word1": "the", "word2": "cat", "word3": "", "length": 2, "count": 4, "G2": 1.5}
    arrow = table.to_arrow()
    assert arrow.column_names == table.columns + ["ids"]
    assert arrow.column("ids").to_pylist() == [[1, 2]]


def test_ids_without_type_table():
    part = _part(2, [[5, 6]], [1], [0.0])
    table = rank([part], primary="G2", measure_columns=["G2"])
    assert table[0].collocation == "5 6"
