import pytest

from colloc.stream import BOUNDARY, build_stream
from colloc.vocab import TypeTable


def test_type_table_is_one_based():
    types = TypeTable.from_mapping({1: "the", 2: "cat", 3: "sat"})
    assert types.type_for(1) == "the"
    assert types.id_for("sat") == 3
    assert types.encode(["cat", "the"]) == [2, 1]
    with pytest.raises(KeyError):
        types.type_for(BOUNDARY)


def test_type_table_rejects_duplicates():
    with pytest.raises(ValueError):
        TypeTable(types=("a", "a"))


def test_build_stream_terminates_documents():
    stream = build_stream([[1, 2], [3]])
    assert stream.tolist() == [1, 2, 0, 3, 0]


def test_build_stream_rejects_sentinel():
    with pytest.raises(ValueError):
        build_stream([[1, 0, 2]])
